"""
Controller sticker layouts: grid of coloured buttons printed as stickers.
"""

from .models import ButtonSize, ControllerButton, StoredLayout
from .service import COLORS, StickerLayoutService, create_default_layout

__all__ = [
    "COLORS",
    "ButtonSize",
    "ControllerButton",
    "StickerLayoutService",
    "StoredLayout",
    "create_default_layout",
]
