"""
Error taxonomy shared by every package.

All errors inherit from StudioHelpersError for easy catching at the
user boundary (facade and CLI).
"""


class StudioHelpersError(Exception):
    """Base exception for all Studio One Helpers failures."""
    pass


class ParseError(StudioHelpersError):
    """Raised when import input is malformed. Fatal to the current import."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not parse {source}: {reason}")


class StorageError(StudioHelpersError):
    """Raised when a key-value store operation fails."""
    pass


class CapacityError(StudioHelpersError):
    """Raised when a write is rejected because the store is full."""
    pass


class ImportFailedError(StudioHelpersError):
    """Raised when an import could not be persisted even after fallbacks."""
    pass


class LayoutError(StudioHelpersError):
    """Raised when a sticker layout is invalid."""
    pass
