"""
Document delivery.

A sink receives a file name and its bytes. FileDeliverySink writes into an
output directory; the name is reduced to its base name so a caller can never
write outside that directory.
"""

import logging
from pathlib import Path, PureWindowsPath
from typing import Protocol, Union

from studio_helpers.errors import StudioHelpersError


logger = logging.getLogger(__name__)


class DeliveryError(StudioHelpersError):
    """Raised when a document cannot be delivered."""
    pass


class DeliverySink(Protocol):
    def deliver(self, file_name: str, data: bytes) -> Path:
        ...


def safe_file_name(file_name: str) -> str:
    """Base name of file_name with either path separator style stripped."""
    name = PureWindowsPath(file_name).name
    name = Path(name).name
    if not name or name in (".", ".."):
        raise DeliveryError(f"Invalid file name: {file_name!r}")
    return name


class FileDeliverySink:
    """Writes delivered documents into one directory."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def deliver(self, file_name: str, data: bytes) -> Path:
        """
        Write data to output_dir/file_name, replacing any existing file.

        Returns:
            Path of the written file

        Raises:
            DeliveryError: If the name is unusable or the write fails
        """
        path = self.output_dir / safe_file_name(file_name)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise DeliveryError(f"Failed to write {path}: {e}") from e
        logger.info(f"Delivered {path} ({len(data)} bytes)")
        return path
