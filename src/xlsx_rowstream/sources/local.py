"""Local file system data source implementation."""

from collections.abc import Iterator
import logging
from pathlib import Path
import shutil
from typing import Any, BinaryIO

from typing_extensions import override

from xlsx_rowstream.sources.base import XLSX_MIME_TYPE, StreamSource

logger = logging.getLogger(__name__)


class LocalFileSource(StreamSource):
    """
    A workbook that already lives on the local file system.

    The reader opens this file in place. It is only spooled when passed to
    ``StreamingReader.from_stream`` explicitly.
    """

    def __init__(self, file_path: str | Path, chunk_size: int = 16777216) -> None:
        """
        Args:
            file_path: Path to the XLSX file.
            chunk_size: Size of chunks for get_stream and copy_to (default: 16MB).

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the path is not a regular file.
        """
        self.file_path = Path(file_path)
        self.chunk_size = chunk_size

        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        if not self.file_path.is_file():
            raise ValueError(f"Path is not a file: {file_path}")

    def _open(self) -> BinaryIO:
        try:
            return self.file_path.open("rb")
        except OSError as e:
            logger.exception("Error opening %s: %s", self.file_path, e)
            raise OSError(f"Failed to read file {self.file_path}: {e}") from e

    @override
    def get_stream(self) -> Iterator[bytes]:
        with self._open() as f:
            while chunk := f.read(self.chunk_size):
                yield chunk

    @override
    def copy_to(self, destination: BinaryIO) -> int:
        """Copy the file into ``destination`` in ``chunk_size`` blocks."""
        self.copied_bytes = None
        with self._open() as f:
            shutil.copyfileobj(f, destination, self.chunk_size)
            self.copied_bytes = f.tell()
        logger.debug("Copied %d bytes from %s", self.copied_bytes, self.file_path)
        return self.copied_bytes

    @override
    def get_metadata(self) -> dict[str, Any]:
        """Size and modification time from a single ``stat`` call."""
        try:
            stat = self.file_path.stat()
        except OSError as e:
            logger.warning("Could not stat %s: %s", self.file_path, e)
            size, modified = 0, None
        else:
            size, modified = stat.st_size, stat.st_mtime

        return {
            "size": size,
            "type": XLSX_MIME_TYPE,
            "source_type": "local",
            "path": str(self.file_path),
            "modified": modified,
        }
