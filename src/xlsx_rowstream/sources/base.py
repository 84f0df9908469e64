"""Abstract base class for byte stream sources."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
import logging
from typing import Any, BinaryIO

logger = logging.getLogger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class StreamSource(ABC):
    """
    A workbook delivered as a forward-only byte stream.

    The XLSX container needs random access, so every source other than a local
    file is spooled into a temporary file with :meth:`copy_to` before the
    workbook is opened. Sources read once, front to back.
    """

    #: Bytes written by the last :meth:`copy_to`, ``None`` until a copy finished.
    copied_bytes: int | None = None

    @abstractmethod
    def get_stream(self) -> Iterator[bytes]:
        """
        Return an iterator of byte chunks from the source.

        Must not load the entire file into memory.

        Raises:
            OSError: If the source cannot be read.
        """
        ...

    @abstractmethod
    def get_metadata(self) -> dict[str, Any]:
        """
        Return metadata about the source without reading it again.

        Returns:
            dict[str, Any]: Metadata containing at least:
                - 'size': Size in bytes (0 if unknown)
                - 'type': MIME type (default: XLSX_MIME_TYPE)
                - 'source_type': Type of source ('s3', 'http', 'local', 'stream')
        """
        ...

    def copy_to(self, destination: BinaryIO) -> int:
        """
        Spool the whole stream into ``destination``.

        Returns:
            int: Number of bytes written.
        """
        self.copied_bytes = None
        written = 0
        for chunk in self.get_stream():
            destination.write(chunk)
            written += len(chunk)
        self.copied_bytes = written
        logger.debug("Spooled %d bytes from %s", written, type(self).__name__)
        return written

    def _size_hint(self, reported: int | None) -> int:
        """Size announced by the source, else the number of bytes spooled, else 0."""
        if reported:
            return reported
        return self.copied_bytes or 0
