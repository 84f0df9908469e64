"""Binary file object data source implementation."""

from collections.abc import Iterator
import logging
from typing import Any, BinaryIO

from typing_extensions import override

from xlsx_rowstream.sources.base import XLSX_MIME_TYPE, StreamSource

logger = logging.getLogger(__name__)


class FileObjectSource(StreamSource):
    """
    Stream an already opened binary file object, such as a pipe or an upload.

    The file object is read forward only and is not closed by the source.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 16777216) -> None:
        """
        Initialize FileObjectSource.

        Args:
            stream: Readable binary file object.
            chunk_size: Size of chunks to read (default: 16MB).

        Raises:
            ValueError: If the object has no read() method.
        """
        if not callable(getattr(stream, "read", None)):
            raise ValueError("stream must be a readable binary file object")

        self.stream = stream
        self.chunk_size = chunk_size

    @override
    def get_stream(self) -> Iterator[bytes]:
        """
        Read the file object in chunks.

        Yields:
            bytes: Chunks of data.

        Raises:
            IOError: If the file object cannot be read.
        """
        try:
            while chunk := self.stream.read(self.chunk_size):
                yield chunk
        except OSError as e:
            logger.exception("Error reading stream: %s", e)
            raise OSError(f"Failed to read stream: {e}") from e

    @override
    def get_metadata(self) -> dict[str, Any]:
        """
        Return metadata about the file object.

        Returns:
            dict[str, Any]: Metadata with the spooled size (0 before a copy) and the stream name.
        """
        return {
            "size": self._size_hint(None),
            "type": XLSX_MIME_TYPE,
            "source_type": "stream",
            "name": str(getattr(self.stream, "name", "<stream>")),
        }
