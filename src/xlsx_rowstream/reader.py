"""Public API: stream the rows of one sheet of an XLSX workbook."""

from collections.abc import Iterator
import logging
import os
from pathlib import Path
import tempfile
from types import TracebackType
from typing import Any, BinaryIO
from urllib.parse import urlparse
import zipfile
import zlib

from xlsx_rowstream.exceptions import OpenError
from xlsx_rowstream.interpreter import EventInterpreter
from xlsx_rowstream.models import Row
from xlsx_rowstream.row_buffer import RowBatchBuffer, RowIterator
from xlsx_rowstream.sheet_events import SheetEventReader
from xlsx_rowstream.sources.base import StreamSource
from xlsx_rowstream.sources.fileobj import FileObjectSource
from xlsx_rowstream.sources.http import HTTPSource
from xlsx_rowstream.sources.local import LocalFileSource
from xlsx_rowstream.sources.s3 import S3Source
from xlsx_rowstream.xlsx_metadata_extractor import XLSXMetadataExtractor

logger = logging.getLogger(__name__)

DEFAULT_ROW_CACHE_SIZE = 100
DEFAULT_CHUNK_SIZE = 65536


class StreamingReader:
    """
    Row-by-row reader for a single sheet of an XLSX workbook.

    Rows are produced lazily in batches of ``row_cache_size``, so memory use is
    bounded by the batch size rather than the size of the sheet. A reader can be
    iterated exactly once.

    Use :meth:`open` for a workbook on disk and :meth:`from_stream` for any other
    byte stream. Readers are context managers; leaving the ``with`` block releases
    the workbook and removes any temporary copy, even if iteration stopped early::

        with StreamingReader.from_stream(upload, sheet_index=0) as reader:
            for row in reader:
                ...
    """

    def __init__(
        self,
        source: LocalFileSource,
        sheet_index: int = 0,
        row_cache_size: int = DEFAULT_ROW_CACHE_SIZE,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        strict: bool = False,
        temp_path: Path | None = None,
        origin: StreamSource | None = None,
    ) -> None:
        """
        Open the workbook and prepare the sheet for streaming.

        Prefer :meth:`open` or :meth:`from_stream`.

        Args:
            source: Local workbook file.
            sheet_index: Zero-based index of the sheet to read (default: 0).
            row_cache_size: Number of rows read ahead per batch (default: 100).
            chunk_size: Size of decompressed chunks fed to the XML parser (default: 64KB).
            strict: Raise TruncatedStream when the sheet markup is cut short
                instead of ending quietly (default: False).
            temp_path: Temporary copy owned by this reader, removed on close.
            origin: Source the temporary copy was made from, reported by
                :meth:`get_metadata` (default: ``source``).

        Raises:
            OpenError: If the file is not a readable XLSX container.
            SheetNotFoundError: If there is no sheet at ``sheet_index``.
            ReadError: If the workbook metadata is missing or malformed.
            ValueError: If ``row_cache_size`` is smaller than one.
        """
        if row_cache_size < 1:
            raise ValueError(f"row_cache_size must be at least 1, got {row_cache_size}")

        self.source = source
        self.sheet_index = sheet_index
        self.row_cache_size = row_cache_size
        self.chunk_size = chunk_size
        self.strict = strict
        self.temp_path = temp_path
        self.origin = origin or source
        self.closed = False

        try:
            self._archive = zipfile.ZipFile(source.file_path)
        except (zipfile.BadZipFile, OSError) as e:
            raise OpenError(f"Failed to open workbook {source.file_path}: {e}") from e

        try:
            extractor = XLSXMetadataExtractor(self._archive, chunk_size=chunk_size)
            self.shared_strings, self.worksheet_path = extractor.extract_metadata(sheet_index)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            self._archive.close()
            raise OpenError(f"Unable to read workbook {source.file_path}: {e}") from e
        except BaseException:
            self._archive.close()
            raise

        self._events = SheetEventReader(
            self._archive, self.worksheet_path, chunk_size=chunk_size
        ).iter_events()
        buffer = RowBatchBuffer(
            self._events,
            EventInterpreter(self.shared_strings),
            capacity=row_cache_size,
            strict=strict,
        )
        self._rows = RowIterator(buffer, on_exhausted=self.close)

        logger.info(
            "StreamingReader initialized (sheet_index=%d, worksheet=%s, shared_strings=%d)",
            sheet_index,
            self.worksheet_path,
            len(self.shared_strings),
        )

    @classmethod
    def open(
        cls,
        path: str | Path,
        sheet_index: int = 0,
        row_cache_size: int = DEFAULT_ROW_CACHE_SIZE,
        **options: Any,
    ) -> "StreamingReader":
        """
        Create a reader for a workbook stored on the local file system.

        Args:
            path: Path to the XLSX file.
            sheet_index: Zero-based index of the sheet to read.
            row_cache_size: Number of rows read ahead per batch.
            **options: ``chunk_size`` and ``strict``, see :class:`StreamingReader`.

        Raises:
            OpenError: If the file is missing or not a readable XLSX container.
            SheetNotFoundError: If there is no sheet at ``sheet_index``.
        """
        try:
            source = LocalFileSource(path)
        except (FileNotFoundError, ValueError) as e:
            raise OpenError(f"Failed to open file: {e}") from e

        return cls(source, sheet_index, row_cache_size, **options)

    @classmethod
    def from_stream(
        cls,
        stream: BinaryIO | StreamSource,
        sheet_index: int = 0,
        row_cache_size: int = DEFAULT_ROW_CACHE_SIZE,
        **options: Any,
    ) -> "StreamingReader":
        """
        Create a reader from an arbitrary byte stream.

        The stream is copied into a temporary file, because the XLSX container
        needs random access. The reader owns that file and removes it when
        iteration is exhausted or the reader is closed.

        Args:
            stream: Binary file object or StreamSource.
            sheet_index: Zero-based index of the sheet to read.
            row_cache_size: Number of rows read ahead per batch.
            **options: ``chunk_size`` and ``strict``, see :class:`StreamingReader`.

        Raises:
            OpenError: If the stream cannot be copied or is not an XLSX container.
            SheetNotFoundError: If there is no sheet at ``sheet_index``.
        """
        source = stream if isinstance(stream, StreamSource) else FileObjectSource(stream)

        temp_path = write_stream_to_file(source)
        logger.debug("Created temp file [%s]", temp_path)

        try:
            return cls(
                LocalFileSource(temp_path),
                sheet_index,
                row_cache_size,
                temp_path=temp_path,
                origin=source,
                **options,
            )
        except BaseException:
            remove_temp_file(temp_path)
            raise

    @classmethod
    def from_uri(
        cls,
        uri: str,
        sheet_index: int = 0,
        row_cache_size: int = DEFAULT_ROW_CACHE_SIZE,
        **options: Any,
    ) -> "StreamingReader":
        """
        Create a reader from a URI string.

        Args:
            uri: ``s3://bucket/key``, ``http(s)://...`` or a local path.
            sheet_index: Zero-based index of the sheet to read.
            row_cache_size: Number of rows read ahead per batch.
            **options: ``chunk_size`` and ``strict`` for the reader, plus source
                options: ``client``, ``region``, ``profile`` for S3 and
                ``headers``, ``auth``, ``timeout`` for HTTP.

        Raises:
            ValueError: If an S3 URI has no bucket or key.
            ImportError: If the library a remote source needs is not installed.
        """
        reader_options = {k: v for k, v in options.items() if k in ("chunk_size", "strict")}
        source_options = {k: v for k, v in options.items() if k not in reader_options}

        source = create_source(uri, source_options)
        if isinstance(source, LocalFileSource):
            return cls(source, sheet_index, row_cache_size, **reader_options)
        return cls.from_stream(source, sheet_index, row_cache_size, **reader_options)

    def __iter__(self) -> RowIterator:
        return self._rows

    def rows(self) -> Iterator[Row]:
        """
        Yield the rows of the sheet.

        Yields:
            Row: Each row that has at least one cell element in the sheet
            markup, in document order. Missing rows are skipped, not padded.
        """
        yield from self._rows

    def get_metadata(self) -> dict[str, Any]:
        """Return metadata about the workbook file and the selected sheet."""
        metadata = self.origin.get_metadata()
        metadata.update(
            {
                "sheet_index": self.sheet_index,
                "worksheet_path": self.worksheet_path,
                "shared_strings": len(self.shared_strings),
            }
        )
        return metadata

    def close(self) -> None:
        """
        Release the workbook and remove the temporary copy, if any.

        Safe to call more than once. Failure to remove the temporary file is
        logged and never raised.
        """
        if self.closed:
            return
        self.closed = True

        self._events.close()
        self._archive.close()

        if self.temp_path is not None:
            logger.debug("Attempting to delete temp file [%s]", self.temp_path)
            remove_temp_file(self.temp_path)

    def __enter__(self) -> "StreamingReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def create_source(uri: str, options: dict[str, Any]) -> StreamSource:
    """
    Create a StreamSource from a URI string.

    Args:
        uri: Source URI (s3://, http://, https://, or local path)
        options: Source-specific options

    Returns:
        StreamSource: Appropriate source implementation

    Raises:
        ValueError: If an S3 URI is incomplete
        OpenError: If a local path does not name a file
    """
    parsed = urlparse(uri)

    if parsed.scheme == "s3":
        bucket = parsed.netloc
        key = parsed.path.lstrip("/")

        if not bucket or not key:
            raise ValueError(f"Invalid S3 URI: {uri}. Expected: s3://bucket/key")

        logger.info("Creating S3Source for s3://%s/%s", bucket, key)
        return S3Source(
            bucket=bucket,
            key=key,
            **{k: v for k, v in options.items() if k in ("client", "region", "profile")},
        )

    if parsed.scheme in ("http", "https"):
        logger.info("Creating HTTPSource for %s", uri)
        return HTTPSource(
            url=uri,
            **{k: v for k, v in options.items() if k in ("headers", "auth", "timeout")},
        )

    logger.info("Creating LocalFileSource for %s", uri)
    try:
        return LocalFileSource(uri)
    except (FileNotFoundError, ValueError) as e:
        raise OpenError(f"Failed to open file: {e}") from e


def write_stream_to_file(source: StreamSource) -> Path:
    """
    Copy a source into a new temporary file and return its path.

    Raises:
        OpenError: If the source cannot be read or the file cannot be written.
    """
    fd, name = tempfile.mkstemp(prefix="xlsx-rowstream-", suffix=".xlsx")
    temp_path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            source.copy_to(f)
    except Exception as e:
        remove_temp_file(temp_path)
        raise OpenError(f"Unable to read input stream: {e}") from e
    except BaseException:
        remove_temp_file(temp_path)
        raise
    return temp_path


def remove_temp_file(path: Path) -> bool:
    """Best-effort removal of a temporary file. Returns whether it is gone."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not delete temp file %s: %s", path, e)
        return False
    return True
