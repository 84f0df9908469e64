from collections.abc import Iterator
import logging
from typing import IO
import zipfile

from xlsx_rowstream.events import MarkupEvent, iter_markup_events

logger = logging.getLogger(__name__)


class SheetEventReader:
    """
    Read the markup events of one worksheet part.

    The worksheet is decompressed and parsed chunk by chunk, so memory use does
    not depend on the size of the sheet.
    """

    def __init__(
        self,
        archive: zipfile.ZipFile,
        worksheet_filepath: str,
        chunk_size: int = 65536,
    ) -> None:
        """
        Initialize the sheet event reader.

        Args:
            archive: Open XLSX container.
            worksheet_filepath: Internal path to worksheet XML
                                (e.g., 'xl/worksheets/sheet1.xml').
            chunk_size: Size of decompressed chunks fed to the parser (default: 64KB).
        """
        self.archive = archive
        self.worksheet_filepath = worksheet_filepath
        self.chunk_size = chunk_size
        logger.debug("SheetEventReader initialized for worksheet: %s", worksheet_filepath)

    def _iter_chunks(self, stream: IO[bytes]) -> Iterator[bytes]:
        while chunk := stream.read(self.chunk_size):
            yield chunk

    def iter_events(self) -> Iterator[MarkupEvent]:
        """
        Stream markup events from the worksheet.

        Yields:
            MarkupEvent: Start, end and text events in document order.

        Raises:
            xml.etree.ElementTree.ParseError: If the worksheet XML is malformed.
            zipfile.BadZipFile: If the compressed worksheet data is corrupt.
        """
        with self.archive.open(self.worksheet_filepath) as stream:
            yield from iter_markup_events(self._iter_chunks(stream))
