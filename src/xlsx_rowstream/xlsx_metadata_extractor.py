from collections.abc import Iterator
from enum import Enum
import logging
import posixpath
from typing import IO
import xml.etree.ElementTree as ET
import zipfile

from xlsx_rowstream.events import local_name
from xlsx_rowstream.exceptions import ReadError, SheetNotFoundError

logger = logging.getLogger(__name__)


class XLSXMetadataExtractor:
    """
    Extract the metadata needed before a sheet can be streamed.

    Resolves the worksheet part for a sheet index and reads the shared-string
    table, without touching the (potentially large) worksheet parts themselves.
    """

    class XlsxMetadataPaths(Enum):
        """Standard file paths for core XLSX metadata components."""

        WORKBOOK = "xl/workbook.xml"
        SHARED_STRINGS = "xl/sharedStrings.xml"
        WORKBOOK_RELS = "xl/_rels/workbook.xml.rels"

    def __init__(self, archive: zipfile.ZipFile, chunk_size: int = 65536) -> None:
        """
        Initialize the metadata extractor.

        Args:
            archive: Open XLSX container.
            chunk_size: Size of chunks fed to the shared-strings parser (default: 64KB).
        """
        self.archive = archive
        self.chunk_size = chunk_size
        self._names = set(archive.namelist())
        logger.debug("XLSXMetadataExtractor initialized for %s", archive.filename)

    def _parse_part(self, path: str) -> ET.Element:
        """Parse a small metadata part into an element tree."""
        if path not in self._names:
            raise ReadError(f"Workbook part {path} is missing")

        try:
            return ET.fromstring(self.archive.read(path))
        except ET.ParseError as e:
            logger.exception("Error parsing %s: %s", path, e)
            raise ReadError(f"Unable to parse {path}: {e}") from e

    def _iter_sheet_refs(self) -> Iterator[tuple[str, str | None]]:
        """Yield (name, r:id) for every sheet, in workbook order."""
        root = self._parse_part(self.XlsxMetadataPaths.WORKBOOK.value)
        for element in root.iter():
            if local_name(element.tag) != "sheet":
                continue
            # Match the r:id attribute by local name so strict OOXML namespaces work too.
            r_id = next(
                (value for key, value in element.attrib.items() if local_name(key) == "id"),
                None,
            )
            yield element.get("name", ""), r_id

    def _parse_rels_xml(self, r_id: str) -> str | None:
        """
        Parses xl/_rels/workbook.xml.rels to map the r:id to the target part,
        returned as a full path inside the archive, e.g. 'xl/worksheets/sheet1.xml'.
        """
        root = self._parse_part(self.XlsxMetadataPaths.WORKBOOK_RELS.value)

        # Iterate rather than build an XPath from the id
        for rel_element in root.iter():
            if local_name(rel_element.tag) != "Relationship" or rel_element.get("Id") != r_id:
                continue
            target = rel_element.get("Target")
            if not target:
                return None
            if target.startswith("/"):
                return target.lstrip("/")
            return posixpath.normpath(posixpath.join("xl", target))

        return None

    def _parse_shared_strings_xml(self, stream: IO[bytes]) -> list[str]:
        """
        Stream-parses xl/sharedStrings.xml in chunks.
        Avoids loading the full file into memory.
        """
        shared_strings: list[str] = []
        parser = ET.XMLPullParser(events=("end",))

        def drain() -> None:
            for _, elem in parser.read_events():
                if local_name(elem.tag) != "si":
                    continue
                # Phonetic runs (<rPh>) are reading aids, not part of the text.
                text_parts = [
                    t.text
                    for child in elem
                    if local_name(child.tag) != "rPh"
                    for t in child.iter()
                    if local_name(t.tag) == "t" and t.text
                ]
                shared_strings.append("".join(text_parts))
                elem.clear()

        try:
            while chunk := stream.read(self.chunk_size):
                parser.feed(chunk)
                drain()
            parser.close()
            drain()
        except ET.ParseError as e:
            logger.exception(
                "Error parsing %s: %s", self.XlsxMetadataPaths.SHARED_STRINGS.value, e
            )
            raise ReadError(f"Unable to parse shared strings: {e}") from e

        return shared_strings

    def list_sheets(self) -> list[str]:
        """Return the sheet names in workbook order."""
        return [name for name, _ in self._iter_sheet_refs()]

    def read_shared_strings(self) -> list[str]:
        """Read the complete shared-string table (empty when the part is absent)."""
        path = self.XlsxMetadataPaths.SHARED_STRINGS.value
        if path not in self._names:
            logger.debug("No %s in workbook, using empty shared-string table", path)
            return []

        with self.archive.open(path) as stream:
            return self._parse_shared_strings_xml(stream)

    def resolve_worksheet_path(self, sheet_index: int) -> str:
        """
        Map a zero-based sheet index to its worksheet part.

        Raises:
            SheetNotFoundError: If no sheet exists at the index.
            ReadError: If the workbook relationships do not resolve to a part.
        """
        sheet_refs = list(self._iter_sheet_refs())
        if sheet_index < 0 or sheet_index >= len(sheet_refs):
            raise SheetNotFoundError(sheet_index, len(sheet_refs))

        sheet_name, r_id = sheet_refs[sheet_index]
        logger.debug("Found sheet %r at index [%d]", sheet_name, sheet_index)

        target_filepath = self._parse_rels_xml(r_id) if r_id else None
        if not target_filepath or target_filepath not in self._names:
            raise ReadError(
                f"Sheet '{sheet_name}' at index [{sheet_index}] has no worksheet part "
                f"(resolved to {target_filepath!r})"
            )

        return target_filepath

    def extract_metadata(self, sheet_index: int) -> tuple[list[str], str]:
        """
        Extract shared strings and target worksheet path from XLSX.

        Args:
            sheet_index: Zero-based position of the sheet in the workbook.

        Returns:
            A tuple: (shared_strings_list, target_worksheet_filepath).
            - shared_strings_list: list[str] containing shared strings, indexed by ID.
            - target_worksheet_filepath: str (e.g., 'xl/worksheets/sheet3.xml').

        Raises:
            SheetNotFoundError: If the sheet index does not exist.
            ReadError: If the required metadata parts are missing or malformed.
        """
        # Resolve the sheet first so a bad index fails before reading strings.
        target_filepath = self.resolve_worksheet_path(sheet_index)
        shared_strings_list = self.read_shared_strings()
        return shared_strings_list, target_filepath
