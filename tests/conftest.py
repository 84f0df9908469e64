"""Shared fixtures: hand-built XLSX containers with exact sheet markup."""

from collections.abc import Callable, Sequence
from pathlib import Path
from xml.sax.saxutils import escape
import zipfile

import pytest

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
WORKSHEET_REL_TYPE = REL_NS + "/worksheet"

# Rows 1, 3 and 6 in the sheet (indices 0, 2, 5); B3 points at shared string 3.
SPARSE_SHEET_DATA = (
    '<row r="1"><c r="A1"><v>10</v></c><c r="B1" t="s"><v>0</v></c></row>'
    '<row r="3"><c r="A3"><v>20</v></c><c r="B3" t="s"><v>3</v></c></row>'
    '<row r="6"><c r="A6"><v>30</v></c><c r="B6"><v>40</v></c></row>'
)
SPARSE_SHARED_STRINGS = ["Name", "Qty", "Price", "Total"]


def worksheet_xml(sheet_data: str) -> str:
    """Wrap <sheetData> content into a complete worksheet part."""
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">'
        '<dimension ref="A1"/>'
        f"<sheetData>{sheet_data}</sheetData>"
        "</worksheet>"
    )


def shared_strings_xml(strings: Sequence[str]) -> str:
    items = "".join(f"<si><t>{escape(s)}</t></si>" for s in strings)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<sst xmlns="{MAIN_NS}" count="{len(strings)}" uniqueCount="{len(strings)}">'
        f"{items}</sst>"
    )


def write_workbook(
    path: Path,
    sheets: Sequence[str],
    shared_strings: Sequence[str] | str | None = None,
    sheet_names: Sequence[str] | None = None,
) -> Path:
    """
    Write a minimal XLSX container.

    Args:
        path: Destination file.
        sheets: <sheetData> content per sheet, in workbook order.
        shared_strings: Strings for xl/sharedStrings.xml, raw XML, or None to omit it.
        sheet_names: Optional sheet names (default: Sheet1, Sheet2, ...).
    """
    names = list(sheet_names or [f"Sheet{i + 1}" for i in range(len(sheets))])
    sheet_elements = "".join(
        f'<sheet name="{escape(name)}" sheetId="{i + 1}" r:id="rId{i + 1}"/>'
        for i, name in enumerate(names)
    )
    relationships = "".join(
        f'<Relationship Id="rId{i + 1}" Type="{WORKSHEET_REL_TYPE}" '
        f'Target="worksheets/sheet{i + 1}.xml"/>'
        for i in range(len(sheets))
    )

    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(
            "xl/workbook.xml",
            f'<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}"><sheets>{sheet_elements}</sheets>'
            "</workbook>",
        )
        archive.writestr(
            "xl/_rels/workbook.xml.rels",
            f'<Relationships xmlns="{PACKAGE_REL_NS}">{relationships}</Relationships>',
        )
        for i, sheet_data in enumerate(sheets):
            archive.writestr(f"xl/worksheets/sheet{i + 1}.xml", worksheet_xml(sheet_data))
        if isinstance(shared_strings, str):
            archive.writestr("xl/sharedStrings.xml", shared_strings)
        elif shared_strings is not None:
            archive.writestr("xl/sharedStrings.xml", shared_strings_xml(shared_strings))

    return path


@pytest.fixture
def make_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing hand-built workbooks into a temporary directory."""
    counter = 0

    def factory(
        sheets: Sequence[str],
        shared_strings: Sequence[str] | str | None = None,
        sheet_names: Sequence[str] | None = None,
    ) -> Path:
        nonlocal counter
        counter += 1
        return write_workbook(
            tmp_path / f"workbook{counter}.xlsx", sheets, shared_strings, sheet_names
        )

    return factory


@pytest.fixture
def sparse_workbook(make_workbook: Callable[..., Path]) -> Path:
    """Workbook whose only sheet has rows at indices 0, 2 and 5."""
    return make_workbook([SPARSE_SHEET_DATA], SPARSE_SHARED_STRINGS)
