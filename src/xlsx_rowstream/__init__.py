"""XLSX-Rowstream: bounded-memory, row-by-row reading of a single XLSX sheet."""

from xlsx_rowstream.exceptions import (
    IteratorMisuseError,
    MalformedCellAddress,
    OpenError,
    ReadError,
    SharedStringIndexOutOfRange,
    SheetNotFoundError,
    TruncatedStream,
    XlsxRowStreamError,
)
from xlsx_rowstream.models import Cell, Row
from xlsx_rowstream.reader import StreamingReader

__all__ = [
    "Cell",
    "IteratorMisuseError",
    "MalformedCellAddress",
    "OpenError",
    "ReadError",
    "Row",
    "SharedStringIndexOutOfRange",
    "SheetNotFoundError",
    "StreamingReader",
    "TruncatedStream",
    "XlsxRowStreamError",
]
