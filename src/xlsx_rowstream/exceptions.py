"""Exception hierarchy for XLSX row streaming."""


class XlsxRowStreamError(Exception):
    """Base class for all errors raised by xlsx_rowstream."""


class OpenError(XlsxRowStreamError, OSError):
    """The workbook container could not be opened."""


class ReadError(XlsxRowStreamError, OSError):
    """The workbook container was opened but its metadata parts are missing or malformed."""


class SheetNotFoundError(XlsxRowStreamError, IndexError):
    """The requested sheet index does not exist in the workbook."""

    def __init__(self, sheet_index: int, sheet_count: int) -> None:
        self.sheet_index = sheet_index
        self.sheet_count = sheet_count
        super().__init__(
            f"Unable to find sheet at index [{sheet_index}] (workbook has {sheet_count} sheets)"
        )


class InterpretationError(XlsxRowStreamError, ValueError):
    """A well-formed markup event carried content that cannot be interpreted."""


class MalformedCellAddress(InterpretationError):
    """A cell's address attribute is missing or cannot be decoded."""

    def __init__(self, address: str | None) -> None:
        self.address = address
        super().__init__(f"Malformed cell address: {address!r}")


class SharedStringIndexOutOfRange(InterpretationError, IndexError):
    """A shared-string reference does not point into the shared-string table."""

    def __init__(self, reference: str, table_size: int) -> None:
        self.reference = reference
        self.table_size = table_size
        super().__init__(
            f"Shared string reference {reference!r} is outside the table of {table_size} entries"
        )


class TruncatedStream(XlsxRowStreamError):
    """The sheet markup ended prematurely or became malformed mid-stream."""


class IteratorMisuseError(XlsxRowStreamError, RuntimeError):
    """The row iterator was used outside its contract."""
