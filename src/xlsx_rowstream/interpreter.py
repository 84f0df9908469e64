"""State machine that assembles rows from worksheet markup events."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from xlsx_rowstream.coordinates import (
    CellValueType,
    decode_address,
    resolve_shared_string,
    resolve_value_type,
)
from xlsx_rowstream.events import EventKind, MarkupEvent
from xlsx_rowstream.models import Cell, Row

CELL_TAG = "c"
VALUE_TAG = "v"
ADDRESS_ATTRIBUTE = "r"
TYPE_ATTRIBUTE = "t"


@dataclass
class InterpreterState:
    """Mutable traversal state, owned by exactly one EventInterpreter."""

    text_parts: list[str] = field(default_factory=list)
    shared_string_pending: bool = False
    row_index: int | None = None
    row_cells: list[Cell] = field(default_factory=list)
    # (column, row) of the cell whose <v> is awaited
    cell_coordinates: tuple[int, int] | None = None


class EventInterpreter:
    """
    Convert markup events into completed rows, one event at a time.

    Holds at most one in-progress row and one in-progress cell, so the working
    set does not depend on the size of the sheet.
    """

    def __init__(self, shared_strings: Sequence[str]) -> None:
        """
        Initialize the interpreter.

        Args:
            shared_strings: Read-only shared-string table, indexed by ID.
        """
        self.shared_strings = shared_strings
        self.state = InterpreterState()

    def feed(self, event: MarkupEvent) -> Row | None:
        """
        Consume a single markup event.

        Returns:
            Row | None: The row this event closed, if any.

        Raises:
            MalformedCellAddress: If a cell start carries a missing or invalid address.
            SharedStringIndexOutOfRange: If a shared-string value does not resolve.
        """
        if event.kind is EventKind.TEXT:
            self.state.text_parts.append(event.text)
            return None

        if event.kind is EventKind.START:
            # Every new element starts a fresh accumulator.
            self.state.text_parts = []
            if event.name == CELL_TAG:
                return self._start_cell(event)
            return None

        if event.name == VALUE_TAG:
            self._end_value()
        return None

    def flush(self) -> Row | None:
        """Close and return the in-progress row, if any."""
        return self._close_row()

    def _start_cell(self, event: MarkupEvent) -> Row | None:
        state = self.state
        state.cell_coordinates = None
        state.shared_string_pending = False
        column, row = decode_address(event.attributes.get(ADDRESS_ATTRIBUTE))
        value_type = resolve_value_type(event.attributes.get(TYPE_ATTRIBUTE))

        closed = None
        if state.row_index != row:
            closed = self._close_row()
            state.row_index = row

        state.cell_coordinates = (column, row)
        state.shared_string_pending = value_type is CellValueType.SHARED_STRING
        return closed

    def _end_value(self) -> None:
        state = self.state
        coordinates = state.cell_coordinates
        if coordinates is None:
            # A <v> outside any cell, or a second <v> in the same cell.
            return

        contents = "".join(state.text_parts)
        pending = state.shared_string_pending
        state.cell_coordinates = None
        state.shared_string_pending = False

        if pending:
            contents = resolve_shared_string(contents, self.shared_strings)

        column, row = coordinates
        state.row_cells.append(Cell(column=column, row=row, value=contents))

    def _close_row(self) -> Row | None:
        state = self.state
        if state.row_index is None:
            return None

        row = Row(index=state.row_index, cells=tuple(state.row_cells))
        state.row_index = None
        state.row_cells = []
        return row
