"""Row and cell records produced by the streaming reader."""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Cell:
    """A single non-empty cell. Indices are zero-based, the value is always text."""

    column: int
    row: int
    value: str


@dataclass(frozen=True)
class Row:
    """
    A completed sheet row.

    Cells appear in the order they were encountered in the sheet markup. Cells
    without a value are absent rather than represented as empty strings.
    """

    index: int
    cells: tuple[Cell, ...] = ()

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def values(self) -> list[str]:
        """Return the cell values in encounter order."""
        return [cell.value for cell in self.cells]

    def to_list(self, fill: Any = "") -> list[Any]:
        """
        Convert the sparse cells into a dense list indexed by column,
        padding missing columns with ``fill``.
        """
        if not self.cells:
            return []

        # The dense width is defined by the right-most populated column.
        max_col_index = max(cell.column for cell in self.cells)
        dense_row = [fill] * (max_col_index + 1)

        for cell in self.cells:
            dense_row[cell.column] = cell.value
        return dense_row
