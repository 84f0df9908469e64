"""Cell address decoding and value-type resolution."""

from collections.abc import Sequence
from enum import Enum
import re

from xlsx_rowstream.exceptions import MalformedCellAddress, SharedStringIndexOutOfRange

# Leading column letters followed by a 1-based row number, e.g. "B12" or "AA3".
_ADDRESS_PATTERN = re.compile(r"([A-Za-z]+)([0-9]+)")


class CellValueType(Enum):
    """How the text inside a cell's <v> element must be interpreted."""

    LITERAL = "literal"
    SHARED_STRING = "shared_string"


SHARED_STRING_TYPE = "s"


def column_index(letters: str) -> int:
    """Convert column letters to a zero-based column index (A=0, Z=25, AA=26)."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def column_letters(index: int) -> str:
    """Convert a zero-based column index back to its letters."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")

    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def decode_address(address: str | None) -> tuple[int, int]:
    """
    Decode a cell address such as "B12" into zero-based (column, row) indices.

    Raises:
        MalformedCellAddress: If the address is missing, does not consist of
            letters followed by digits, or names row zero.
    """
    if not address:
        raise MalformedCellAddress(address)

    match = _ADDRESS_PATTERN.fullmatch(address)
    if match is None:
        raise MalformedCellAddress(address)

    letters, digits = match.groups()
    row_number = int(digits)
    if row_number < 1:
        raise MalformedCellAddress(address)

    return column_index(letters), row_number - 1


def resolve_value_type(type_attribute: str | None) -> CellValueType:
    """Map the optional ``t`` attribute of a cell to the way its value is read."""
    if type_attribute == SHARED_STRING_TYPE:
        return CellValueType.SHARED_STRING
    return CellValueType.LITERAL


def resolve_shared_string(reference: str, shared_strings: Sequence[str]) -> str:
    """
    Look up the text a shared-string reference points to.

    Raises:
        SharedStringIndexOutOfRange: If the reference is not an integer or
            falls outside the table.
    """
    digits = reference.strip()
    # Plain ASCII digits only; int() would also take "+3", "1_0" or other scripts.
    if not (digits.isascii() and digits.isdigit()):
        raise SharedStringIndexOutOfRange(reference, len(shared_strings))

    index = int(digits)
    if index >= len(shared_strings):
        raise SharedStringIndexOutOfRange(reference, len(shared_strings))

    return shared_strings[index]
