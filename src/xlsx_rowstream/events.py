"""Forward-only markup events read from worksheet XML."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
import xml.etree.ElementTree as ET


class EventKind(Enum):
    """The three kinds of markup event the interpreter understands."""

    START = "start"
    END = "end"
    TEXT = "text"


@dataclass(frozen=True)
class MarkupEvent:
    """One atomic unit of the worksheet markup stream."""

    kind: EventKind
    name: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    @classmethod
    def start(cls, name: str, **attributes: str) -> "MarkupEvent":
        return cls(EventKind.START, name, attributes)

    @classmethod
    def end(cls, name: str) -> "MarkupEvent":
        return cls(EventKind.END, name)

    @classmethod
    def characters(cls, text: str) -> "MarkupEvent":
        return cls(EventKind.TEXT, text=text)


def local_name(tag: str) -> str:
    """Strip the XML namespace from an ElementTree tag."""
    return tag.split("}")[-1] if "}" in tag else tag


def iter_markup_events(chunks: Iterable[bytes]) -> Iterator[MarkupEvent]:
    """
    Turn an iterable of XML byte chunks into a lazy sequence of markup events.

    The parser is fed one chunk at a time, so only the current chunk and the
    current row's elements are held in memory.

    Raises:
        xml.etree.ElementTree.ParseError: When malformed markup is reached.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    # Parent of <row> elements; finished rows are dropped from it.
    row_container: ET.Element | None = None

    def drain() -> Iterator[MarkupEvent]:
        nonlocal row_container
        for event, elem in parser.read_events():
            tag = local_name(elem.tag)

            if event == "start":
                if tag == "sheetData":
                    row_container = elem
                yield MarkupEvent(EventKind.START, tag, dict(elem.attrib))
                continue

            # The full text of an element is only known once it ends.
            if elem.text:
                yield MarkupEvent.characters(elem.text)
            yield MarkupEvent.end(tag)

            if tag == "row":
                elem.clear()
                if row_container is not None:
                    # CRITICAL: free finished rows so memory does not grow with the sheet
                    row_container.clear()

    for chunk in chunks:
        parser.feed(chunk)
        yield from drain()

    parser.close()
    yield from drain()
