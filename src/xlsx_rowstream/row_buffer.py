"""Bounded row batching and the pull-based row iterator."""

from collections import deque
from collections.abc import Callable, Iterator
import logging
import xml.etree.ElementTree as ET
import zipfile
import zlib

from xlsx_rowstream.events import MarkupEvent
from xlsx_rowstream.exceptions import IteratorMisuseError, TruncatedStream
from xlsx_rowstream.interpreter import EventInterpreter
from xlsx_rowstream.models import Row

logger = logging.getLogger(__name__)

# Faults of the underlying markup stream that end the traversal.
STREAM_FAULTS = (ET.ParseError, zipfile.BadZipFile, zlib.error, EOFError)


class RowBatchBuffer:
    """
    Drive an EventInterpreter to produce rows in bounded batches.

    Only one batch of completed rows, plus the row currently being assembled,
    is held in memory at any time.
    """

    def __init__(
        self,
        events: Iterator[MarkupEvent],
        interpreter: EventInterpreter,
        capacity: int = 100,
        strict: bool = False,
    ) -> None:
        """
        Initialize the batch buffer.

        Args:
            events: Forward-only iterator of markup events for one sheet.
            interpreter: Interpreter that turns events into rows.
            capacity: Maximum number of completed rows per refill (default: 100).
            strict: Report a malformed or truncated stream as TruncatedStream
                instead of silently ending the traversal (default: False).

        Raises:
            ValueError: If capacity is smaller than one.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        self.events = events
        self.interpreter = interpreter
        self.capacity = capacity
        self.strict = strict
        self.exhausted = False
        self.fault: TruncatedStream | None = None
        # Completed rows not yet handed out; survives an interrupted refill.
        self._completed: list[Row] = []

    def refill(self, capacity: int | None = None) -> tuple[list[Row], bool]:
        """
        Read events until ``capacity`` rows are complete or the stream ends.

        The in-progress row is flushed when the stream ends, so the final row
        is returned even though no later cell closed it.

        Returns:
            tuple[list[Row], bool]: The rows produced, and whether the underlying
            stream has no more events.

        Raises:
            MalformedCellAddress: Propagated from the interpreter. Rows completed
                before the error are kept for the next refill.
            SharedStringIndexOutOfRange: Propagated from the interpreter.
        """
        capacity = capacity or self.capacity
        rows = self._completed
        if self.exhausted and not rows:
            return [], True

        while len(rows) < capacity and not self.exhausted:
            try:
                event = next(self.events)
            except StopIteration:
                logger.debug("End of stream")
                self._finish(rows)
                break
            except STREAM_FAULTS as e:
                self._finish(rows)
                if self.strict:
                    self.fault = TruncatedStream(f"Sheet stream ended prematurely: {e}")
                    self.fault.__cause__ = e
                else:
                    logger.warning("Treating malformed sheet stream as end of data: %s", e)
                break

            row = self.interpreter.feed(event)
            if row is not None:
                rows.append(row)

        self._completed = []
        logger.debug("Refilled %d rows (exhausted=%s)", len(rows), self.exhausted)
        return rows, self.exhausted

    def _finish(self, rows: list[Row]) -> None:
        last_row = self.interpreter.flush()
        if last_row is not None:
            rows.append(last_row)
        self.exhausted = True


class RowIterator(Iterator[Row]):
    """
    Forward-only, single-use iterator over the rows of a RowBatchBuffer.

    Supports both the Python iterator protocol and an explicit
    ``has_next()`` / ``next_row()`` pull contract.
    """

    def __init__(
        self,
        buffer: RowBatchBuffer,
        on_exhausted: Callable[[], None] | None = None,
    ) -> None:
        self.buffer = buffer
        self.on_exhausted = on_exhausted
        self.batches_read = 0
        self._batch: deque[Row] = deque()
        self._checked = False
        self._done = False

    def has_next(self) -> bool:
        """
        Report whether another row is available, refilling the batch if needed.

        Raises:
            TruncatedStream: Once, in strict mode, when the stream was cut short.
        """
        if self._checked:
            return True
        if self._done:
            return False

        exhausted = self.buffer.exhausted
        while not self._batch and not exhausted:
            rows, exhausted = self.buffer.refill()
            self.batches_read += 1
            self._batch = deque(rows)

        if self._batch:
            self._checked = True
            return True

        self._finish()
        return False

    def next_row(self) -> Row:
        """
        Hand over the next row. Must follow a ``has_next()`` that returned True.

        Raises:
            IteratorMisuseError: If called without a successful ``has_next()``.
        """
        if not self._checked:
            raise IteratorMisuseError("next_row() called without a successful has_next()")
        self._checked = False

        # Ownership passes to the caller.
        return self._batch.popleft()

    def remove(self) -> None:
        """Rows cannot be removed from a streaming sheet."""
        raise IteratorMisuseError("remove() is not supported on a streaming row iterator")

    def __iter__(self) -> "RowIterator":
        return self

    def __next__(self) -> Row:
        if not self.has_next():
            raise StopIteration
        return self.next_row()

    def _finish(self) -> None:
        self._done = True
        self._batch.clear()
        logger.debug("Row iteration exhausted after %d batches", self.batches_read)

        if self.on_exhausted is not None:
            self.on_exhausted()

        fault, self.buffer.fault = self.buffer.fault, None
        if fault is not None:
            raise fault
