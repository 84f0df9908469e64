"""Tests for FileObjectSource."""

import io

import pytest

from xlsx_rowstream.sources.fileobj import FileObjectSource


def test_file_object_source_chunking() -> None:
    """Test that the file object is read forward in chunks."""
    source = FileObjectSource(io.BytesIO(b"0123456789"), chunk_size=4)

    assert list(source.get_stream()) == [b"0123", b"4567", b"89"]


def test_file_object_source_does_not_close_stream() -> None:
    """Test that the caller keeps ownership of the file object."""
    stream = io.BytesIO(b"data")

    list(FileObjectSource(stream).get_stream())

    assert not stream.closed


def test_file_object_source_rejects_non_readable() -> None:
    """Test that objects without read() are rejected."""
    with pytest.raises(ValueError, match="readable binary file object"):
        FileObjectSource(b"not a stream")  # type: ignore[arg-type]


def test_file_object_source_wraps_read_errors() -> None:
    """Test that read failures surface as OSError."""

    class BrokenPipe(io.RawIOBase):
        def readable(self) -> bool:
            return True

        def read(self, size: int = -1) -> bytes:
            raise BrokenPipeError("pipe closed")

    with pytest.raises(OSError, match="Failed to read stream"):
        list(FileObjectSource(BrokenPipe()).get_stream())


def test_file_object_source_metadata() -> None:
    """Test metadata for a stream of unknown size."""
    metadata = FileObjectSource(io.BytesIO(b"")).get_metadata()

    assert metadata["source_type"] == "stream"
    assert metadata["size"] == 0
    assert metadata["name"] == "<stream>"


def test_file_object_source_size_known_after_copy() -> None:
    """Test that the size is reported once the stream has been spooled."""
    source = FileObjectSource(io.BytesIO(b"x" * 10), chunk_size=3)
    destination = io.BytesIO()

    assert source.copy_to(destination) == 10
    assert destination.getvalue() == b"x" * 10
    assert source.get_metadata()["size"] == 10
