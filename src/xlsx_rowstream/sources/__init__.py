"""Byte stream sources for XLSX workbooks."""

from xlsx_rowstream.sources.base import StreamSource
from xlsx_rowstream.sources.fileobj import FileObjectSource
from xlsx_rowstream.sources.http import HTTPSource
from xlsx_rowstream.sources.local import LocalFileSource
from xlsx_rowstream.sources.s3 import S3Source

__all__ = [
    "FileObjectSource",
    "HTTPSource",
    "LocalFileSource",
    "S3Source",
    "StreamSource",
]
