"""AWS S3 data source implementation."""

from collections.abc import Iterator
import logging
from typing import Any

from typing_extensions import override

from xlsx_rowstream.sources.base import XLSX_MIME_TYPE, StreamSource

logger = logging.getLogger(__name__)


class S3Source(StreamSource):
    """
    Download a workbook object from AWS S3 with boto3.

    The object body is read in chunks into the reader's temporary file. Size,
    content type and ETag come from the ``GetObject`` response; no separate
    ``HeadObject`` call is made.
    """

    def __init__(
        self,
        bucket: str,
        key: str,
        client: Any = None,
        region: str | None = None,
        profile: str | None = None,
        chunk_size: int = 16777216,
    ) -> None:
        """
        Args:
            bucket: S3 bucket name.
            key: Object key of the workbook.
            client: Boto3 S3 client. If None, one is created from ``region``
                and ``profile``.
            region: AWS region for the created client.
            profile: AWS profile name for the created client.
            chunk_size: Size of chunks read from the body (default: 16MB).

        Raises:
            ImportError: If boto3 is not installed.
            ValueError: If bucket or key is empty.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 is required for S3Source. Install with: pip install xlsx-rowstream[s3]"
            ) from e

        if not bucket or not key:
            raise ValueError("bucket and key must be non-empty")

        self.bucket = bucket
        self.key = key
        self.chunk_size = chunk_size
        if client is None:
            session = boto3.Session(profile_name=profile, region_name=region)
            client = session.client("s3")
        self.client = client
        self.object_info: dict[str, Any] = {}

        logger.info("S3Source initialized for %s", self.uri)

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    @override
    def get_stream(self) -> Iterator[bytes]:
        """
        Stream the object body in chunks.

        Raises:
            OSError: If the object cannot be fetched or read.
        """
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self.key)
            self.object_info = {
                "size": response.get("ContentLength"),
                "type": response.get("ContentType"),
                "etag": response.get("ETag"),
            }
            body = response["Body"]
            try:
                while chunk := body.read(self.chunk_size):
                    yield chunk
            finally:
                body.close()
        except Exception as e:
            logger.exception("Error reading S3 object %s: %s", self.uri, e)
            raise OSError(f"Failed to read S3 object {self.uri}: {e}") from e

    @override
    def get_metadata(self) -> dict[str, Any]:
        """Describe the object as reported by the last download."""
        return {
            "size": self._size_hint(self.object_info.get("size")),
            "type": self.object_info.get("type") or XLSX_MIME_TYPE,
            "source_type": "s3",
            "bucket": self.bucket,
            "key": self.key,
            "etag": self.object_info.get("etag"),
        }
