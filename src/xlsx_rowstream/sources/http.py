"""HTTP/HTTPS data source implementation."""

from collections.abc import Iterator
import logging
from typing import Any

from typing_extensions import override

from xlsx_rowstream.sources.base import XLSX_MIME_TYPE, StreamSource

logger = logging.getLogger(__name__)


class HTTPSource(StreamSource):
    """
    Download a workbook over HTTP/HTTPS with httpx.

    The body is streamed chunk by chunk into the reader's temporary file.
    Size and content type are taken from the download response itself, so
    asking for metadata never issues another request.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | None = None,
        timeout: int = 30,
        chunk_size: int = 16777216,
    ) -> None:
        """
        Args:
            url: HTTP/HTTPS URL of the workbook.
            headers: Optional request headers, e.g. ``Authorization``.
            auth: Optional (username, password) for basic auth.
            timeout: Request timeout in seconds (default: 30).
            chunk_size: Size of downloaded chunks (default: 16MB).

        Raises:
            ImportError: If httpx is not installed.
            ValueError: If the URL is not HTTP/HTTPS.
        """
        try:
            import httpx  # noqa: F401
        except ImportError as e:
            raise ImportError(
                "httpx is required for HTTPSource. Install with: pip install xlsx-rowstream[http]"
            ) from e

        if not url or not url.startswith(("http://", "https://")):
            raise ValueError("url must be a valid HTTP/HTTPS URL")

        self.url = url
        self.headers = headers or {}
        self.auth = auth
        self.timeout = timeout
        self.chunk_size = chunk_size
        # Filled in from the GET response once the download starts.
        self.final_url: str | None = None
        self.content_length: int | None = None
        self.content_type: str | None = None

        logger.info("HTTPSource initialized for %s", url)

    @override
    def get_stream(self) -> Iterator[bytes]:
        """
        Stream the response body in chunks, following redirects.

        Raises:
            OSError: If the request fails, returns an error status or breaks off.
        """
        import httpx

        try:
            with httpx.stream(
                "GET",
                self.url,
                headers=self.headers,
                auth=self.auth,
                timeout=self.timeout,
                follow_redirects=True,
            ) as response:
                response.raise_for_status()
                self._remember_response(response)

                for chunk in response.iter_bytes(chunk_size=self.chunk_size):
                    if chunk:
                        yield chunk
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.exception("Error downloading %s: %s", self.url, e)
            raise OSError(f"Failed to read from {self.url}: {e}") from e

    def _remember_response(self, response: Any) -> None:
        self.final_url = str(response.url)
        self.content_type = response.headers.get("content-type")
        try:
            self.content_length = int(response.headers.get("content-length", ""))
        except ValueError:
            self.content_length = None
        logger.debug(
            "Downloading %s (%s bytes, %s)", self.final_url, self.content_length, self.content_type
        )

    @override
    def get_metadata(self) -> dict[str, Any]:
        """
        Describe the download.

        Before :meth:`get_stream` has run nothing is known and size is 0.
        """
        return {
            "size": self._size_hint(self.content_length),
            "type": self.content_type or XLSX_MIME_TYPE,
            "source_type": "http",
            "url": self.final_url or self.url,
        }
