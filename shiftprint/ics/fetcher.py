"""HTTP client for downloading ICS calendar files."""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from .. import __version__
from ..config.settings import FetchSettings
from .exceptions import ICSAuthError, ICSFetchError, ICSNetworkError
from .models import ICSResponse, ICSSource

logger = logging.getLogger(__name__)


class ICSFetcher:
    """Async HTTP client for downloading ICS calendar files."""

    def __init__(
        self,
        settings: Optional[FetchSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Any = None,
    ):
        """Initialize ICS fetcher.

        Args:
            settings: Fetch settings (timeouts and retry policy)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
            sleep: Coroutine used between retries; defaults to ``asyncio.sleep``
        """
        self.settings = settings or FetchSettings()
        self.transport = transport
        self.sleep = sleep or asyncio.sleep
        self.client: Optional[httpx.AsyncClient] = None

        logger.debug("ICS fetcher initialized")

    async def __aenter__(self) -> "ICSFetcher":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self._close_client()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client exists."""
        if self.client is None or self.client.is_closed:
            timeout = httpx.Timeout(
                connect=10.0, read=self.settings.request_timeout, write=10.0, pool=30.0
            )

            self.client = httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=True,
                transport=self.transport,
                headers={
                    "User-Agent": f"{self.settings.app_name}/{__version__} ICS-Client",
                    "Accept": "text/calendar, text/plain, */*",
                    "Accept-Charset": "utf-8",
                    "Cache-Control": "no-cache",
                },
            )

    async def _close_client(self) -> None:
        """Close HTTP client."""
        if self.client and not self.client.is_closed:
            await self.client.aclose()

    def _validate_url(self, url: str) -> Optional[str]:
        """Return an error message if the URL cannot be fetched, else None."""
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            return f"Unsupported URL scheme: {parsed.scheme or '(none)'}"
        if not parsed.hostname:
            return f"URL has no hostname: {url}"
        return None

    async def fetch_ics(self, source: ICSSource) -> ICSResponse:
        """Download ICS content from a source.

        Timeouts and non-auth HTTP errors produce an unsuccessful response;
        network errors are retried with exponential backoff before raising.

        Args:
            source: ICS source configuration

        Returns:
            ICSResponse with the document text on success

        Raises:
            ICSAuthError: On HTTP 401 or 403
            ICSNetworkError: When the host cannot be reached after all retries
            ICSFetchError: On any other unexpected failure

        Example:
            >>> async with ICSFetcher(settings.fetch) as fetcher:
            ...     response = await fetcher.fetch_ics(ICSSource(url=url))
        """
        await self._ensure_client()

        url_error = self._validate_url(source.url)
        if url_error:
            logger.error(f"Refusing to fetch {source.url}: {url_error}")
            return ICSResponse(success=False, error_message=url_error)

        try:
            logger.debug(f"Fetching ICS from {source.url}")
            response = await self._make_request_with_retry(
                source.url, dict(source.custom_headers), source.timeout
            )
            return self._create_response(response)

        except httpx.TimeoutException as e:
            logger.error(f"Timeout fetching ICS from {source.url}: {e}")
            return ICSResponse(
                success=False,
                error_message=f"Request timeout after {source.timeout}s",
                status_code=None,
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching ICS from {source.url}: {e.response.status_code}")

            if e.response.status_code == 401:
                raise ICSAuthError(
                    "Authentication failed - check credentials", e.response.status_code
                ) from e
            if e.response.status_code == 403:
                raise ICSAuthError(
                    "Access forbidden - insufficient permissions", e.response.status_code
                ) from e
            return ICSResponse(
                success=False,
                status_code=e.response.status_code,
                error_message=f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                headers=dict(e.response.headers),
            )

        except httpx.NetworkError as e:
            logger.error(f"Network error fetching ICS from {source.url}: {e}")
            raise ICSNetworkError(f"Network error: {e}") from e

        except httpx.HTTPError as e:
            logger.error(f"Unexpected error fetching ICS from {source.url}: {e}")
            raise ICSFetchError(f"Unexpected error: {e}") from e

    async def _make_request_with_retry(
        self, url: str, headers: dict[str, str], timeout: int
    ) -> httpx.Response:
        """Make HTTP request with retry logic.

        Args:
            url: URL to fetch
            headers: Request headers
            timeout: Request timeout

        Returns:
            HTTP response
        """
        if self.client is None:
            raise ICSFetchError("HTTP client not initialized")

        attempts = self.settings.max_retries + 1
        for attempt in range(attempts):
            try:
                response = await self.client.get(url, headers=headers, timeout=timeout)
                response.raise_for_status()
                logger.debug(f"Successfully fetched ICS from {url} (attempt {attempt + 1})")
                return response

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt + 1 >= attempts:
                    logger.error(f"All retry attempts failed for {url}")
                    raise

                backoff_time = self.settings.retry_backoff_factor**attempt
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{attempts}), "
                    f"retrying in {backoff_time:.1f}s: {e}"
                )
                await self.sleep(backoff_time)

        raise ICSFetchError("Maximum retries exceeded")

    def _create_response(self, http_response: httpx.Response) -> ICSResponse:
        """Create ICS response from HTTP response."""
        headers = dict(http_response.headers)
        content = http_response.text
        content_type = headers.get("content-type", "").lower()

        if content_type and not any(ct in content_type for ct in ("text/calendar", "text/plain")):
            logger.warning(f"Unexpected content type: {content_type}")

        if not content or not content.strip():
            logger.error("Empty ICS content received")
            return ICSResponse(
                success=False,
                status_code=http_response.status_code,
                error_message="Empty content received",
                headers=headers,
            )

        if "BEGIN:VCALENDAR" not in content:
            logger.warning("Content does not appear to be valid ICS format")

        logger.debug(f"Successfully fetched ICS content ({len(content)} bytes)")

        return ICSResponse(
            success=True,
            content=content,
            status_code=http_response.status_code,
            headers=headers,
        )
