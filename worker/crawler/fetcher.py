"""HTTP fetcher for the exposure analyzers.

Fetches never raise: timeouts, connection errors and non-200 responses are
returned as a FetchResult with ``error`` set, so each analyzer can fall back
to its documented default and still log what went wrong.
"""

from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "CrawlToll-Analyzer/1.1 (+https://crawltoll.dev)"


@dataclass
class FetchResult:
    """Result of fetching a URL."""

    url: str
    final_url: str  # After redirects
    status_code: int
    content_type: str | None
    content: bytes | None
    error: str | None
    fetch_time_ms: int
    fetched_at: datetime
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """Check if fetch was successful."""
        return self.error is None and 200 <= self.status_code < 300 and self.content is not None

    @property
    def is_gzip(self) -> bool:
        """Body is a gzip archive (not transport-level gzip, which httpx undoes)."""
        content_type = (self.content_type or "").lower()
        return self.url.lower().endswith(".gz") or "gzip" in content_type

    @property
    def text(self) -> str:
        """Decoded body, gunzipping archives and falling back to raw bytes."""
        if self.content is None:
            return ""
        raw = self.content
        if self.is_gzip:
            try:
                raw = gzip.decompress(raw)
            except (OSError, EOFError, zlib.error) as e:
                logger.debug("gzip_decompress_failed", url=self.url, error=str(e))
        return raw.decode("utf-8", errors="replace")

    def header(self, name: str) -> str:
        """Case-insensitive response header lookup ('' when absent)."""
        return self.headers.get(name.lower(), "")


class Fetcher:
    """Single-attempt fetcher with a per-call timeout."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 7.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> Fetcher:
        if self._client is None:
            self._client = self._build_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=5,
            headers={"User-Agent": self.user_agent, "Accept": "*/*"},
        )

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        """
        Fetch a URL once.

        Args:
            url: The URL to fetch
            timeout: Per-call deadline in seconds (defaults to the fetcher's)

        Returns:
            FetchResult with the body on 2xx, otherwise with ``error`` set
        """
        start_time = datetime.now(UTC)
        deadline = timeout if timeout is not None else self.timeout

        client = self._client
        close_after = False
        if client is None:
            client = self._build_client()
            close_after = True

        try:
            response = await client.get(url, timeout=deadline)
        except httpx.TimeoutException:
            return self._failure(url, start_time, "Request timed out")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._failure(url, start_time, f"{type(e).__name__}: {e}")
        finally:
            if close_after:
                await client.aclose()

        fetch_time = int((datetime.now(UTC) - start_time).total_seconds() * 1000)
        error = None
        if not 200 <= response.status_code < 300:
            error = f"HTTP {response.status_code}"

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            content=response.content,
            error=error,
            fetch_time_ms=fetch_time,
            fetched_at=start_time,
            headers={k.lower(): v for k, v in response.headers.items()},
        )

    def _failure(self, url: str, start_time: datetime, error: str) -> FetchResult:
        return FetchResult(
            url=url,
            final_url=url,
            status_code=0,
            content_type=None,
            content=None,
            error=error,
            fetch_time_ms=int((datetime.now(UTC) - start_time).total_seconds() * 1000),
            fetched_at=start_time,
        )
