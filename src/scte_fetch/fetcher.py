"""
HTTP byte fetching with httpx.
"""

import logging

import httpx

from .errors import FetchFailed

logger = logging.getLogger("scte_fetch")

DEFAULT_TIMEOUT = 60.0

# Some key servers reject requests that don't look like a browser.
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.3 Safari/605.1.15"
)
KEY_REQUEST_HEADERS = {"User-Agent": BROWSER_USER_AGENT}


class Fetcher:
    """Sequential fetcher around a single ``httpx.Client``.

    Use as a context manager so the connection pool is closed at the end of
    the run. ``transport`` is passed straight to httpx (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            follow_redirects=True, timeout=timeout, transport=transport
        )

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str, headers: dict[str, str] | None = None) -> bytes:
        """GET ``url`` and return the body. Raises FetchFailed on any failure."""
        logger.debug("GET %s", url)
        try:
            r = self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise FetchFailed(url, f"{type(e).__name__}: {e}") from e
        if not r.is_success:
            raise FetchFailed(url, f"HTTP {r.status_code}")
        return r.content

    def fetch_text(self, url: str) -> str:
        """GET ``url`` and decode the body as text."""
        data = self.fetch(url)
        return data.decode("utf-8-sig", errors="replace")
