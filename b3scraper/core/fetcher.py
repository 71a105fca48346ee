"""
HTTP Fetcher - Courteous Request Module
=======================================

HTTP client shared by every extractor:
- Async requests via httpx
- Rate limiting (Token Bucket) before every request
- User-Agent rotation
- Exponential backoff retries via tenacity on connection errors and 429s
- Non-2xx responses and exhausted retries surface as TransportError
"""

from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_after_attempt, wait_exponential

from b3scraper.core.errors import TransportError
from b3scraper.utils.headers import HeaderManager
from b3scraper.utils.logger import get_logger
from b3scraper.utils.rate_limiter import AdaptiveRateLimiter, RateLimiter

log = get_logger(__name__)


class RateLimitException(Exception):
    """Raised when server returns 429 Too Many Requests"""


class Fetcher:
    """
    Async HTTP client designed for sequential, low-volume scraping
    """

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        header_manager: Optional[HeaderManager] = None,
        timeout: float = 15.0,
        max_retries: int = 3,
        backoff_min: float = 1.0,
        backoff_max: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rate_limiter = rate_limiter or AdaptiveRateLimiter()
        self.header_manager = header_manager or HeaderManager()
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
        )
        log.debug(f"Fetcher initialized, timeout={timeout}s, max_retries={self.max_retries}")

    async def close(self):
        """Close the underlying HTTP client"""
        await self.client.aclose()

    def _log_retry(self, retry_state):
        exc = retry_state.outcome.exception()
        log.warning(
            "Fetch attempt {}/{} failed: {}. Retrying...",
            retry_state.attempt_number, self.max_retries, exc
        )

    async def _request(self, url: str, mode: str, **kwargs) -> httpx.Response:
        await self.rate_limiter.acquire()

        referer = kwargs.pop("referer", None)
        headers = self.header_manager.get_headers(mode=mode, referer=referer)
        headers.update(kwargs.pop("headers", None) or {})

        log.debug(f"Fetching {url}")
        response = await self.client.get(url, headers=headers, **kwargs)

        if response.status_code == 429:
            if hasattr(self.rate_limiter, "on_rate_limit_error"):
                self.rate_limiter.on_rate_limit_error()
            raise RateLimitException(f"Server returned 429 for {url}")

        if hasattr(self.rate_limiter, "on_success") and response.is_success:
            self.rate_limiter.on_success()
        return response

    async def _do_fetch(self, url: str, mode: str, **kwargs) -> httpx.Response:
        """GET with retries; raises TransportError on any final failure"""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=self.backoff_min, max=self.backoff_max),
            retry=retry_if_exception_type((RateLimitException, httpx.TransportError)),
            before_sleep=self._log_retry,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._request(url, mode, **dict(kwargs))
        except RetryError as e:
            last = e.last_attempt.exception()
            log.error(f"Failed to fetch {url} after {self.max_retries} attempts: {last}")
            status = 429 if isinstance(last, RateLimitException) else None
            raise TransportError(f"Persistent failure for {url}: {last}", url=url, status_code=status) from last
        except httpx.HTTPError as e:
            log.error(f"Failed to fetch {url}: {e}")
            raise TransportError(f"Unable to fetch {url}: {e}", url=url) from e

        if not response.is_success:
            raise TransportError(
                f"{url} answered with status {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    async def fetch_html(self, url: str, **kwargs) -> str:
        """
        Fetch an HTML document

        Args:
            url: Target URL
            **kwargs: Additional kwargs for the httpx request (params, referer, headers)

        Returns:
            HTML string
        """
        response = await self._do_fetch(url, "html", **kwargs)
        return response.text

    async def fetch_json(self, url: str, **kwargs) -> Any:
        """
        Fetch a JSON document

        Undecodable bodies are logged and returned as an empty dict so that
        callers see missing values rather than a failure.
        """
        response = await self._do_fetch(url, "json", **kwargs)
        try:
            return response.json()
        except ValueError as e:
            log.warning(f"Invalid JSON from {url}: {e}")
            return {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def build_fetcher(settings: Optional[Dict[str, Any]] = None, **kwargs) -> Fetcher:
    """Create a Fetcher from the ``fetcher`` section of settings.yaml"""
    settings = settings or {}
    limiter = AdaptiveRateLimiter(
        requests_per_minute=int(settings.get("requests_per_minute", 20)),
        base_delay=float(settings.get("base_delay", 2.0)),
        jitter_range=float(settings.get("jitter_range", 1.0)),
    )
    return Fetcher(
        rate_limiter=limiter,
        timeout=float(settings.get("timeout", 15.0)),
        max_retries=int(settings.get("max_retries", 3)),
        **kwargs,
    )
