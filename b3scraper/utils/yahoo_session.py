import asyncio
import random
from datetime import datetime
from typing import Dict, Optional

import httpx

from b3scraper.utils.headers import USER_AGENTS
from b3scraper.utils.logger import get_logger

log = get_logger(__name__)

YAHOO_HOME_URL = "https://finance.yahoo.com/"
YAHOO_CRUMB_URL = "https://query2.finance.yahoo.com/v1/test/getcrumb"
SESSION_MAX_AGE_SECONDS = 3600


class YahooSession:
    """
    Manages Yahoo Finance sessions (Cookies + Crumbs) for API access.
    Keeps the same User-Agent for the handshake and the API calls.
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cookies: Optional[Dict] = None
        self.crumb: Optional[str] = None
        self.last_update: Optional[datetime] = None
        self.timeout = timeout
        self._transport = transport
        self._lock = asyncio.Lock()
        self.ua = random.choice(USER_AGENTS)

    async def refresh_if_needed(self):
        """Refresh session info if older than one hour or missing"""
        async with self._lock:
            now = datetime.now()
            if not self.cookies or not self.last_update or (now - self.last_update).total_seconds() > SESSION_MAX_AGE_SECONDS:
                await self._refresh_session()

    async def _refresh_session(self):
        """Perform the Cookie/Crumb dance with Yahoo"""
        headers = {
            "User-Agent": self.ua,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        try:
            log.debug("Refreshing Yahoo Finance session...")
            async with httpx.AsyncClient(
                headers=headers,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(YAHOO_HOME_URL)
                self.cookies = dict(response.cookies)

                crumb_response = await client.get(YAHOO_CRUMB_URL)
                if crumb_response.status_code == 200 and crumb_response.text.strip():
                    self.crumb = crumb_response.text.strip()
                    log.debug("Yahoo session active. Crumb secured.")
                else:
                    log.warning(f"Yahoo crumb failed ({crumb_response.status_code}). Proceeding with cookies only.")
                    self.crumb = None
                # Marked even without crumb so a failing handshake is not retried on every symbol
                self.last_update = datetime.now()
        except httpx.HTTPError as e:
            log.warning(f"Yahoo session failure: {e}")
            self.crumb = None

    def get_api_params(self, base_params: Optional[Dict] = None) -> Dict:
        params = dict(base_params or {})
        # crumb=None or an empty crumb is answered with 401
        if self.crumb:
            params["crumb"] = self.crumb
        return params

    def get_headers(self) -> Dict:
        return {"User-Agent": self.ua}

    def get_cookies(self) -> Dict:
        return dict(self.cookies or {})

    async def clear_crumb(self):
        """Forget crumb and cookies to force a full refresh on next use"""
        async with self._lock:
            self.crumb = None
            self.cookies = None
            self.last_update = None
            log.debug("Yahoo session cleared")
