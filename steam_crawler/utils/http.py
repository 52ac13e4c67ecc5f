from __future__ import annotations

import asyncio
from typing import Dict, Optional
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

logger = logging.getLogger(__name__)

# Pre-answers the store's age-verification interstitial for mature titles.
AGE_GATE_COOKIE = (
    "birthtime=0; lastagecheckage=1-January-1970; "
    "wants_mature_content=1; mature_content=1"
)


class FetchError(Exception):
    """A page could not be retrieved (network error, timeout or non-success status)."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"failed to fetch {url}: {cause!r}")
        self.url = url
        self.cause = cause


def default_headers(user_agent: str, accept_language: str = "en-US,en;q=0.9") -> Dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": accept_language,
        "Cookie": AGE_GATE_COOKIE,
    }


async def fetch_text(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 15.0,
    retries: int = 2,
) -> str:
    """
    Fetch a URL and return body text. Raises FetchError once every attempt has failed.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            async with session.get(url, timeout=ClientTimeout(total=timeout)) as resp:
                resp.raise_for_status()
                return await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            last_exc = exc
            logger.debug("fetch_text attempt %s failed for %s: %r", attempt + 1, url, exc)
            if attempt < retries:
                await asyncio.sleep(min(2 ** attempt, 5))
    logger.warning("fetch_text failed for %s after %s attempts: %r", url, retries + 1, last_exc)
    raise FetchError(url, last_exc)


def create_session(user_agent: str, accept_language: str = "en-US,en;q=0.9", limit: int = 0) -> ClientSession:
    """
    Create a shared aiohttp ClientSession carrying the store's static request headers.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=limit)  # 0 = unlimited; concurrency managed by the engine
    return aiohttp.ClientSession(
        connector=connector,
        headers=default_headers(user_agent, accept_language),
    )
