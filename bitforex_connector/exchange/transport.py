from __future__ import annotations

"""
aiohttp transport
=================

Default `HttpTransport` implementation. HTTP errors surface as
`aiohttp.ClientResponseError` and timeouts as `asyncio.TimeoutError`; both
propagate to the caller untouched.
"""

import logging
from typing import Any, Mapping, Optional

import aiohttp

logger = logging.getLogger(__name__)


class AiohttpTransport:
    def __init__(
        self,
        *,
        timeout_s: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> Any:
        session = await self._get_session()
        async with session.request(method, url, headers=headers, data=body) as response:
            if response.status >= 400:
                text = await response.text()
                logger.warning(f"HTTP {response.status} from {method} {url.split('?', 1)[0]}: {text[:200]}")
            response.raise_for_status()
            return await response.json(content_type=None)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


__all__ = ["AiohttpTransport"]
