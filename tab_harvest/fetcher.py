# tab_harvest/fetcher.py
"""
Fetcher module: downloads image bytes with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import base64
import logging
import random
from pathlib import Path
from typing import Sequence
from urllib.parse import unquote, unquote_to_bytes, urlparse

from aiohttp import ClientError, ClientSession

from tab_harvest.config import HarvesterConfig
from tab_harvest.errors import FetchError

logger = logging.getLogger("TabHarvest")


def decode_data_url(url: str) -> bytes:
    """Decode an RFC 2397 ``data:`` URL into raw bytes."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise FetchError(url[:40], "malformed data URL")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except ValueError as exc:
            raise FetchError(url[:40], f"bad base64 payload: {exc}") from exc
    return unquote_to_bytes(payload)


class ImageFetcher:
    """Fetches one image per call; retries 5xx/429 and transport errors."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, session: ClientSession, config: HarvesterConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str) -> bytes:
        """
        Return the body at *url*.

        Raises FetchError on a non-success response or when retries run out.
        """
        if url.startswith("data:"):
            return decode_data_url(url)
        if url.startswith("file:"):
            try:
                return Path(unquote(urlparse(url).path)).read_bytes()
            except OSError as exc:
                raise FetchError(url, str(exc)) from exc

        attempts = 0
        while True:
            try:
                async with self.session.get(url, raise_for_status=False) as resp:
                    if resp.status in self._RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if not 200 <= resp.status < 300:
                        raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                    return await resp.read()
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(url, "timed out") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(url, str(exc) or type(exc).__name__) from exc
                backoff = min(60, 2**attempts + random.random())
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)
