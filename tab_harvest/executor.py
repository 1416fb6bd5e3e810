# tab_harvest/executor.py
"""
Remote script execution: run a pure detection function in the context of a page.

:class:`ScriptExecutor` is the capability the scanner and the archive builder
depend on. :class:`HttpPageExecutor` implements it for ordinary web pages: it
loads the page the way a tab would (markup plus its ``<img>`` resources) and
calls the function with a :class:`~tab_harvest.detector.PageContext`.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Protocol
from urllib.parse import unquote, urljoin, urlparse

from aiohttp import ClientError, ClientSession
from bs4 import BeautifulSoup

from tab_harvest.config import HarvesterConfig
from tab_harvest.detector import PageContext
from tab_harvest.errors import PageAccessError
from tab_harvest.models import PageCandidate

PageFunction = Callable[[PageContext], Any]


class ScriptExecutor(Protocol):
    """Runs *func* inside the page identified by *page_id*."""

    async def execute(self, page_id: int, func: PageFunction) -> Any:
        ...


class HttpPageExecutor:
    """Loads pages over HTTP (or from ``file:`` URLs) and runs functions against them."""

    def __init__(
        self,
        session: ClientSession,
        config: HarvesterConfig,
        pages: Iterable[PageCandidate] = (),
    ) -> None:
        self.session = session
        self.config = config
        self.pages: Dict[int, PageCandidate] = {p.page_id: p for p in pages}
        self.logger = logging.getLogger("TabHarvest")

    def register(self, pages: Iterable[PageCandidate]) -> None:
        for page in pages:
            self.pages[page.page_id] = page

    async def execute(self, page_id: int, func: PageFunction) -> Any:
        page = self.pages.get(page_id)
        if page is None:
            raise PageAccessError(page_id, "no such page")
        context = await self._load(page)
        return func(context)

    async def _load(self, page: PageCandidate) -> PageContext:
        scheme = urlparse(page.url).scheme.lower()
        if scheme == "file":
            html = self._read_file(page)
        elif scheme in ("http", "https"):
            html = await self._get_html(page)
        else:
            raise PageAccessError(page.page_id, f"unsupported scheme {scheme!r}")

        images: Mapping[str, bytes] = {}
        if self.config.load_page_images and self.config.max_page_images:
            images = await self._load_images(page.url, html)
        return PageContext(url=page.url, html=html, images=images)

    @staticmethod
    def _read_file(page: PageCandidate) -> str:
        path = Path(unquote(urlparse(page.url).path))
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise PageAccessError(page.page_id, str(exc)) from exc

    async def _get_html(self, page: PageCandidate) -> str:
        try:
            async with self.session.get(page.url) as resp:
                if resp.status != 200:
                    raise PageAccessError(page.page_id, f"HTTP {resp.status}")
                return await resp.text(errors="replace")
        except (ClientError, asyncio.TimeoutError) as exc:
            raise PageAccessError(page.page_id, str(exc) or type(exc).__name__) from exc

    async def _load_images(self, base_url: str, html: str) -> Dict[str, bytes]:
        soup = BeautifulSoup(html, "html.parser")
        sources: list[str] = []
        for img in soup.find_all("img"):
            raw = str(img.get("src") or "").strip()
            if not raw:
                continue
            src = urljoin(base_url, raw)
            if urlparse(src).scheme in ("http", "https", "file") and src not in sources:
                sources.append(src)
        sources = sources[: self.config.max_page_images]
        bodies = await asyncio.gather(*(self._get_image(src) for src in sources))
        return {src: body for src, body in zip(sources, bodies) if body is not None}

    async def _get_image(self, src: str) -> Optional[bytes]:
        # a broken <img> does not break the page
        if src.startswith("file:"):
            try:
                return Path(unquote(urlparse(src).path)).read_bytes()
            except OSError:
                return None
        try:
            async with self.session.get(src) as resp:
                if resp.status != 200:
                    return None
                return await resp.read()
        except (ClientError, asyncio.TimeoutError) as exc:
            self.logger.debug("Image %s not loaded: %s", src, exc)
            return None
