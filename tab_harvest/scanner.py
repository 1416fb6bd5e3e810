# === FILE: tab_harvest/scanner.py ===
"""
Параллельное сканирование вкладок: поиск изображения на каждой странице.
"""
from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Callable, Dict, Optional, Sequence

from tab_harvest.config import HarvesterConfig
from tab_harvest.detector import detect_image
from tab_harvest.executor import ScriptExecutor
from tab_harvest.models import DetectionResult, PageCandidate
from tab_harvest.pages import is_restricted

RESTRICTED_REASON = "Restricted page"
INACCESSIBLE_REASON = "Cannot access (extension or special page)"

__all__ = ["ScanOrchestrator", "RESTRICTED_REASON", "INACCESSIBLE_REASON"]


class ScanOrchestrator:
    """Запускает обнаружение на всех страницах одновременно и собирает результаты по порядку."""

    def __init__(
        self,
        executor: ScriptExecutor,
        config: HarvesterConfig,
        progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.executor = executor
        self.config = config
        self.progress = progress
        self.logger = logging.getLogger("TabHarvest")
        self.detector = functools.partial(detect_image, thumbnail_size=config.thumbnail_size)

    def _report(self, message: str) -> None:
        self.logger.info(message)
        if self.progress is not None:
            self.progress(message)

    async def scan(self, pages: Sequence[PageCandidate]) -> Dict[int, DetectionResult]:
        """
        Возвращает mapping page_id -> DetectionResult в порядке *pages*.

        Завершается только после того, как обработана каждая страница.
        """
        self._report("Scanning tabs...")
        start = time.monotonic()
        results = await asyncio.gather(*(self._scan_page(page) for page in pages))
        found = sum(1 for r in results if r.available)
        self.logger.info(
            "Scanned %d pages in %.2f s: %d with images, %d without",
            len(pages), time.monotonic() - start, found, len(pages) - found,
        )
        self._report("Scan complete.")
        return {page.page_id: result for page, result in zip(pages, results)}

    async def _scan_page(self, page: PageCandidate) -> DetectionResult:
        if is_restricted(page.url, self.config.restricted_prefixes, self.config.restricted_markers):
            return DetectionResult.unavailable(RESTRICTED_REASON, page.title)
        try:
            payload = await self.executor.execute(page.page_id, self.detector)
        except Exception as exc:  # noqa: BLE001 - one page never breaks the scan
            self.logger.warning("Page %s (%s) not scanned: %s", page.page_id, page.url, exc)
            return DetectionResult.unavailable(INACCESSIBLE_REASON, page.title)
        return DetectionResult.from_payload(payload)
