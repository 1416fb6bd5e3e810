# File: tab_harvest/engine.py
"""tab_harvest.engine: фасад, связывающий сканирование, выбор, сборку и публикацию архива."""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional, Sequence

from aiohttp import ClientSession, ClientTimeout

from tab_harvest.archive import ArchiveBuilder, ArchivePublisher, DirectoryDownloadSink, DownloadSink
from tab_harvest.config import HarvesterConfig
from tab_harvest.executor import HttpPageExecutor
from tab_harvest.fetcher import ImageFetcher
from tab_harvest.logger import logger
from tab_harvest.models import DetectionResult, PageCandidate, PublishedArchive
from tab_harvest.scanner import ScanOrchestrator
from tab_harvest.selection import select

__all__ = ["Harvester"]


class Harvester:
    """Фасад для CLI и тестов: одна HTTP-сессия на весь запуск.

    Использование::

        async with Harvester(cfg) as harvester:
            results = await harvester.scan(pages)
            published = await harvester.harvest(pages, results, "all")
    """

    def __init__(
        self,
        config: HarvesterConfig,
        progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config
        self.progress = progress
        self.session: Optional[ClientSession] = None
        self.executor: Optional[HttpPageExecutor] = None

    async def __aenter__(self) -> Harvester:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.executor = HttpPageExecutor(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def _require_executor(self) -> HttpPageExecutor:
        if self.executor is None:
            raise RuntimeError("Session not initialized")
        return self.executor

    async def scan(self, pages: Sequence[PageCandidate]) -> Dict[int, DetectionResult]:
        """Сканирует все страницы параллельно; порядок результата = порядок *pages*."""
        executor = self._require_executor()
        executor.register(pages)
        return await ScanOrchestrator(executor, self.config, self.progress).scan(pages)

    async def harvest(
        self,
        pages: Sequence[PageCandidate],
        results: Mapping[int, DetectionResult],
        selection_spec: str = "all",
        sink: Optional[DownloadSink] = None,
    ) -> PublishedArchive:
        """Собирает архив по выбору *selection_spec* и передаёт его в *sink*."""
        executor = self._require_executor()
        selection = select(pages, results, selection_spec)
        fetcher = ImageFetcher(executor.session, self.config)
        builder = ArchiveBuilder(executor, fetcher, self.config, self.progress)
        result = await builder.build(selection)

        if self.progress is not None:
            self.progress(f"Zipping {result.success_count} images...")
        publisher = ArchivePublisher(
            sink or DirectoryDownloadSink(self.config.output_dir), prefix=self.config.archive_prefix
        )
        published = await publisher.publish(result)
        logger.info("Harvest finished: %s", published.location)
        return published
