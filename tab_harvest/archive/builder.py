"""Sequential fetch-and-pack of the selected pages into an :class:`ImageArchive`.

Entries are processed strictly one at a time: this bounds network and memory
load and keeps progress reporting and entry order deterministic. Each entry
gets a synthetic timestamp ``batch_start + index * spacing`` so that archive
order survives timestamp truncation (ZIP and FAT keep 2-second resolution).
"""
from __future__ import annotations

import functools
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Protocol, Sequence

from tab_harvest.config import HarvesterConfig
from tab_harvest.detector import detect_image
from tab_harvest.errors import NoSelectionError, NothingToArchiveError
from tab_harvest.executor import ScriptExecutor
from tab_harvest.models import ArchiveEntry, ArchiveResult, ImageArchive, SelectionEntry

__all__ = ["ArchiveBuilder", "BytesFetcher", "unique_filename"]


class BytesFetcher(Protocol):
    async def fetch(self, url: str) -> bytes:
        ...


def unique_filename(name: str, page_id: int, archive: ImageArchive) -> str:
    """Return *name*, or ``<base>_<page_id>.<ext>`` when the archive already holds it."""
    if name not in archive:
        return name
    base, dot, ext = name.rpartition(".")
    if not dot or not base:
        base, ext = name, ""
    suffix = f".{ext}" if ext else ""
    candidate = f"{base}_{page_id}{suffix}"
    counter = 1
    while candidate in archive:
        counter += 1
        candidate = f"{base}_{page_id}-{counter}{suffix}"
    return candidate


class ArchiveBuilder:
    """Fetches every selected image in selection order and packs it."""

    def __init__(
        self,
        executor: ScriptExecutor,
        fetcher: BytesFetcher,
        config: HarvesterConfig,
        progress: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.executor = executor
        self.fetcher = fetcher
        self.spacing = timedelta(seconds=config.entry_spacing)
        self.progress = progress
        self.clock = clock
        self.logger = logging.getLogger("TabHarvest")
        self.detector = functools.partial(detect_image, thumbnail_size=config.thumbnail_size)

    def _report(self, message: str) -> None:
        self.logger.info(message)
        if self.progress is not None:
            self.progress(message)

    async def _redetect(self, entry: SelectionEntry) -> Optional[dict[str, Any]]:
        page = entry.page
        try:
            info = await self.executor.execute(page.page_id, self.detector)
        except Exception as exc:  # noqa: BLE001 - counted as an entry error
            self.logger.error("Process error for page %s: %s", page.page_id, exc)
            return None
        if not isinstance(info, dict) or not info.get("available") or not info.get("src"):
            self.logger.warning("No image info for page %s: %s", page.page_id, info)
            return None
        return info

    async def build(self, selection: Sequence[SelectionEntry]) -> ArchiveResult:
        """
        Build the archive for *selection*.

        Raises NoSelectionError for an empty selection and NothingToArchiveError
        when no entry could be fetched.
        """
        if not selection:
            raise NoSelectionError()

        total = len(selection)
        self._report(f"Preparing to download {total} images...")
        archive = ImageArchive()
        errors = 0
        batch_start = self.clock()

        for index, entry in enumerate(selection):
            page_id = entry.page.page_id
            info = await self._redetect(entry)
            if info is None:
                errors += 1
                continue

            src = str(info["src"])
            self._report(f"Fetching {index + 1}/{total}: {info.get('filename') or src}")
            try:
                data = await self.fetcher.fetch(src)
            except Exception as exc:  # noqa: BLE001 - counted as an entry error
                self.logger.error("Fetch error for %s: %s", src, exc)
                errors += 1
                continue

            filename = unique_filename(
                str(info.get("filename") or "") or f"image_{page_id}.jpg", page_id, archive
            )
            archive.add(
                ArchiveEntry(
                    filename=filename,
                    data=data,
                    timestamp=batch_start + index * self.spacing,
                    page_id=page_id,
                )
            )

        self.logger.info("Archive build finished: %d ok, %d errors", len(archive), errors)
        if not len(archive):
            raise NothingToArchiveError(errors)
        return ArchiveResult(success_count=len(archive), error_count=errors, archive=archive)
