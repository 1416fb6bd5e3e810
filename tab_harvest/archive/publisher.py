"""Finalize an archive into one ZIP blob and hand it to the download sink."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from tab_harvest.archive.sink import DownloadSink
from tab_harvest.errors import PublishError, SerializationError
from tab_harvest.models import ArchiveResult, PublishedArchive

__all__ = ["ArchivePublisher", "archive_filename"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def archive_filename(prefix: str, moment: datetime) -> str:
    """``<prefix>_2024-05-01T10-20-30.zip``: ISO-8601 with ``:`` and ``.`` made filesystem-safe."""
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace(":", "-").replace(".", "-")[:19]
    return f"{prefix}_{stamp}.zip"


class ArchivePublisher:
    def __init__(
        self,
        sink: DownloadSink,
        prefix: str = "bulk_images",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.sink = sink
        self.prefix = prefix
        self.clock = clock
        self.logger = logging.getLogger("TabHarvest")

    async def publish(self, result: ArchiveResult) -> PublishedArchive:
        """Serialize *result* and save it; neither step is retried."""
        if not len(result.archive):
            raise SerializationError("Refusing to publish an empty archive")
        try:
            blob = result.archive.to_bytes()
        except Exception as exc:  # noqa: BLE001 - zipfile raises a variety of errors
            raise SerializationError(f"Error creating zip file: {exc}") from exc

        filename = archive_filename(self.prefix, self.clock())
        try:
            location = await self.sink.save(blob, filename)
        except PublishError:
            raise
        except Exception as exc:  # noqa: BLE001 - any sink failure fails the publish
            raise PublishError(f"Download failed for {filename}: {exc}") from exc

        self.logger.info("Published %s (%d bytes, %d images)", location, len(blob), result.success_count)
        return PublishedArchive(
            filename=filename,
            location=location,
            success_count=result.success_count,
            error_count=result.error_count,
        )
