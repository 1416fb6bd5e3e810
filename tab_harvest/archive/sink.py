"""Download handoff: persist a finished archive to the download location."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Union

from tab_harvest.errors import PublishError

__all__ = ["DownloadSink", "DirectoryDownloadSink"]


class DownloadSink(Protocol):
    async def save(self, data: bytes, filename: str) -> Path:
        ...


class DirectoryDownloadSink:
    """Saves files into *directory*; an existing name becomes ``name (1).ext``, ``name (2).ext``…"""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory).expanduser()
        self.logger = logging.getLogger("TabHarvest")

    def _free_path(self, filename: str) -> Path:
        target = self.directory / filename
        counter = 0
        while target.exists():
            counter += 1
            target = self.directory / f"{Path(filename).stem} ({counter}){Path(filename).suffix}"
        return target

    async def save(self, data: bytes, filename: str) -> Path:
        if Path(filename).name != filename:
            raise PublishError(f"Invalid download filename: {filename!r}")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target = self._free_path(filename)
            with target.open("xb") as fh:
                fh.write(data)
        except OSError as exc:
            raise PublishError(f"Cannot save {filename} to {self.directory}: {exc}") from exc
        self.logger.debug("Saved %d bytes to %s", len(data), target)
        return target
