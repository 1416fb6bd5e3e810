"""tab_harvest.archive: сборка ZIP-архива из выбранных изображений и его публикация."""

from .builder import ArchiveBuilder, unique_filename
from .publisher import ArchivePublisher, archive_filename
from .sink import DirectoryDownloadSink, DownloadSink

__all__ = [
    "ArchiveBuilder",
    "ArchivePublisher",
    "DirectoryDownloadSink",
    "DownloadSink",
    "archive_filename",
    "unique_filename",
]
