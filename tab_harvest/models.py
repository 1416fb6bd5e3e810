"""
Data models for TabHarvest: scanned pages, detection results and archive entries.
"""
from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional


@dataclass(frozen=True, slots=True)
class PageCandidate:
    """One open page eligible for scanning."""

    page_id: int
    url: str
    title: str = ""


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """Outcome of running image detection against one page."""

    available: bool
    src: Optional[str] = None
    filename: Optional[str] = None
    thumbnail: Optional[str] = None
    title: str = ""
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if self.available and not (self.src and self.filename):
            raise ValueError("available result requires src and filename")
        if not self.available and not self.reason:
            raise ValueError("unavailable result requires a reason")

    @classmethod
    def unavailable(cls, reason: str, title: str = "") -> DetectionResult:
        return cls(available=False, reason=reason, title=title)

    @classmethod
    def from_payload(cls, payload: Any) -> DetectionResult:
        """Build a result from the JSON-shaped value returned by a detection function."""
        if not isinstance(payload, Mapping):
            return cls.unavailable("No image found")
        title = str(payload.get("title") or "")
        if payload.get("available") and payload.get("src"):
            src = str(payload["src"])
            return cls(
                available=True,
                src=src,
                filename=str(payload.get("filename") or "") or _fallback_name(src),
                thumbnail=payload.get("thumb") or payload.get("thumbnail"),
                title=title,
            )
        return cls.unavailable(str(payload.get("reason") or "No image found"), title)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "src": self.src,
            "filename": self.filename,
            "thumbnail": self.thumbnail,
            "title": self.title,
            "reason": self.reason,
        }


def _fallback_name(src: str) -> str:
    # an available result always carries a filename, even if the URL has no path segment
    return src.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1] or "image"


@dataclass(frozen=True, slots=True)
class SelectionEntry:
    """Caller's choice to include a page in the archive."""

    page: PageCandidate
    detection: Optional[DetectionResult] = None


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One file inside the archive."""

    filename: str
    data: bytes
    timestamp: datetime
    page_id: int


class ImageArchive:
    """In-memory, insertion-ordered collection of archive entries.

    Serialized as a ZIP container; entries are stored as-is (image formats are
    already compressed). ZIP keeps modification times with 2-second resolution,
    which is why entry timestamps are spaced far apart.
    """

    def __init__(self) -> None:
        self._entries: List[ArchiveEntry] = []
        self._names: set[str] = set()

    def __contains__(self, filename: object) -> bool:
        return filename in self._names

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self._entries)

    def add(self, entry: ArchiveEntry) -> None:
        if entry.filename in self._names:
            raise ValueError(f"duplicate archive entry: {entry.filename}")
        self._entries.append(entry)
        self._names.add(entry.filename)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_STORED) as zf:
            for entry in self._entries:
                info = zipfile.ZipInfo(entry.filename, date_time=entry.timestamp.timetuple()[:6])
                info.compress_type = zipfile.ZIP_STORED
                zf.writestr(info, entry.data)
        return buffer.getvalue()


@dataclass(slots=True)
class ArchiveResult:
    """Terminal outcome of one archive build."""

    success_count: int
    error_count: int
    archive: ImageArchive = field(default_factory=ImageArchive)


@dataclass(frozen=True, slots=True)
class PublishedArchive:
    """What the publisher reports back once the download sink accepted the archive."""

    filename: str
    location: Path
    success_count: int
    error_count: int
