# File: tests/conftest.py
import io
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import pytest
from PIL import Image

from tab_harvest.config import HarvesterConfig
from tab_harvest.detector import PageContext
from tab_harvest.errors import FetchError, PageAccessError
from tab_harvest.logger import LOGGER_NAME
from tab_harvest.models import PageCandidate


def make_png(width: int, height: int, color=(200, 30, 30)) -> bytes:
    """Encode a solid-colour PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeExecutor:
    """ScriptExecutor over in-memory pages; an Exception value simulates an inaccessible page."""

    def __init__(self, pages: Dict[int, Union[PageContext, Exception]]) -> None:
        self.pages = pages
        self.calls: List[int] = []

    async def execute(self, page_id: int, func: Callable[[PageContext], Any]) -> Any:
        self.calls.append(page_id)
        page = self.pages.get(page_id)
        if page is None:
            raise PageAccessError(page_id, "tab closed")
        if isinstance(page, Exception):
            raise page
        return func(page)


class FakeFetcher:
    """Returns canned bytes per URL; missing URLs answer HTTP 404."""

    def __init__(self, bodies: Dict[str, bytes]) -> None:
        self.bodies = bodies
        self.calls: List[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.bodies:
            raise FetchError(url, "HTTP 404", status=404)
        return self.bodies[url]


class MemorySink:
    def __init__(self) -> None:
        self.saved: Dict[str, bytes] = {}

    async def save(self, data: bytes, filename: str) -> Path:
        self.saved[filename] = data
        return Path("/downloads") / filename


@pytest.fixture()
def png() -> Callable[..., bytes]:
    return make_png


@pytest.fixture()
def config(tmp_path) -> HarvesterConfig:
    """Basic config writing archives into a temporary directory."""
    return HarvesterConfig(timeout=2.0, retry_times=0, output_dir=tmp_path / "downloads")


@pytest.fixture()
def two_pages() -> List[PageCandidate]:
    return [
        PageCandidate(page_id=11, url="https://a.example/gallery", title="Gallery A"),
        PageCandidate(page_id=22, url="https://b.example/", title="Page B"),
    ]


@pytest.fixture()
def two_page_contexts() -> Dict[int, PageContext]:
    """Page A has two <img>, page B only a body background."""
    page_a = PageContext(
        url="https://a.example/gallery",
        html=(
            "<html><head><title>Gallery A</title></head><body>"
            '<img src="a.jpg" width="800" height="600">'
            '<img src="b.jpg" width="400" height="300">'
            "</body></html>"
        ),
    )
    page_b = PageContext(
        url="https://b.example/",
        html='<html><body style="background-image: url(&quot;https://x/c.png&quot;)"></body></html>',
    )
    return {11: page_a, 22: page_b}


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests bind handlers to CliRunner streams; drop them afterwards."""
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()
