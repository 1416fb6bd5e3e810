import pytest

from tab_harvest.models import DetectionResult, PageCandidate
from tab_harvest.selection import parse_positions, select

PAGES = [PageCandidate(i, f"https://p{i}.example/") for i in (10, 20, 30, 40, 50)]
RESULTS = {
    10: DetectionResult(True, "https://x/1.png", "1.png"),
    20: DetectionResult.unavailable("Restricted page"),
    30: DetectionResult(True, "https://x/3.png", "3.png"),
    40: DetectionResult(True, "https://x/4.png", "4.png"),
    50: DetectionResult.unavailable("No image elements or background found"),
}


def ids(entries):
    return [e.page.page_id for e in entries]


def test_select_all_skips_unavailable():
    assert ids(select(PAGES, RESULTS, "all")) == [10, 30, 40]


def test_select_range_skips_unavailable_inside():
    assert ids(select(PAGES, RESULTS, "1-4")) == [10, 30, 40]


def test_select_reverse_range_and_duplicates():
    assert ids(select(PAGES, RESULTS, "4-3, 1, 3")) == [10, 30, 40]


def test_selection_carries_detection():
    entry = select(PAGES, RESULTS, "3")[0]
    assert entry.detection is RESULTS[30]


def test_explicit_unavailable_page_is_error():
    with pytest.raises(ValueError):
        select(PAGES, RESULTS, "2")


@pytest.mark.parametrize("spec", ["0", "6", "1-9", "x", "1-b"])
def test_bad_positions(spec):
    with pytest.raises(ValueError):
        parse_positions(spec, 5)


def test_parse_positions():
    assert parse_positions("5, 2-3,,3", 5) == [1, 2, 4]
