# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tab_harvest.config import HarvesterConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("timeout: 5\nentry_spacing: 60", ".yaml", None),
        (json.dumps({"timeout": 5, "entry_spacing": 60}), ".json", None),
        ("entry_spacing: 2", ".yaml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("archive_prefix: a/b", ".yaml", ValidationError),
        ("timeout: [unclosed", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("[1, 2]", ".json", TypeError),
        ("{bad json", ".json", ValueError),
        ("timeout = 5", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, HarvesterConfig)
        assert cfg.timeout == 5.0
        assert cfg.entry_spacing == 60.0


def test_defaults_when_no_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(None)
    assert cfg == HarvesterConfig()
    assert cfg.entry_spacing == 120.0
    assert cfg.thumbnail_size == 160
    assert "chrome:" in cfg.restricted_prefixes


def test_default_file_is_used(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("archive_prefix: tabs\n", encoding="utf-8")
    assert load_config(None).archive_prefix == "tabs"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_shipped_default_config_is_valid():
    shipped = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"
    assert load_config(shipped) == HarvesterConfig()


def test_config_is_frozen():
    cfg = HarvesterConfig()
    with pytest.raises(ValidationError):
        cfg.timeout = 1.0
