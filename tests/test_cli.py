# File: tests/test_cli.py
"""Тесты для CLI (`tab_harvest/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `scan`, `harvest`, `config`, `--version`, а также обработку ошибок.
"""
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import tab_harvest.cli as cli_module
from tab_harvest.cli import cli
from tab_harvest.errors import NothingToArchiveError
from tab_harvest.models import DetectionResult, PublishedArchive


def fake_results(pages):
    results = {}
    for page in pages:
        if page.url.startswith("https://"):
            results[page.page_id] = DetectionResult(
                True, f"{page.url}img.png", "img.png", thumbnail="data:image/png;base64,AA", title="T"
            )
        else:
            results[page.page_id] = DetectionResult.unavailable("Restricted page")
    return results


@pytest.fixture(autouse=True)
def patch_runs(monkeypatch):
    """Патчим run_scan/run_harvest, чтобы не ходить в сеть."""
    calls = {}

    async def fake_scan(cfg, pages):
        calls["scan"] = (cfg, pages)
        return fake_results(pages)

    async def fake_harvest(cfg, pages, spec):
        calls["harvest"] = (cfg, pages, spec)
        published = PublishedArchive(
            filename="bulk_images_2024-05-01T10-20-30.zip",
            location=Path(cfg.output_dir) / "bulk_images_2024-05-01T10-20-30.zip",
            success_count=2,
            error_count=1,
        )
        return fake_results(pages), published

    monkeypatch.setattr(cli_module, "run_scan", fake_scan)
    monkeypatch.setattr(cli_module, "run_harvest", fake_harvest)
    return calls


@pytest.fixture()
def tabs_file(tmp_path) -> Path:
    path = tmp_path / "tabs.yaml"
    path.write_text(
        "- {id: 7, url: 'https://a.example/', title: 'A'}\n- 'chrome://settings'\n",
        encoding="utf-8",
    )
    return path


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "TabHarvest" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "cfg.json"
    cfg_file.write_text(json.dumps({"archive_prefix": "mine", "timeout": 3}), encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["archive_prefix"] == "mine"
    assert data["timeout"] == 3.0


def test_bad_config(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text("entry_spacing: 1", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_scan_stdout(tabs_file, patch_runs):
    result = CliRunner().invoke(cli, ["scan", str(tabs_file)])
    assert result.exit_code == 0
    rows = json.loads(result.stdout)
    assert [r["page_id"] for r in rows] == [7, 2]
    assert rows[0]["filename"] == "img.png"
    assert rows[1]["reason"] == "Restricted page"
    assert "thumbnail" not in rows[0]
    assert [p.page_id for p in patch_runs["scan"][1]] == [7, 2]


def test_scan_reports(tabs_file, tmp_path):
    json_out = tmp_path / "out" / "scan.json"
    html_out = tmp_path / "out" / "scan.html"
    result = CliRunner().invoke(
        cli, ["scan", str(tabs_file), "--json", str(json_out), "--html", str(html_out), "--pretty"]
    )
    assert result.exit_code == 0
    assert json.loads(json_out.read_text(encoding="utf-8"))[0]["title"] == "A"
    html = html_out.read_text(encoding="utf-8")
    assert "filename: img.png" in html
    assert "Restricted page" in html
    assert "data:image/png;base64,AA" in html


def test_harvest(tabs_file, tmp_path, patch_runs):
    out_dir = tmp_path / "dl"
    result = CliRunner().invoke(cli, ["harvest", str(tabs_file), "--select", "1", "--output", str(out_dir)])
    assert result.exit_code == 0
    assert "Done! Downloaded bulk_images_2024-05-01T10-20-30.zip (2 images). Errors: 1" in result.output
    cfg, pages, spec = patch_runs["harvest"]
    assert cfg.output_dir == out_dir
    assert spec == "1"


def test_harvest_nothing_to_archive(tabs_file, monkeypatch):
    async def failing(cfg, pages, spec):
        raise NothingToArchiveError(2)

    monkeypatch.setattr(cli_module, "run_harvest", failing)
    result = CliRunner().invoke(cli, ["harvest", str(tabs_file)])
    assert result.exit_code == 1
    assert "No images could be downloaded (0 images). Errors: 2" in result.output


def test_empty_pages_file(tmp_path):
    empty = tmp_path / "tabs.json"
    empty.write_text("[]", encoding="utf-8")
    result = CliRunner().invoke(cli, ["scan", str(empty)])
    assert result.exit_code == 1
