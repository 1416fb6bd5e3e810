#!/usr/bin/env python3
"""
Точка входа TabHarvest для командной строки.

Команды:
  scan      Просканировать вкладки и вывести/сохранить отчёт
  harvest   Просканировать, выбрать страницы и скачать ZIP-архив изображений
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только консоль, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  tab-harvest harvest tabs.yaml --select 1,3-5 --output ~/Downloads
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Tuple

import click

from tab_harvest import __version__
from tab_harvest.config import HarvesterConfig, load_config
from tab_harvest.engine import Harvester
from tab_harvest.errors import HarvestError
from tab_harvest.logger import init_logging
from tab_harvest.models import DetectionResult, PageCandidate, PublishedArchive
from tab_harvest.pages import load_pages
from tab_harvest.report import render_html, render_json, scan_rows

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _status(message: str) -> None:
    click.echo(message, err=True)


async def run_scan(cfg: HarvesterConfig, pages: List[PageCandidate]) -> Dict[int, DetectionResult]:
    """Сканирует *pages* и возвращает результаты обнаружения."""
    async with Harvester(cfg, progress=_status) as harvester:
        return await harvester.scan(pages)


async def run_harvest(
    cfg: HarvesterConfig, pages: List[PageCandidate], selection_spec: str
) -> Tuple[Dict[int, DetectionResult], PublishedArchive]:
    """Сканирует, собирает и публикует архив в одной HTTP-сессии."""
    async with Harvester(cfg, progress=_status) as harvester:
        results = await harvester.scan(pages)
        published = await harvester.harvest(pages, results, selection_spec)
    return results, published


def _load_pages_or_exit(pages_file: Path) -> List[PageCandidate]:
    try:
        pages = load_pages(pages_file)
    except Exception as e:
        print_error(f'Ошибка чтения списка вкладок: {e}')
    if not pages:
        print_error('Список вкладок пуст')
    return pages


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='TabHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только консоль, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд TabHarvest CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('pages_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию встроенные)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def scan(ctx, pages_file, json_output, html_output, template_dir, pretty):
    """Просканировать вкладки из PAGES_FILE и показать найденные изображения."""
    cfg = ctx.obj['config']
    pages = _load_pages_or_exit(pages_file)
    try:
        results = asyncio.run(run_scan(cfg, pages))
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')

    rows = scan_rows(pages, results)

    # Если не сохраняем в файл — печатаем в stdout
    if not json_output and not html_output:
        indent = 2 if pretty else None
        data = [{k: v for k, v in row.items() if k != 'thumbnail'} for row in rows]
        click.echo(json.dumps(data, ensure_ascii=False, indent=indent))
        return

    if json_output:
        try:
            saved_json = render_json(rows, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(rows, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('harvest', context_settings=CONTEXT_SETTINGS)
@click.argument('pages_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--select', '-s', 'selection_spec',
    default='all', show_default=True,
    help='Какие строки скачать: "all" или номера/диапазоны, например "1,3-5"'
)
@click.option(
    '--output', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для архива (override output_dir)'
)
@click.pass_context
def harvest(ctx, pages_file, selection_spec, output_dir):
    """Скачать главное изображение каждой вкладки одним ZIP-архивом."""
    cfg = ctx.obj['config']
    if output_dir is not None:
        cfg = cfg.model_copy(update={'output_dir': output_dir})
    pages = _load_pages_or_exit(pages_file)
    try:
        _, published = asyncio.run(run_harvest(cfg, pages, selection_spec))
    except (HarvestError, ValueError) as e:
        print_error(str(e))
    except Exception as e:
        print_error(f'Ошибка при сборке архива: {e}')

    click.echo(
        f'Done! Downloaded {published.filename} ({published.success_count} images). '
        f'Errors: {published.error_count}'
    )
    click.echo(f'Saved to: {published.location}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
