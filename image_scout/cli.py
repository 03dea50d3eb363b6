#!/usr/bin/env python3
"""
Точка входа для запуска ImageScout через командную строку.

Использование:
  image-scout [OPTIONS] URL DIRECTORY

Аргументы:
  URL                 Стартовая страница (абсолютный http/https адрес)
  DIRECTORY           Существующий каталог для изображений

Опции:
  --depth, -d N       Максимальная глубина перехода по ссылкам (default: 3)
  --outbound, -o      Переходить по ссылкам на другие хосты
  --mode MODE         parallel | sequential (default: из конфига)
  --crawl-timeout SEC Ожидание завершения всего обхода (override crawl_timeout)
  --config PATH       YAML/JSON с настройками (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования
  --version, -v       Показать версию ImageScout

Пример:
  image-scout --depth 2 --outbound https://example.com ./images
"""
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from image_scout import __version__
from image_scout.config import CrawlParameters, load_config
from image_scout.engine import start_crawl
from image_scout.logger import configure

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ImageScout, version %(version)s')
@click.argument('url')
@click.argument(
    'directory',
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    '--depth', '-d', 'depth',
    type=click.IntRange(min=0),
    default=3,
    show_default=True,
    help='Максимальная глубина перехода по ссылкам'
)
@click.option(
    '--outbound', '-o', 'outbound',
    is_flag=True,
    help='Переходить по ссылкам на другие хосты'
)
@click.option(
    '--mode', 'mode',
    type=click.Choice(['parallel', 'sequential']),
    default=None,
    help='Стратегия обхода (по умолчанию из конфига)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу настроек YAML/JSON.'
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
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
def cli(url, directory, depth, outbound, mode, crawl_timeout, config_path,
        log_level, log_file, log_format):
    """Скачать изображения с сайта URL в каталог DIRECTORY."""
    configure(level=log_level, log_file=log_file, log_format=log_format)

    try:
        settings = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if crawl_timeout is not None:
        settings = settings.model_copy(update={'crawl_timeout': crawl_timeout})

    try:
        params = CrawlParameters(
            seed_url=url,
            output_dir=directory,
            max_depth=depth,
            follow_outbound=outbound,
        )
    except ValidationError as e:
        print_error(f'Неверные параметры обхода: {_describe(e)}')

    completed = start_crawl(params, settings, mode)
    if not completed:
        click.echo('Crawl interrupted: timeout reached, some downloads may be missing', err=True)


if __name__ == "__main__":
    cli()
