#!/usr/bin/env python3
"""
Command line entry point of LinkScout.

Commands:
  crawl     Crawl from seed URLs and print/save every discovered URL
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config file (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only if omitted)
  --log-format FORMAT Logging format string

crawl options:
  --url, -u URL            Start URL (repeatable)
  --input-file, -i PATH    File with one start URL per line
  --filter-pattern, -f S   Follow links of URLs containing S (repeatable, ORed)
  --search-site SITE       Add site-restricted search results as seeds
  --search-limit N         Maximum number of search results (default 10)
  --output-path, -o PATH   Write URLs to PATH instead of stdout
  --concurrency N          Number of concurrent workers
  --timeout SEC            Per-request timeout
  --crawl-timeout SEC      Stop the whole crawl after SEC seconds
  --json                   Emit JSON lines (url, expanded, error)
  --wget                   Download filter-matching URLs with wget -r
  --download-dir PATH      Working directory of the wget downloads

Also:
  --version, -v       Show the LinkScout version

Example:
  link_scout crawl -u https://docs.example.com/ -f docs.example.com -o urls.txt
"""
import asyncio
import sys
from contextlib import AsyncExitStack, aclosing
from pathlib import Path

import click

from link_scout import __version__
from link_scout.config import load_config
from link_scout.crawler import UrlFilter
from link_scout.download import Downloader
from link_scout.logger import DEFAULT_FORMAT, init_logging
from link_scout.report import ResultWriter
from link_scout.scanner import start_scan

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


async def _consume(cfg, writer: ResultWriter) -> None:
    async with AsyncExitStack() as stack:
        downloader = None
        if cfg.wget:
            downloader = await stack.enter_async_context(
                Downloader(
                    UrlFilter.from_patterns(cfg.filter_patterns),
                    program=cfg.wget_program,
                    timeout=cfg.timeout,
                    user_agent=cfg.user_agent,
                    directory=cfg.download_dir,
                )
            )
        results = await stack.enter_async_context(aclosing(start_scan(cfg)))
        async for result in results:
            writer.write(result)
            if downloader is not None:
                downloader.submit(result.url)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stderr only if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """LinkScout command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'urls', multiple=True, help='Start URL (repeatable).')
@click.option(
    '--input-file', '-i', 'input_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='File with one start URL per line'
)
@click.option(
    '--filter-pattern', '-f', 'filter_patterns',
    multiple=True,
    help='Follow links only of URLs containing this substring (repeatable, ORed)'
)
@click.option('--search-site', 'search_site', default=None, help='Site to seed from via search')
@click.option('--search-limit', 'search_limit', type=click.IntRange(min=1), default=None,
              help='Maximum number of search results  [default: 10]')
@click.option(
    '--output-path', '-o', 'output_path',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Write discovered URLs to this file'
)
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Concurrent workers')
@click.option('--timeout', type=float, default=None, help='Per-request timeout (seconds)')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Timeout of the whole crawl (seconds)'
)
@click.option('--json', 'as_json', is_flag=True, help='Emit JSON lines instead of bare URLs')
@click.option('--wget', is_flag=True, help='Mirror every URL matching the filter with wget -r')
@click.option(
    '--download-dir', 'download_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory the wget downloads are written to'
)
@click.pass_context
def crawl(ctx, urls, input_file, filter_patterns, search_site, search_limit,
          output_path, concurrency, timeout, crawl_timeout, as_json, wget, download_dir):
    """Crawl and print every discovered URL."""
    try:
        cfg = ctx.obj['config'].with_overrides(
            seeds=list(urls) or None,
            input_file=input_file,
            filter_patterns=list(filter_patterns) or None,
            search_site=search_site,
            search_limit=search_limit,
            output_path=output_path,
            concurrency=concurrency,
            timeout=timeout,
            wget=wget or None,
            download_dir=download_dir,
        )
    except Exception as e:
        print_error(f'Invalid options: {e}')

    if not cfg.seeds and cfg.input_file is None and not cfg.search_site:
        print_error('No start URLs given. Use --url, --input-file or --search-site.')

    with ResultWriter(cfg.output_path, as_json=as_json) as writer:
        try:
            if crawl_timeout:
                asyncio.run(asyncio.wait_for(_consume(cfg, writer), timeout=crawl_timeout))
            else:
                asyncio.run(_consume(cfg, writer))
        except asyncio.TimeoutError:
            print_error(f'Crawl stopped after {crawl_timeout} seconds ({writer.count} URLs written)')
        except Exception as e:
            print_error(f'Crawl failed: {e}')

    if cfg.output_path is not None:
        click.echo(f'{writer.count} URLs written to {cfg.output_path}', err=True)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
