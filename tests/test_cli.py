# File: tests/test_cli.py
"""Tests for the CLI (`link_scout.cli`) using click.testing.CliRunner.
They cover `crawl`, `config`, `--version` and error handling.
"""
import asyncio
import importlib
import json

import pytest
from click.testing import CliRunner

from link_scout.cli import cli
from link_scout.crawler.models import CrawlResult
from link_scout.download import Downloader
from link_scout.errors import FetchError, FetchErrorKind

# the package attribute link_scout.cli is the click group, not this module
cli_module = importlib.import_module("link_scout.cli")

QUIET = ["--log-level", "CRITICAL"]


@pytest.fixture(autouse=True)
def patch_start_scan(monkeypatch, tmp_path):
    """Replace start_scan with a fake stream; the received configs are recorded."""
    monkeypatch.chdir(tmp_path)
    seen_configs = []

    async def fake_scan(cfg):
        seen_configs.append(cfg)
        for seed in cfg.collect_seeds():
            yield CrawlResult(seed, expanded=True, links_found=1)
        error = FetchError("https://example.com/gone", FetchErrorKind.HTTP_STATUS, status=404)
        yield CrawlResult("https://example.com/gone", error=error)

    monkeypatch.setattr(cli_module, "start_scan", fake_scan)
    return seen_configs


def output_lines(result):
    return [line for line in result.output.splitlines() if line.strip()]


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "LinkScout" in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "default.json"
    cfg_file.write_text(json.dumps({"seeds": ["https://example.com"], "concurrency": 4}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["seeds"] == ["https://example.com"]
    assert data["concurrency"] == 4


def test_crawl_prints_urls(patch_start_scan):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        QUIET + ["crawl", "-u", "https://example.com/", "-u", "https://example.org/", "-f", "example", "--concurrency", "2"],
    )
    assert result.exit_code == 0, result.output
    assert output_lines(result) == [
        "https://example.com/",
        "https://example.org/",
        "https://example.com/gone",
    ]
    cfg = patch_start_scan[0]
    assert cfg.filter_patterns == ["example"]
    assert cfg.concurrency == 2


def test_crawl_json_lines(patch_start_scan):
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl", "-u", "https://example.com/", "--json"])
    assert result.exit_code == 0, result.output
    records = [json.loads(line) for line in output_lines(result)]
    assert records[0] == {"url": "https://example.com/", "expanded": True, "error": None}
    assert records[1]["expanded"] is False
    assert "404" in records[1]["error"]


def test_crawl_writes_output_file(tmp_path, seed_file):
    out = tmp_path / "out" / "urls.txt"
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl", "-i", str(seed_file), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").splitlines() == [
        "https://example.com/",
        "https://example.org/docs",
        "https://example.com/gone",
    ]


def test_crawl_options_override_config_file(tmp_path, patch_start_scan):
    cfg_file = tmp_path / "crawl.yaml"
    cfg_file.write_text(
        "seeds: ['https://from-config.test/']\nsearch_limit: 3\nconcurrency: 5\n", encoding="utf-8"
    )
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["--config", str(cfg_file), "crawl", "--search-limit", "7"])
    assert result.exit_code == 0, result.output
    cfg = patch_start_scan[0]
    assert cfg.seeds == ["https://from-config.test/"]
    assert cfg.search_limit == 7
    assert cfg.concurrency == 5


def test_crawl_without_seeds_fails():
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl"])
    assert result.exit_code == 1
    assert "No start URLs" in result.output


def test_crawl_with_only_search_site_is_accepted(patch_start_scan):
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl", "--search-site", "example.com"])
    assert result.exit_code == 0, result.output
    assert patch_start_scan[0].search_site == "example.com"


def test_invalid_config_file_fails(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("concurrency: 0\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Failed to load configuration" in result.output


def test_crawl_timeout(monkeypatch, tmp_path):
    async def endless(cfg):
        n = 0
        while True:
            yield CrawlResult(f"https://example.com/{n}")
            n += 1
            await asyncio.sleep(0.05)

    monkeypatch.setattr(cli_module, "start_scan", endless)
    out = tmp_path / "partial.txt"

    runner = CliRunner()
    result = runner.invoke(
        cli, QUIET + ["crawl", "-u", "https://example.com/0", "-o", str(out), "--crawl-timeout", "0.3"]
    )
    assert result.exit_code != 0
    assert "Crawl stopped after" in result.output
    written = out.read_text(encoding="utf-8").splitlines()
    assert 1 <= len(written) < 20
    assert written[0] == "https://example.com/0"


@pytest.fixture()
def reachable_except_gone(monkeypatch):
    async def is_reachable(self, url):
        return url != "https://example.com/gone"

    monkeypatch.setattr(Downloader, "_is_reachable", is_reachable)


def test_crawl_wget_downloads_matching_urls(fake_wget, reachable_except_gone, tmp_path):
    mirror = tmp_path / "mirror"
    runner = CliRunner()
    result = runner.invoke(
        cli,
        QUIET + [
            "crawl", "-u", "https://example.com/", "-u", "https://other.org/",
            "-f", "example.com", "--wget", "--download-dir", str(mirror),
        ],
    )
    assert result.exit_code == 0, result.output
    assert len(output_lines(result)) == 3
    assert [(argv, cwd) for argv, cwd, _ in fake_wget] == [
        (("wget", "--no-check-certificate", "-erobots=off", "-r", "https://example.com/"), str(mirror)),
    ]
    assert mirror.is_dir()


def test_crawl_without_wget_downloads_nothing(fake_wget, reachable_except_gone):
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl", "-u", "https://example.com/", "-f", "example.com"])
    assert result.exit_code == 0, result.output
    assert fake_wget == []


def test_failed_wget_does_not_fail_the_crawl(fake_wget, reachable_except_gone):
    runner = CliRunner()
    result = runner.invoke(cli, QUIET + ["crawl", "-u", "https://example.com/broken", "-f", "example.com", "--wget"])
    assert result.exit_code == 0, result.output
    assert [argv[-1] for argv, _, _ in fake_wget] == ["https://example.com/broken"]
    assert fake_wget[0][2].returncode == 4
