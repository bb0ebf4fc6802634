"""
Loading and validation of the LinkScout crawl configuration.
The schema is described and checked with Pydantic.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from link_scout.search import DEFAULT_ENDPOINT, DEFAULT_SEARCH_USER_AGENT
from link_scout.utils import read_url_list, remove_duplicates

__all__ = ["CrawlConfig", "load_config"]


class CrawlConfig(BaseModel):
    """Configuration of one crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seeds: List[str] = Field(default_factory=list, description="Start URLs.")
    input_file: Optional[Path] = Field(None, description="File with one start URL per line.")
    filter_patterns: List[str] = Field(
        default_factory=list,
        description="Substrings (ORed) a URL must contain to have its links followed.",
    )
    concurrency: int = Field(8, ge=1, description="Number of concurrent fetch workers.")
    timeout: float = Field(10.0, gt=0, description="Timeout of a single request (seconds).")
    user_agent: str = Field("LinkScout/0.1", min_length=1, description="User-Agent header.")
    search_site: Optional[str] = Field(None, description="Site to seed from via site-restricted search.")
    search_limit: int = Field(10, ge=1, description="Maximum number of search results.")
    search_endpoint: str = Field(DEFAULT_ENDPOINT, min_length=1, description="Search backend URL.")
    search_user_agent: str = Field(DEFAULT_SEARCH_USER_AGENT, min_length=1)
    output_path: Optional[Path] = Field(None, description="Write discovered URLs here instead of stdout.")
    wget: bool = Field(False, description="Mirror filter-matching URLs with wget.")
    wget_program: str = Field("wget", min_length=1, description="wget executable to run.")
    download_dir: Optional[Path] = Field(None, description="Working directory of the wget runs.")

    @field_validator("seeds", "filter_patterns", mode="after")
    @classmethod
    def _strip_blank(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item.strip()]

    @field_validator("search_site", mode="before")
    @classmethod
    def _blank_site_is_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @model_validator(mode="after")
    def _check_input_file_exists(self) -> CrawlConfig:
        if self.input_file is not None and not self.input_file.expanduser().is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.input_file))
        return self

    def collect_seeds(self) -> List[str]:
        """Inline seeds followed by the seed file entries, without duplicates."""
        urls = list(self.seeds)
        if self.input_file is not None:
            urls.extend(read_url_list(self.input_file))
        return remove_duplicates(urls)

    def with_overrides(self, **overrides: Any) -> CrawlConfig:
        """Copy with the non-None *overrides* applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return CrawlConfig.model_validate(data)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CrawlConfig:
    """
    Read YAML or JSON and return a validated CrawlConfig.
    Without *path*, ``configs/default.yaml`` is used when present, else the defaults.
    A missing explicit file raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlConfig(**data)
