"""Unit tests for CMS configuration loading."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from cms_pages._constants import DEFAULT_MANIFEST
from cms_pages.config import CMSConfigError, load_cms_config

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config" / "cms.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dedent(body), encoding="utf-8")
    return path


def test_load_cms_config_applies_values(tmp_path: Path) -> None:
    """Configured values are parsed and relative roots resolved."""
    path = _write_config(
        tmp_path,
        """
        content_roots:
          - ../site
        static_base_urls: https://site.example
        cache_ttl: 60
        remote:
          repo: owner/site
          ref: main
          failure_threshold: 5
          delay: 0
        manifest:
          articles:
            - a.md
            - b.md
        """,
    )

    config = load_cms_config(path)

    assert config.content_roots == [path.parent / "../site"], (
        f"unexpected roots {config.content_roots!r}"
    )
    assert config.static_base_urls == ["https://site.example"]
    assert config.cache_ttl == 60.0
    assert config.remote.repo == "owner/site"
    assert config.remote.ref == "main"
    assert config.remote.failure_threshold == 5
    assert config.remote.delay == 0.0
    assert config.manifest_for("articles") == ["a.md", "b.md"]


def test_load_cms_config_defaults(tmp_path: Path) -> None:
    """An empty file yields the built-in defaults."""
    config = load_cms_config(_write_config(tmp_path, ""))

    assert config.data_dir == "_data"
    assert config.extension == ".md"
    assert config.cache_ttl == 300.0
    assert config.remote.repo is None, "remote resolution is off by default"
    assert config.remote.failure_threshold == 3
    assert config.manifest_for("articles") == list(DEFAULT_MANIFEST["articles"])


def test_load_cms_config_missing_file(tmp_path: Path) -> None:
    """A missing file is reported clearly."""
    with pytest.raises(FileNotFoundError):
        load_cms_config(tmp_path / "absent.yaml")


def test_load_cms_config_rejects_non_mapping(tmp_path: Path) -> None:
    """The top level must be a mapping."""
    with pytest.raises(TypeError):
        load_cms_config(_write_config(tmp_path, "- a\n- b\n"))


@pytest.mark.parametrize(
    "body",
    [
        "cache_ttl: -1\n",
        "cache_ttl: soon\n",
        "remote:\n  repo: not-a-repo\n",
        "remote:\n  failure_threshold: 0\n",
        "remote: owner/site\n",
        "manifest:\n  articles: a.md\n",
        "static_base_urls:\n  nested: true\n",
    ],
)
def test_load_cms_config_rejects_invalid_values(tmp_path: Path, body: str) -> None:
    """Badly shaped values raise CMSConfigError."""
    with pytest.raises(CMSConfigError):
        load_cms_config(_write_config(tmp_path, body))
