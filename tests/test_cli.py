"""Tests for the ``cms`` command-line entrypoints."""

from __future__ import annotations

import json
import typing as typ

import pytest

from cms_pages import cli

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def _quiet_logging(mocker: MockerFixture) -> None:
    """Keep CLI calls from reconfiguring the test run's logging."""
    mocker.patch.object(cli, "configure_logging")


@pytest.fixture
def site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a config file pointing at a small local site."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)
    articles = tmp_path / "site" / "_data" / "articles"
    articles.mkdir(parents=True)
    (articles / "2024-07-10-guide.md").write_text(
        "---\ntitle: Guide\norder: 2\n---\nGuide body\n", encoding="utf-8"
    )
    (articles / "2024-07-15-trends.md").write_text(
        "---\ntitle: 趨勢\norder: 1\n---\nTrends body\n", encoding="utf-8"
    )
    (articles / "draft.md").write_text(
        "---\ntitle: Draft\npublished: false\n---\n", encoding="utf-8"
    )
    config = tmp_path / "cms.yaml"
    config.write_text(
        "content_roots:\n  - site\nmanifest:\n  articles: []\n", encoding="utf-8"
    )
    return config


def test_load_prints_published_records(
    site: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``cms load`` prints the ordered, published records as JSON."""
    cli.load("articles", config=site)

    payload = json.loads(capsys.readouterr().out)
    assert [item["title"] for item in payload] == ["趨勢", "Guide"], (
        f"unexpected titles {payload!r}"
    )
    assert "body" not in payload[0], "bodies are omitted unless requested"


def test_list_prints_filenames(
    site: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``cms list`` prints every discovered file, published or not."""
    cli.list_files("articles", config=site)

    lines = capsys.readouterr().out.splitlines()
    assert lines == ["2024-07-10-guide.md", "2024-07-15-trends.md", "draft.md"]


def test_export_writes_file(
    site: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``cms export`` writes JSON with bodies and reports the path."""
    output = tmp_path / "public" / "articles.json"

    cli.export("articles", output=output, config=site)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert [item["slug"] for item in payload] == ["trends", "guide"]
    assert payload[0]["body"] == "Trends body\n"
    assert "(2 records)" in capsys.readouterr().out


def test_missing_config_uses_defaults(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Without a config file the built-in defaults are used."""
    monkeypatch.chdir(tmp_path)

    cli.load("unknown", config=tmp_path / "missing.yaml")

    assert json.loads(capsys.readouterr().out) == []


def test_token_falls_back_to_environment(
    site: Path, monkeypatch: pytest.MonkeyPatch, mocker: MockerFixture
) -> None:
    """``GITHUB_TOKEN`` is used when no token option is given."""
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    from_config = mocker.patch.object(cli.ContentLoader, "from_config")

    cli._build_loader(site, None)

    assert from_config.call_args.kwargs["token"] == "env-token"
