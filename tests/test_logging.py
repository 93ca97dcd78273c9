"""Tests for structlog output configuration."""

from __future__ import annotations

import json
import logging
import typing as typ

import pytest
import structlog

from cms_pages.config import configure_logging

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def restore_root_logger() -> cabc.Iterator[None]:
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("cms_pages").setLevel(logging.NOTSET)


@pytest.mark.usefixtures("restore_root_logger")
def test_json_logging_goes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """JSON mode writes one object per event to stderr, keeping stdout clean."""
    configure_logging(verbose=True, log_json=True)

    structlog.get_logger("cms_pages.loader").info(
        "collection_loaded", collection="文章", count=2
    )

    captured = capsys.readouterr()
    assert captured.out == "", "diagnostics must not reach stdout"
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "collection_loaded"
    assert event["collection"] == "文章", "non-ASCII values should stay readable"
    assert event["level"] == "info"


@pytest.mark.usefixtures("restore_root_logger")
def test_quiet_logging_hides_debug(capsys: pytest.CaptureFixture[str]) -> None:
    """Without ``verbose`` only warnings and above are emitted."""
    configure_logging()

    structlog.get_logger("cms_pages.cache").debug("cache_hit", collection="a")

    assert "cache_hit" not in capsys.readouterr().err
