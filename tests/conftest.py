"""Shared pytest configuration for the cms_pages test suite."""

from __future__ import annotations

import typing as typ

import pytest
import structlog

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture(autouse=True)
def _route_structlog_to_stdlib() -> cabc.Iterator[None]:
    """Send structlog events through stdlib logging so stdout stays clean."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
