"""Typed dataclasses describing CMS content configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from .._constants import (
    DEFAULT_API_BASE,
    DEFAULT_CACHE_TTL,
    DEFAULT_DATA_DIR,
    DEFAULT_EXTENSION,
    DEFAULT_FAILURE_DELAY,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_MANIFEST,
    DEFAULT_REMOTE_DELAY,
    DEFAULT_TIMEOUT,
)


class CMSConfigError(ValueError):
    """Raised when the CMS configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class RemoteConfig:
    """Where and how to reach the remote contents API.

    Attributes
    ----------
    repo : str | None
        ``owner/name`` of the repository holding the content; remote
        resolution is disabled when None.
    api_base : str
        GitHub API base URL.
    ref : str | None
        Branch or tag to read; the repository default when None.
    timeout : float
        Per-request timeout in seconds.
    delay : float
        Pause before a remote attempt that follows a successful one.
    failure_delay : float
        Pause before a remote attempt that follows a failed one.
    failure_threshold : int
        Failed attempts, with no success yet, after which a load stops using
        the remote API.
    """

    repo: str | None = None
    api_base: str = DEFAULT_API_BASE
    ref: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    delay: float = DEFAULT_REMOTE_DELAY
    failure_delay: float = DEFAULT_FAILURE_DELAY
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD


def _default_manifest() -> dict[str, list[str]]:
    return {key: list(names) for key, names in DEFAULT_MANIFEST.items()}


@dc.dataclass(slots=True)
class CMSConfig:
    """Complete description of the content sources for one site."""

    content_roots: list[Path] = dc.field(default_factory=lambda: [Path()])
    data_dir: str = DEFAULT_DATA_DIR
    static_base_urls: list[str] = dc.field(default_factory=list)
    extension: str = DEFAULT_EXTENSION
    cache_ttl: float = DEFAULT_CACHE_TTL
    remote: RemoteConfig = dc.field(default_factory=RemoteConfig)
    manifest: dict[str, list[str]] = dc.field(default_factory=_default_manifest)

    def manifest_for(self, collection: str) -> list[str]:
        """Return the static filenames recorded for ``collection``."""
        return list(self.manifest.get(collection, []))
