"""Resolve the raw text of one collection file from an ordered list of sources.

Local sources (the site's files on disk, then the deployed static site) are
tried first, in order, and the first one that yields text wins. Only when all
of them come up empty is the remote contents API asked. Outcomes are plain
values rather than exceptions: :class:`Resolved`, :class:`Unavailable`, or
:class:`RateLimited`, so the loader can ``match`` on them.

Remote attempts within one collection load share a :class:`RemoteCircuit`
that paces requests and, once the API throttles the caller or keeps failing
without a single success, disables remote resolution for the rest of that
load.

Examples
--------
>>> from pathlib import Path
>>> from cms_pages.resolver import FilesystemSource, SourceResolver
>>> resolver = SourceResolver([FilesystemSource([Path("site")])])
>>> resolver.resolve("articles", "missing.md")  # doctest: +SKIP
Unavailable(reason='no source had the file', remote_attempted=False)
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import time
import typing as typ
from pathlib import Path

import requests
import structlog

from ._constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_FAILURE_DELAY,
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_REMOTE_DELAY,
    DEFAULT_TIMEOUT,
)
from .github import GitHubContentsError, GitHubRateLimitError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .github import GitHubContentsClient

log = structlog.get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class Resolved:
    """Text found for a file, and where it came from."""

    text: str
    location: str
    remote: bool = False


@dc.dataclass(frozen=True, slots=True)
class Unavailable:
    """Every source that was tried failed for this file."""

    reason: str
    remote_attempted: bool = False


@dc.dataclass(frozen=True, slots=True)
class RateLimited:
    """The remote API refused the request because of throttling."""

    location: str


Resolution: typ.TypeAlias = Resolved | Unavailable | RateLimited


class LocalSource(typ.Protocol):
    """A source that can be consulted for every file without spending quota."""

    name: str

    def read(self, collection: str, filename: str) -> Resolved | None:
        """Return the file's text, or None when this source lacks it."""
        ...


def content_path(data_dir: str, collection: str, filename: str) -> str:
    """Join the logical ``<data_dir>/<collection>/<filename>`` path."""
    return posixpath.join(data_dir.strip("/"), collection, filename)


def _is_safe_name(value: str) -> bool:
    if not value or value in {".", ".."}:
        return False
    return "/" not in value and "\\" not in value


class FilesystemSource:
    """Read files from one or more site roots on disk."""

    name = "filesystem"

    def __init__(
        self, roots: cabc.Sequence[Path], *, data_dir: str = DEFAULT_DATA_DIR
    ) -> None:
        self.roots = list(roots)
        self.data_dir = data_dir

    def candidates(self, collection: str, filename: str) -> list[Path]:
        """Return the paths tried for a file, in order."""
        relative = content_path(self.data_dir, collection, filename)
        return [root / relative for root in self.roots]

    def read(self, collection: str, filename: str) -> Resolved | None:
        if not (_is_safe_name(collection) and _is_safe_name(filename)):
            log.warning("unsafe_filename", collection=collection, filename=filename)
            return None
        for path in self.candidates(collection, filename):
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                log.debug(
                    "source_unavailable",
                    source=self.name,
                    location=str(path),
                    error=str(exc),
                )
                continue
            return Resolved(text=text, location=str(path))
        return None


class StaticSiteSource:
    """Fetch files from the deployed static site over plain HTTP."""

    name = "static_site"

    def __init__(
        self,
        base_urls: cabc.Sequence[str],
        *,
        data_dir: str = DEFAULT_DATA_DIR,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_urls = [url.rstrip("/") for url in base_urls]
        self.data_dir = data_dir
        self._session = session or requests.Session()
        self.timeout = timeout

    def candidates(self, collection: str, filename: str) -> list[str]:
        relative = content_path(self.data_dir, collection, filename)
        return [f"{base}/{relative}" for base in self.base_urls]

    def read(self, collection: str, filename: str) -> Resolved | None:
        if not (_is_safe_name(collection) and _is_safe_name(filename)):
            return None
        for url in self.candidates(collection, filename):
            try:
                response = self._session.get(url, timeout=self.timeout)
            except requests.RequestException as exc:
                log.debug(
                    "source_unavailable", source=self.name, location=url, error=str(exc)
                )
                continue
            if not response.ok:
                log.debug(
                    "source_unavailable",
                    source=self.name,
                    location=url,
                    status=response.status_code,
                )
                continue
            try:
                text = response.content.decode("utf-8")
            except UnicodeDecodeError:
                log.debug(
                    "source_unavailable",
                    source=self.name,
                    location=url,
                    error="not utf-8",
                )
                continue
            return Resolved(text=text, location=url)
        return None


class RemoteSource:
    """Fetch files through the GitHub contents API."""

    name = "github"

    def __init__(
        self, client: GitHubContentsClient, *, data_dir: str = DEFAULT_DATA_DIR
    ) -> None:
        self.client = client
        self.data_dir = data_dir

    def fetch(self, collection: str, filename: str) -> Resolution:
        path = content_path(self.data_dir, collection, filename)
        try:
            text = self.client.fetch_text(path)
        except GitHubRateLimitError:
            log.warning("rate_limited", source=self.name, location=path)
            return RateLimited(location=path)
        except GitHubContentsError as exc:
            log.debug(
                "source_unavailable", source=self.name, location=path, error=str(exc)
            )
            return Unavailable(reason=str(exc), remote_attempted=True)
        if text is None:
            log.debug("source_unavailable", source=self.name, location=path, status=404)
            return Unavailable(reason=f"'{path}' not found", remote_attempted=True)
        return Resolved(text=text, location=path, remote=True)


class RemoteCircuit:
    """Per-load pacing and cut-off for remote attempts.

    The circuit opens, and stays open for the rest of the load, as soon as the
    remote API reports throttling, or once ``failure_threshold`` remote
    attempts have failed while none has succeeded. Between consecutive remote
    attempts it sleeps ``delay`` seconds after a success and
    ``failure_delay`` seconds after a failure.
    """

    def __init__(
        self,
        *,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        delay: float = DEFAULT_REMOTE_DELAY,
        failure_delay: float = DEFAULT_FAILURE_DELAY,
        sleep: cabc.Callable[[float], None] = time.sleep,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.delay = delay
        self.failure_delay = failure_delay
        self._sleep = sleep
        self.attempts = 0
        self.successes = 0
        self.failures = 0
        self.open_reason: str | None = None
        self._last_succeeded: bool | None = None

    @property
    def is_open(self) -> bool:
        return self.open_reason is not None

    def before_attempt(self) -> None:
        """Wait before a remote attempt if another one preceded it."""
        if self._last_succeeded is None:
            return
        pause = self.delay if self._last_succeeded else self.failure_delay
        if pause > 0:
            self._sleep(pause)

    def record(self, resolution: Resolution) -> None:
        """Account for the outcome of one remote attempt."""
        self.attempts += 1
        match resolution:
            case Resolved():
                self.successes += 1
                self._last_succeeded = True
            case RateLimited():
                self.failures += 1
                self._last_succeeded = False
                self._trip("rate_limited")
            case Unavailable():
                self.failures += 1
                self._last_succeeded = False
                if self.successes == 0 and self.failures >= self.failure_threshold:
                    self._trip("consecutive_failures")

    def _trip(self, reason: str) -> None:
        if self.open_reason is None:
            self.open_reason = reason
            log.warning(
                "remote_circuit_open",
                reason=reason,
                attempts=self.attempts,
                successes=self.successes,
            )


class SourceResolver:
    """Try local sources in order, then the remote API, for one file."""

    def __init__(
        self,
        local_sources: cabc.Sequence[LocalSource] = (),
        remote: RemoteSource | None = None,
    ) -> None:
        self.local_sources = list(local_sources)
        self.remote = remote

    def resolve(
        self,
        collection: str,
        filename: str,
        *,
        circuit: RemoteCircuit | None = None,
    ) -> Resolution:
        """Return the text of ``filename`` in ``collection`` or why it failed.

        Parameters
        ----------
        collection : str
            Logical collection name, e.g. ``"articles"``.
        filename : str
            File within the collection.
        circuit : RemoteCircuit, optional
            Shared state of the current load. When it is open the remote step
            is skipped; otherwise the attempt is paced and recorded on it.

        Returns
        -------
        Resolution
            ``Resolved`` from the first source that had the file,
            ``RateLimited`` when the remote API throttled the request, or
            ``Unavailable`` otherwise.
        """
        for source in self.local_sources:
            resolved = source.read(collection, filename)
            if resolved is not None:
                return resolved

        if self.remote is None:
            return Unavailable(reason="no source had the file")
        if circuit is not None and circuit.is_open:
            return Unavailable(reason=f"remote disabled ({circuit.open_reason})")

        if circuit is not None:
            circuit.before_attempt()
        result = self.remote.fetch(collection, filename)
        if circuit is not None:
            circuit.record(result)
        return result


__all__ = [
    "FilesystemSource",
    "LocalSource",
    "RateLimited",
    "RemoteCircuit",
    "RemoteSource",
    "Resolution",
    "Resolved",
    "SourceResolver",
    "StaticSiteSource",
    "Unavailable",
    "content_path",
]
