"""Work out which files make up a collection.

The remote directory listing is authoritative when it answers. When it fails
or comes back empty, the site roots on disk are listed, and as a last resort
the static manifest is used. The manifest is hand-maintained and may drift
from the real file set; it only exists so pages keep rendering while the
remote API is unreachable.

Examples
--------
>>> from cms_pages.discovery import FileListDiscovery
>>> discovery = FileListDiscovery(manifest={"articles": ["welcome.md"]})
>>> discovery.list("articles")
['welcome.md']
"""

from __future__ import annotations

import typing as typ

import structlog

from ._constants import DEFAULT_DATA_DIR, DEFAULT_EXTENSION
from .github import GitHubContentsError, GitHubRateLimitError
from .resolver import content_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .github import GitHubContentsClient

log = structlog.get_logger(__name__)


class FileListDiscovery:
    """Produce the ordered filenames belonging to a collection."""

    def __init__(
        self,
        client: GitHubContentsClient | None = None,
        *,
        manifest: cabc.Mapping[str, cabc.Sequence[str]] | None = None,
        roots: cabc.Sequence[Path] = (),
        data_dir: str = DEFAULT_DATA_DIR,
        extension: str = DEFAULT_EXTENSION,
    ) -> None:
        """Configure the listing sources.

        Parameters
        ----------
        client : GitHubContentsClient, optional
            Remote API client; remote listing is skipped when None.
        manifest : Mapping[str, Sequence[str]], optional
            Static filenames per collection used when nothing else answers.
        roots : Sequence[Path], optional
            Local site roots whose ``<data_dir>/<collection>`` directories are
            listed before falling back to the manifest.
        data_dir : str, optional
            Directory segment holding collections. Defaults to ``_data``.
        extension : str, optional
            Only files with this suffix belong to a collection.
        """
        self.client = client
        self.manifest = {key: list(value) for key, value in (manifest or {}).items()}
        self.roots = list(roots)
        self.data_dir = data_dir
        self.extension = extension

    def list(self, collection: str) -> list[str]:
        """Return the filenames for ``collection``; empty when nothing is known."""
        remote = self.list_remote(collection)
        if remote:
            return remote
        local = self.list_local(collection)
        if local:
            log.info("listing_fallback", collection=collection, source="filesystem")
            return local
        fallback = list(self.manifest.get(collection, []))
        log.info(
            "listing_fallback",
            collection=collection,
            source="manifest",
            count=len(fallback),
        )
        return fallback

    def list_remote(self, collection: str) -> list[str]:
        if self.client is None:
            return []
        path = content_path(self.data_dir, collection, "").rstrip("/")
        try:
            listing = self.client.list_directory(path)
        except GitHubRateLimitError:
            log.warning("rate_limited", collection=collection, location=path)
            return []
        except GitHubContentsError as exc:
            log.warning("listing_unavailable", collection=collection, error=str(exc))
            return []
        if listing.partial:
            log.warning(
                "listing_partial",
                collection=collection,
                count=len(listing.entries),
                rate_limited=listing.rate_limited,
            )
        return [
            entry.name
            for entry in listing.entries
            if entry.type == "file" and entry.name.endswith(self.extension)
        ]

    def list_local(self, collection: str) -> list[str]:
        for root in self.roots:
            directory = root / content_path(self.data_dir, collection, "")
            if not directory.is_dir():
                continue
            try:
                names = sorted(
                    path.name
                    for path in directory.iterdir()
                    if path.is_file() and path.name.endswith(self.extension)
                )
            except OSError as exc:
                log.debug(
                    "listing_unavailable", location=str(directory), error=str(exc)
                )
                continue
            if names:
                return names
        return []


__all__ = ["FileListDiscovery"]
