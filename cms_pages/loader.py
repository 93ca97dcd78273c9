"""Load CMS collections for page rendering.

:class:`ContentLoader` is the single entry point page code uses. For a
collection name it consults the cache, discovers the collection's files,
resolves and parses each one in list order, drops unpublished records, sorts
the rest by ``order``, caches the outcome, and returns it.

Loading never raises for missing, throttled, or malformed content. The worst
outcome is an empty collection, which callers should read as "content is
unavailable right now" and answer with whatever fallback they display.

Example
-------
>>> from pathlib import Path
>>> from cms_pages.config import load_cms_config
>>> from cms_pages.loader import ContentLoader
>>> config = load_cms_config(Path("config/cms.yaml"))  # doctest: +SKIP
>>> loader = ContentLoader.from_config(config)  # doctest: +SKIP
>>> [record["title"] for record in loader.load_articles()]  # doctest: +SKIP
['2024 Chiang Mai real estate trends', ...]
"""

from __future__ import annotations

import time
import typing as typ

import structlog

from .cache import CollectionCache
from .discovery import FileListDiscovery
from .frontmatter import FrontmatterParser
from .github import GitHubContentsClient
from .records import Record, sort_records
from .resolver import (
    FilesystemSource,
    LocalSource,
    RateLimited,
    RemoteCircuit,
    RemoteSource,
    Resolved,
    SourceResolver,
    StaticSiteSource,
    Unavailable,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import requests

    from .config import CMSConfig
    from .records import Collection

log = structlog.get_logger(__name__)


class ContentLoader:
    """Resolve, filter, order, and cache collections of CMS records."""

    def __init__(
        self,
        discovery: FileListDiscovery,
        resolver: SourceResolver,
        *,
        parser: FrontmatterParser | None = None,
        cache: CollectionCache | None = None,
        circuit_factory: cabc.Callable[[], RemoteCircuit] = RemoteCircuit,
    ) -> None:
        """Wire the loader to its collaborators.

        Parameters
        ----------
        discovery : FileListDiscovery
            Supplies the filenames of a collection.
        resolver : SourceResolver
            Retrieves the raw text of each file.
        parser : FrontmatterParser, optional
            Splits documents into header and body; a new parser by default.
        cache : CollectionCache, optional
            Shared cache of resolved collections; a five-minute cache by
            default.
        circuit_factory : Callable[[], RemoteCircuit], optional
            Builds the remote pacing/cut-off state for each load call.
        """
        self.discovery = discovery
        self.resolver = resolver
        self.parser = parser if parser is not None else FrontmatterParser()
        self.cache = cache if cache is not None else CollectionCache()
        self.circuit_factory = circuit_factory

    @classmethod
    def from_config(
        cls,
        config: CMSConfig,
        *,
        token: str | None = None,
        session: requests.Session | None = None,
        sleep: cabc.Callable[[float], None] = time.sleep,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> ContentLoader:
        """Build a loader with every source described by ``config``.

        Parameters
        ----------
        config : CMSConfig
            Parsed configuration (see :func:`cms_pages.config.load_cms_config`).
        token : str | None, optional
            GitHub token for the remote API.
        session : requests.Session, optional
            Session shared by the static-site source and the GitHub client.
        sleep, clock : callables, optional
            Time primitives, replaceable in tests.
        """
        remote_config = config.remote
        client: GitHubContentsClient | None = None
        if remote_config.repo:
            client = GitHubContentsClient(
                remote_config.repo,
                token=token,
                api_base=remote_config.api_base,
                ref=remote_config.ref,
                session=session,
                timeout=remote_config.timeout,
            )

        local_sources: list[LocalSource] = []
        if config.content_roots:
            local_sources.append(
                FilesystemSource(config.content_roots, data_dir=config.data_dir)
            )
        if config.static_base_urls:
            local_sources.append(
                StaticSiteSource(
                    config.static_base_urls,
                    data_dir=config.data_dir,
                    session=session,
                    timeout=remote_config.timeout,
                )
            )
        resolver = SourceResolver(
            local_sources,
            RemoteSource(client, data_dir=config.data_dir) if client else None,
        )
        discovery = FileListDiscovery(
            client,
            manifest=config.manifest,
            roots=config.content_roots,
            data_dir=config.data_dir,
            extension=config.extension,
        )

        def circuit_factory() -> RemoteCircuit:
            return RemoteCircuit(
                failure_threshold=remote_config.failure_threshold,
                delay=remote_config.delay,
                failure_delay=remote_config.failure_delay,
                sleep=sleep,
            )

        return cls(
            discovery,
            resolver,
            cache=CollectionCache(ttl=config.cache_ttl, clock=clock),
            circuit_factory=circuit_factory,
        )

    def load_collection(self, name: str) -> Collection:
        """Return the visible records of collection ``name``.

        Parameters
        ----------
        name : str
            Collection name such as ``"properties"`` or ``"articles"``.

        Returns
        -------
        Collection
            Published records sorted ascending by ``order``, records without
            one last in file-list order. Empty when nothing could be resolved.

        Raises
        ------
        ValueError
            If ``name`` is empty.
        """
        normalized = name.strip()
        if not normalized:
            msg = "Collection name cannot be empty"
            raise ValueError(msg)

        cached = self.cache.get(normalized)
        if cached is not None:
            log.debug("cache_hit", collection=normalized, count=len(cached))
            return cached

        try:
            filenames = self.discovery.list(normalized)
        except Exception:
            log.exception("listing_failed", collection=normalized)
            filenames = []
        if not filenames:
            log.warning(
                "collection_empty", collection=normalized, reason="no files listed"
            )
            return ()

        circuit = self.circuit_factory()
        records: list[Record] = []
        for filename in filenames:
            record = self._load_record(normalized, filename, circuit)
            if record is None:
                continue
            if not record.published:
                log.debug(
                    "record_unpublished", collection=normalized, filename=filename
                )
                continue
            records.append(record)

        collection = sort_records(records)
        if not collection:
            log.warning(
                "collection_empty",
                collection=normalized,
                reason="no records resolved",
            )
        self.cache.put(normalized, collection)
        log.info(
            "collection_loaded",
            collection=normalized,
            count=len(collection),
            listed=len(filenames),
            remote_attempts=circuit.attempts,
            remote_disabled=circuit.open_reason,
        )
        return collection

    def _load_record(
        self, collection: str, filename: str, circuit: RemoteCircuit
    ) -> Record | None:
        """Resolve and parse one file; None when it cannot be used."""
        try:
            resolution = self.resolver.resolve(collection, filename, circuit=circuit)
            match resolution:
                case Resolved(text=text):
                    parsed = self.parser.parse(text)
                    return Record.from_header(filename, parsed.header, parsed.body)
                case RateLimited(location=location):
                    log.warning(
                        "file_unresolved",
                        collection=collection,
                        filename=filename,
                        reason="rate_limited",
                        location=location,
                    )
                case Unavailable(reason=reason):
                    log.warning(
                        "file_unresolved",
                        collection=collection,
                        filename=filename,
                        reason=reason,
                    )
        except Exception:
            log.exception("file_unresolved", collection=collection, filename=filename)
        return None

    def invalidate(self, name: str) -> None:
        """Forget the cached records of ``name`` so the next load resolves again."""
        self.cache.invalidate(name.strip())

    def load_properties(self) -> Collection:
        return self.load_collection("properties")

    def load_youtube_videos(self) -> Collection:
        return self.load_collection("youtube")

    def load_youtube_shorts(self) -> Collection:
        return self.load_collection("shorts")

    def load_articles(self) -> Collection:
        return self.load_collection("articles")


__all__ = ["ContentLoader"]
