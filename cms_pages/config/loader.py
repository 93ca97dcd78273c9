"""Load CMS content configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ

from ruamel.yaml import YAML

from .helpers import (
    _build_manifest,
    _non_negative,
    _optional_str,
    _path_list,
    _positive_int,
    _string_list,
    _validate_repo,
)
from .models import CMSConfig, CMSConfigError, RemoteConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


def load_cms_config(path: Path) -> CMSConfig:
    """Load the YAML file describing where a site's collections live.

    Parameters
    ----------
    path : Path
        Filesystem path to the configuration file (for example,
        ``config/cms.yaml``). Relative ``content_roots`` are resolved against
        the file's directory.

    Returns
    -------
    CMSConfig
        Parsed configuration with defaults applied for omitted keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    CMSConfigError
        If a value has the wrong shape (for example a negative TTL or a
        ``remote.repo`` not in ``owner/name`` form).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from cms_pages.config import load_cms_config
    >>> config = load_cms_config(Path("config/cms.yaml"))  # doctest: +SKIP
    >>> config.remote.repo  # doctest: +SKIP
    'lovemage/marco-academic'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return build_cms_config(loaded, base_dir=path.parent)


def build_cms_config(
    raw: typ.Mapping[str, typ.Any], *, base_dir: Path
) -> CMSConfig:
    """Build a :class:`CMSConfig` from an already-parsed mapping."""
    defaults = CMSConfig()
    remote = _build_remote_config(raw.get("remote"))

    roots_raw = raw.get("content_roots")
    content_roots = (
        _path_list(roots_raw, base=base_dir)
        if roots_raw is not None
        else [base_dir / root for root in defaults.content_roots]
    )
    manifest = _build_manifest(raw.get("manifest"))

    return CMSConfig(
        content_roots=content_roots,
        data_dir=_optional_str(raw.get("data_dir")) or defaults.data_dir,
        static_base_urls=_string_list(
            raw.get("static_base_urls"), field="static_base_urls"
        ),
        extension=_optional_str(raw.get("extension")) or defaults.extension,
        cache_ttl=_non_negative(
            raw.get("cache_ttl", defaults.cache_ttl), field="cache_ttl"
        ),
        remote=remote,
        manifest=manifest if manifest is not None else defaults.manifest,
    )


def _build_remote_config(payload: object | None) -> RemoteConfig:
    """Build the remote section, applying defaults for missing keys."""
    base = RemoteConfig()
    if payload is None:
        return base
    if not isinstance(payload, dict):
        msg = "'remote' must be a mapping."
        raise CMSConfigError(msg)
    return RemoteConfig(
        repo=_validate_repo(payload.get("repo")),
        api_base=_optional_str(payload.get("api_base")) or base.api_base,
        ref=_optional_str(payload.get("ref")),
        timeout=_non_negative(
            payload.get("timeout", base.timeout), field="remote.timeout"
        ),
        delay=_non_negative(payload.get("delay", base.delay), field="remote.delay"),
        failure_delay=_non_negative(
            payload.get("failure_delay", base.failure_delay),
            field="remote.failure_delay",
        ),
        failure_threshold=_positive_int(
            payload.get("failure_threshold", base.failure_threshold),
            field="remote.failure_threshold",
        ),
    )


__all__ = ["build_cms_config", "load_cms_config"]
