"""Value coercion helpers shared by the CMS configuration loader."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

from .models import CMSConfigError

_REPO_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: object | None, *, field: str) -> list[str]:
    """Accept a single string or a list of strings; reject anything else."""
    match value:
        case None:
            return []
        case str() as text:
            return [text] if text.strip() else []
        case list() as items:
            return [str(item).strip() for item in items if str(item).strip()]
        case _:
            msg = f"'{field}' must be a string or a list of strings."
            raise CMSConfigError(msg)


def _path_list(value: object | None, *, base: Path) -> list[Path]:
    """Resolve configured roots relative to the config file's directory."""
    paths: list[Path] = []
    for entry in _string_list(value, field="content_roots"):
        path = Path(entry).expanduser()
        paths.append(path if path.is_absolute() else base / path)
    return paths


def _non_negative(value: object, *, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"'{field}' must be a number."
        raise CMSConfigError(msg)
    if value < 0:
        msg = f"'{field}' cannot be negative."
        raise CMSConfigError(msg)
    return float(value)


def _positive_int(value: object, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"'{field}' must be a positive integer."
        raise CMSConfigError(msg)
    return value


def _validate_repo(value: object | None) -> str | None:
    repo = _optional_str(value)
    if repo is None:
        return None
    if not _REPO_PATTERN.match(repo):
        msg = f"'remote.repo' must look like 'owner/name', got {repo!r}."
        raise CMSConfigError(msg)
    return repo


def _build_manifest(value: object | None) -> dict[str, list[str]] | None:
    """Return the configured manifest, or None to keep the built-in one."""
    if value is None:
        return None
    if not isinstance(value, dict):
        msg = "'manifest' must map collection names to filename lists."
        raise CMSConfigError(msg)
    manifest: dict[str, list[str]] = {}
    for key, names in typ.cast("dict[object, object]", value).items():
        if not isinstance(names, list):
            msg = f"'manifest.{key}' must be a list of filenames."
            raise CMSConfigError(msg)
        manifest[str(key)] = [str(name).strip() for name in names if str(name).strip()]
    return manifest


__all__ = [
    "_build_manifest",
    "_non_negative",
    "_optional_str",
    "_path_list",
    "_positive_int",
    "_string_list",
    "_validate_repo",
]
