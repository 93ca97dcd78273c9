"""Write resolved collections to JSON for static builds.

Static pages that cannot run the loader at request time read a pre-built JSON
file instead (``articles.json`` and friends). This module serialises a
collection in the same order the loader returns it, keeping non-ASCII text
readable in the output.

Example
-------
>>> from pathlib import Path
>>> from cms_pages.export import export_collection
>>> export_collection(records, Path("public/articles.json"))  # doctest: +SKIP
PosixPath('public/articles.json')
"""

from __future__ import annotations

import json
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .records import Record


def serialise_collection(
    records: cabc.Iterable[Record], *, include_body: bool = False
) -> str:
    """Return the JSON document for ``records`` as text."""
    payload = [record.to_dict(include_body=include_body) for record in records]
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def export_collection(
    records: cabc.Iterable[Record], path: Path, *, include_body: bool = False
) -> Path:
    """Write ``records`` to ``path`` as UTF-8 JSON and return the path.

    Parent directories are created as needed; an existing file is replaced.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        serialise_collection(records, include_body=include_body), encoding="utf-8"
    )
    return path


__all__ = ["export_collection", "serialise_collection"]
