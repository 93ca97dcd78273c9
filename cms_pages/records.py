"""Immutable records resolved from CMS collections.

A :class:`Record` is the parsed header of one markdown document together with
its body and the filename it came from. Records read like read-only mappings
of header fields so page renderers can use ``record["title"]`` or
``record.get("image")`` directly.

Examples
--------
>>> from cms_pages.records import Record, sort_records
>>> first = Record.from_header("b.md", {"title": "B", "order": 2})
>>> second = Record.from_header("a.md", {"title": "A"})
>>> [record.filename for record in sort_records([second, first])]
['b.md', 'a.md']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import types
import typing as typ

from ._constants import DEFAULT_IMAGE, UPLOADS_DIR

if typ.TYPE_CHECKING:
    from .frontmatter import Scalar

_DATED_FILENAME = re.compile(r"^(\d{4}-\d{2}-\d{2})-(.+)$")


@dc.dataclass(frozen=True, slots=True, eq=True)
class Record(cabc.Mapping):
    """Header fields, body text, and provenance for one document.

    Attributes
    ----------
    filename : str
        Name of the source file; identifies the record within its collection.
    fields : Mapping[str, Scalar]
        Read-only view of the coerced header values in declaration order.
    body : str
        Document text after the header, unparsed.
    """

    filename: str
    fields: cabc.Mapping[str, Scalar] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )
    body: str = ""

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_header(
        cls, filename: str, header: cabc.Mapping[str, Scalar], body: str = ""
    ) -> Record:
        """Build a record, copying ``header`` so later changes cannot leak in."""
        return cls(
            filename=filename,
            fields=types.MappingProxyType(dict(header)),
            body=body,
        )

    def __getitem__(self, key: str) -> Scalar:
        return self.fields[key]

    def __iter__(self) -> cabc.Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def order(self) -> int | float | None:
        """Numeric ``order`` field, or None when absent or not a number."""
        value = self.fields.get("order")
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return value

    @property
    def published(self) -> bool:
        """False only when the header explicitly sets ``published: false``."""
        return self.fields.get("published") is not False

    @property
    def stem(self) -> str:
        stem, dot, _ = self.filename.rpartition(".")
        return stem if dot else self.filename

    @property
    def slug(self) -> str:
        """Filename stem without a leading ``YYYY-MM-DD-`` date prefix."""
        match = _DATED_FILENAME.match(self.stem)
        return match.group(2) if match else self.stem

    @property
    def date_from_filename(self) -> str | None:
        """Return the ``YYYY-MM-DD`` prefix of a dated filename, if any."""
        match = _DATED_FILENAME.match(self.stem)
        return match.group(1) if match else None

    def to_dict(self, *, include_body: bool = False) -> dict[str, typ.Any]:
        """Serialise the record for JSON export.

        Header fields come first; ``filename`` and ``slug`` are added after
        them and win over header keys of the same name.
        """
        payload: dict[str, typ.Any] = dict(self.fields)
        payload["filename"] = self.filename
        payload["slug"] = self.slug
        if include_body:
            payload["body"] = self.body
        return payload


Collection: typ.TypeAlias = tuple[Record, ...]


def sort_records(records: cabc.Iterable[Record]) -> Collection:
    """Order records ascending by ``order``; unordered records go last.

    Python's sort is stable, so records with equal keys (including every
    record without an ``order``) keep their incoming order.
    """

    def _key(record: Record) -> tuple[int, int | float]:
        order = record.order
        if order is None:
            return (1, 0)
        return (0, order)

    return tuple(sorted(records, key=_key))


def resolve_image_path(image: object) -> str:
    """Normalise an image reference from a record into a site-relative path.

    Examples
    --------
    >>> resolve_image_path("/images/uploads/a.jpg")
    'images/uploads/a.jpg'
    >>> resolve_image_path("photo.png")
    'images/uploads/photo.png'
    >>> resolve_image_path(None)
    'images/portfolio/default.jpg'
    """
    if not isinstance(image, str) or not image.strip():
        return DEFAULT_IMAGE
    path = image.strip()
    if path.startswith("/"):
        return path[1:]
    if path.startswith(("images/", "http")):
        return path
    return f"{UPLOADS_DIR}/{path}"


__all__ = [
    "Collection",
    "Record",
    "resolve_image_path",
    "sort_records",
]
