"""Resolve CMS markdown collections for static marketing sites.

This package discovers the markdown files of a named collection, retrieves
them from local paths or the GitHub contents API, parses their frontmatter,
and hands ordered, published records to page-rendering code. It also exposes
the ``cms`` CLI used by site build scripts.

Exports
-------
- ``ContentLoader``: facade that loads, filters, sorts, and caches collections.
- ``Record``: immutable header/body/filename record.
- ``parse_frontmatter``: parse one document into header fields and body.
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from cms_pages import parse_frontmatter
>>> parse_frontmatter("---\\npublished: false\\n---\\n").header["published"]
False
"""

from __future__ import annotations

from .cli import app, main
from .frontmatter import parse_frontmatter
from .loader import ContentLoader
from .records import Record

__all__ = ["ContentLoader", "Record", "app", "main", "parse_frontmatter"]
