"""Cyclopts CLI entrypoint for resolving CMS collections from the command line.

The ``cms`` console script defined here loads a collection the same way page
code does, then prints it as JSON, lists the files that make it up, or writes
a JSON export for static builds. Typical usage is ``cms export articles
--output public/articles.json`` in a site build step, and ``cms load
properties --verbose`` when diagnosing why a page shows fallback content.

Examples
--------
Print the published articles as JSON:

>>> from cms_pages.cli import main
>>> main()  # doctest: +SKIP

Export a collection into the site's public folder:

>>> from cms_pages.cli import app
>>> app(["export", "articles", "--output", "public/articles.json"])  # doctest: +SKIP
"""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

import cyclopts
import structlog
from cyclopts import App, Parameter

from .config import CMSConfig, configure_logging, load_cms_config
from .export import export_collection, serialise_collection
from .loader import ContentLoader

DEFAULT_CONFIG = Path("config/cms.yaml")

app = App(name="cms", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

log = structlog.get_logger(__name__)

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to the CMS config", env_var="INPUT_CONFIG")
]
TokenOption = typ.Annotated[
    str | None,
    Parameter(
        help="Optional GitHub token (falls back to GITHUB_TOKEN)",
        env_var="INPUT_GITHUB_TOKEN",
    ),
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _build_loader(config: Path, github_token: str | None) -> ContentLoader:
    """Load ``config`` (or defaults when it is absent) and build a loader."""
    if config.exists():
        cms_config = load_cms_config(config)
    else:
        log.warning("config_missing", path=str(config))
        cms_config = CMSConfig()
    token = github_token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
    return ContentLoader.from_config(cms_config, token=token)


@app.command(help="Resolve a collection and print its records as JSON.")
def load(
    collection: str,
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    github_token: TokenOption = None,
    include_body: bool = False,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Print the published records of ``collection`` as a JSON array.

    Parameters
    ----------
    collection : str
        Collection name, e.g. ``articles``.
    config : Path, optional
        Path to ``cms.yaml``; defaults to ``config/cms.yaml`` and can be
        overridden via ``INPUT_CONFIG``. Built-in defaults are used when the
        file does not exist.
    github_token : str or None, optional
        Token for the remote contents API. Falls back to ``GITHUB_TOKEN`` or
        ``GH_TOKEN`` before making unauthenticated requests.
    include_body : bool, optional
        Include each record's markdown body in the output.
    verbose : bool, optional
        Emit debug diagnostics on stderr.
    log_json : bool, optional
        Emit diagnostics as JSON lines.

    Returns
    -------
    None
        Prints ``[]`` when nothing could be resolved; never fails on content
        errors.
    """
    configure_logging(verbose=verbose, log_json=log_json)
    loader = _build_loader(config, github_token)
    records = loader.load_collection(collection)
    print(serialise_collection(records, include_body=include_body), end="")


@app.command(name="list", help="Print the filenames that make up a collection.")
def list_files(
    collection: str,
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    github_token: TokenOption = None,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Print the discovered filenames of ``collection``, one per line."""
    configure_logging(verbose=verbose, log_json=log_json)
    loader = _build_loader(config, github_token)
    for filename in loader.discovery.list(collection):
        print(filename)


@app.command(help="Resolve a collection and write it to a JSON file.")
def export(
    collection: str,
    *,
    output: typ.Annotated[
        Path, Parameter(help="Destination JSON file", env_var="INPUT_OUTPUT")
    ],
    config: ConfigOption = DEFAULT_CONFIG,
    github_token: TokenOption = None,
    include_body: bool = True,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Write ``collection`` to ``output`` and report the written path."""
    configure_logging(verbose=verbose, log_json=log_json)
    loader = _build_loader(config, github_token)
    records = loader.load_collection(collection)
    written = export_collection(records, output, include_body=include_body)
    print(f"wrote {_format_path(written)} ({len(records)} records)")


def main() -> None:
    """Invoke the Cyclopts application that powers the `cms` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
