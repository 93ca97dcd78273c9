"""Load and validate CMS content configuration for static sites.

This subpackage parses a site's ``cms.yaml`` file, applies defaults for
omitted keys, and produces typed dataclasses (:class:`CMSConfig`,
:class:`RemoteConfig`) that :class:`~cms_pages.loader.ContentLoader` consumes.
The primary entry point is :func:`load_cms_config`; :func:`configure_logging`
sets up structlog output for the CLI.

Examples
--------
>>> from pathlib import Path
>>> from cms_pages.config import load_cms_config
>>> config = load_cms_config(Path("config/cms.yaml"))  # doctest: +SKIP
>>> config.data_dir  # doctest: +SKIP
'_data'
"""

from .loader import build_cms_config, load_cms_config
from .logging import configure_logging
from .models import CMSConfig, CMSConfigError, RemoteConfig

__all__ = [
    "CMSConfig",
    "CMSConfigError",
    "RemoteConfig",
    "build_cms_config",
    "configure_logging",
    "load_cms_config",
]
