"""Common literal values used across cms_pages.

These constants keep directory names, timings, and the fallback manifest
centralized so the config loader, resolver, and tests import the same values
without drifting. Intended for internal use within the cms_pages package.

Examples
--------
>>> from cms_pages import _constants
>>> _constants.DEFAULT_DATA_DIR
'_data'
>>> "articles" in _constants.DEFAULT_MANIFEST
True
"""

DEFAULT_DATA_DIR = "_data"
DEFAULT_EXTENSION = ".md"
DEFAULT_CACHE_TTL = 5 * 60.0
DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_REMOTE_DELAY = 0.2
DEFAULT_FAILURE_DELAY = 0.5
DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_IMAGE = "images/portfolio/default.jpg"
UPLOADS_DIR = "images/uploads"

# Known to drift from the remote file set; only consulted when listing fails.
DEFAULT_MANIFEST: dict[str, tuple[str, ...]] = {
    "properties": (
        "property-1.md",
        "property-2.md",
        "property-3.md",
        "property-4.md",
        "property-5.md",
        "test-article.md",
    ),
    "youtube": ("video-1.md", "video-2.md", "video-3.md", "video-4.md"),
    "shorts": (
        "shorts-1.md",
        "shorts-2.md",
        "shorts-3.md",
        "shorts-4.md",
        "shorts-5.md",
        "shorts-6.md",
    ),
    "articles": (
        "2024-07-15-chiangmai-real-estate-investment-trends.md",
        "2024-07-10-thailand-property-purchase-guide.md",
        "2024-07-05-chiangmai-area-selection-guide.md",
    ),
}
