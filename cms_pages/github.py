r"""Read CMS content through the GitHub repository contents API.

This module wraps the two read-only calls the content loader needs: fetching
one file (returned by GitHub as a base64 payload) and listing a directory. It
surfaces HTTP failures as :class:`GitHubContentsError` and throttling (HTTP
403/429) as the dedicated :class:`GitHubRateLimitError` so callers can stop
spending requests against an exhausted quota.

Example
-------
>>> from cms_pages.github import GitHubContentsClient
>>> client = GitHubContentsClient("lovemage/marco-academic")  # doctest: +SKIP
>>> text = client.fetch_text("_data/articles/welcome.md")  # doctest: +SKIP
>>> text.startswith("---")  # doctest: +SKIP
True
"""

from __future__ import annotations

import base64
import binascii
import dataclasses as dc
import json
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ._constants import DEFAULT_API_BASE, DEFAULT_TIMEOUT

_ACCEPT_HEADER = "application/vnd.github+json"
RATE_LIMIT_STATUSES = frozenset({HTTPStatus.FORBIDDEN, HTTPStatus.TOO_MANY_REQUESTS})


class GitHubContentsError(RuntimeError):
    """Raised when the GitHub API returns an unexpected error response."""


class GitHubRateLimitError(GitHubContentsError):
    """Raised when GitHub signals that the caller has been rate-limited."""


@dc.dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """One item of a GitHub directory listing.

    Attributes
    ----------
    name : str
        File or directory name without its parent path.
    type : str
        ``"file"`` or ``"dir"`` (GitHub may also report ``"symlink"``).
    """

    name: str
    type: str


@dc.dataclass(slots=True)
class DirectoryListing:
    """Entries returned for a directory, possibly cut short.

    ``partial`` is True when a later page of the listing failed after earlier
    pages succeeded; ``rate_limited`` records whether throttling caused it.
    """

    entries: list[DirectoryEntry] = dc.field(default_factory=list)
    partial: bool = False
    rate_limited: bool = False


class GitHubContentsClient:
    """Thin wrapper around ``/repos/:owner/:repo/contents`` endpoints.

    The client centralises authentication, timeouts, and error handling. It
    retries transient server errors through the session adapter but never
    retries throttled requests.
    """

    default_api_base = DEFAULT_API_BASE

    def __init__(
        self,
        repo: str,
        *,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        ref: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialise the client for one repository.

        Parameters
        ----------
        repo : str
            Repository identifier in ``owner/name`` form.
        token : str | None, optional
            Personal access token; raises the rate limit when provided.
        api_base : str, optional
            Base URL for the GitHub API; override for GitHub Enterprise.
        ref : str | None, optional
            Branch, tag, or commit to read from; the default branch when None.
        session : requests.Session, optional
            Preconfigured session to reuse connections. Defaults to a new
            session with a retry adapter for 5xx responses.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.

        Raises
        ------
        ValueError
            If ``repo`` is empty.
        """
        normalized = repo.strip().strip("/")
        if not normalized:
            msg = "Repository name cannot be empty"
            raise ValueError(msg)
        self.repo = normalized
        self.ref = ref
        self._api_base = api_base.rstrip("/") or DEFAULT_API_BASE
        self._session = session or _build_session()
        self.timeout = timeout
        self._headers = {
            "Accept": _ACCEPT_HEADER,
            "User-Agent": "cms-pages/0.1",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def contents_url(self, path: str) -> str:
        """Return the contents endpoint URL for ``path`` in the repository."""
        return f"{self._api_base}/repos/{self.repo}/contents/{quote(path.strip('/'))}"

    def fetch_text(self, path: str) -> str | None:
        """Return the UTF-8 text of the file at ``path``.

        Returns
        -------
        str | None
            Decoded file content, or ``None`` when GitHub reports HTTP 404.

        Raises
        ------
        GitHubRateLimitError
            If GitHub answers with HTTP 403 or 429.
        GitHubContentsError
            For other error statuses, transport failures and timeouts, and
            payloads that are not base64-encoded UTF-8 files.
        """
        payload = self._get_json(self.contents_url(path))
        if payload is None:
            return None
        if not isinstance(payload, dict) or "content" not in payload:
            msg = f"GitHub contents for '{path}' did not describe a file"
            raise GitHubContentsError(msg)
        return _decode_content(payload["content"], path)

    def list_directory(self, path: str) -> DirectoryListing:
        """Return the entries of the directory at ``path``.

        Follows ``Link: rel="next"`` pagination. A failure on the first page
        propagates; a failure on a later page keeps the entries already read
        and marks the listing partial.

        Raises
        ------
        GitHubRateLimitError
            If the first page is throttled.
        GitHubContentsError
            If the first page fails for any other reason.
        """
        listing = DirectoryListing()
        url: str | None = self.contents_url(path)
        while url:
            try:
                response = self._request(url)
            except GitHubContentsError as exc:
                if not listing.entries:
                    raise
                listing.partial = True
                listing.rate_limited = isinstance(exc, GitHubRateLimitError)
                break
            if response is None:
                break
            payload = _parse_json(response, path)
            if not isinstance(payload, list):
                msg = f"GitHub contents for '{path}' is not a directory"
                raise GitHubContentsError(msg)
            listing.entries.extend(
                DirectoryEntry(
                    name=str(item.get("name", "")), type=str(item.get("type", ""))
                )
                for item in payload
                if isinstance(item, dict)
            )
            url = response.links.get("next", {}).get("url")
        return listing

    def _get_json(self, url: str) -> typ.Any:
        response = self._request(url)
        if response is None:
            return None
        return _parse_json(response, url)

    def _request(self, url: str) -> requests.Response | None:
        """GET ``url``; return None on 404 and raise on other failures."""
        params = {"ref": self.ref} if self.ref and "?" not in url else None
        try:
            response = self._session.get(
                url, headers=self._headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach GitHub contents at '{url}': {exc}"
            raise GitHubContentsError(msg) from exc

        if response.status_code in RATE_LIMIT_STATUSES:
            msg = (
                f"GitHub rate limit reached for '{url}' "
                f"(status {response.status_code})"
            )
            raise GitHubRateLimitError(msg)
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"GitHub contents lookup for '{url}' failed with "
                f"status {response.status_code}: {snippet}"
            )
            raise GitHubContentsError(msg)
        return response


def _build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=2,
        connect=2,
        read=2,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _parse_json(response: requests.Response, label: str) -> typ.Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        msg = f"GitHub response for '{label}' was not valid JSON"
        raise GitHubContentsError(msg) from exc


def _decode_content(content: object, path: str) -> str:
    """Decode a base64 payload into text with an explicit UTF-8 step."""
    if not isinstance(content, str):
        msg = f"GitHub contents for '{path}' had no base64 payload"
        raise GitHubContentsError(msg)
    try:
        raw = base64.b64decode(content)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        msg = f"GitHub contents for '{path}' could not be decoded as UTF-8"
        raise GitHubContentsError(msg) from exc


__all__ = [
    "DirectoryEntry",
    "DirectoryListing",
    "GitHubContentsClient",
    "GitHubContentsError",
    "GitHubRateLimitError",
    "RATE_LIMIT_STATUSES",
]
