"""Unit tests for the GitHub contents API client."""

from __future__ import annotations

import base64
import typing as typ

import pytest
import requests

from cms_pages.github import (
    GitHubContentsClient,
    GitHubContentsError,
    GitHubRateLimitError,
)

if typ.TYPE_CHECKING:
    from unittest.mock import Mock

    from pytest_mock import MockerFixture


def _response(
    mocker: MockerFixture,
    status: int,
    payload: object = None,
    *,
    links: dict[str, dict[str, str]] | None = None,
) -> Mock:
    response = mocker.Mock()
    response.status_code = status
    response.json.return_value = payload
    response.text = ""
    response.links = links or {}
    return response


def _encoded(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def test_fetch_text_decodes_utf8_and_uses_token(mocker: MockerFixture) -> None:
    """Base64 payloads are decoded as UTF-8 and auth headers are sent."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(
        mocker, 200, {"content": _encoded("---\ntitle: 清邁投資\n---\n")}
    )

    client = GitHubContentsClient(
        "owner/site",
        token="secret-token",
        api_base="https://example.invalid",
        session=session,
    )
    text = client.fetch_text("_data/articles/a.md")

    assert text == "---\ntitle: 清邁投資\n---\n", f"unexpected text {text!r}"
    expected_url = (
        "https://example.invalid/repos/owner/site/contents/_data/articles/a.md"
    )
    called_url = session.get.call_args.args[0]
    assert called_url == expected_url, f"unexpected contents URL {called_url!r}"
    headers = session.get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer secret-token", (
        "expected Authorization header to include Bearer token"
    )


def test_fetch_text_sends_ref(mocker: MockerFixture) -> None:
    """A configured ref is passed as a query parameter."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 200, {"content": _encoded("x")})

    GitHubContentsClient("owner/site", ref="main", session=session).fetch_text("a.md")

    assert session.get.call_args.kwargs["params"] == {"ref": "main"}


def test_fetch_text_returns_none_for_missing_file(mocker: MockerFixture) -> None:
    """HTTP 404 means the file does not exist."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 404)

    client = GitHubContentsClient("owner/site", session=session)

    assert client.fetch_text("_data/articles/missing.md") is None


@pytest.mark.parametrize("status", [403, 429])
def test_fetch_text_raises_rate_limit(mocker: MockerFixture, status: int) -> None:
    """Throttling statuses surface as a dedicated error."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, status)

    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(GitHubRateLimitError):
        client.fetch_text("_data/articles/a.md")


def test_fetch_text_wraps_transport_errors(mocker: MockerFixture) -> None:
    """Connection failures become GitHubContentsError."""
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("boom")

    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(GitHubContentsError, match="Failed to reach"):
        client.fetch_text("_data/articles/a.md")


def test_fetch_text_rejects_invalid_utf8(mocker: MockerFixture) -> None:
    """Payloads that are not UTF-8 text are reported, not mis-decoded."""
    session = mocker.Mock(spec=requests.Session)
    payload = base64.b64encode(b"\xff\xfe\xfa").decode("ascii")
    session.get.return_value = _response(mocker, 200, {"content": payload})

    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(GitHubContentsError, match="UTF-8"):
        client.fetch_text("_data/articles/a.md")


def test_list_directory_follows_pagination(mocker: MockerFixture) -> None:
    """Entries from every page are returned in order."""
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = [
        _response(
            mocker,
            200,
            [{"name": "a.md", "type": "file"}],
            links={"next": {"url": "https://api.github.com/page2?page=2"}},
        ),
        _response(mocker, 200, [{"name": "img", "type": "dir"}]),
    ]

    listing = GitHubContentsClient("owner/site", session=session).list_directory(
        "_data/articles"
    )

    assert [entry.name for entry in listing.entries] == ["a.md", "img"]
    assert listing.partial is False, "complete listings are not partial"


def test_list_directory_keeps_partial_results(mocker: MockerFixture) -> None:
    """A throttled later page keeps earlier entries and marks the listing."""
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = [
        _response(
            mocker,
            200,
            [{"name": "a.md", "type": "file"}],
            links={"next": {"url": "https://api.github.com/page2?page=2"}},
        ),
        _response(mocker, 403),
    ]

    listing = GitHubContentsClient("owner/site", session=session).list_directory(
        "_data/articles"
    )

    assert [entry.name for entry in listing.entries] == ["a.md"]
    assert listing.partial is True, "expected listing to be marked partial"
    assert listing.rate_limited is True, "expected throttling to be recorded"


def test_list_directory_raises_on_first_page_failure(mocker: MockerFixture) -> None:
    """Nothing is salvaged when the first page is throttled."""
    session = mocker.Mock(spec=requests.Session)
    session.get.return_value = _response(mocker, 429)

    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(GitHubRateLimitError):
        client.list_directory("_data/articles")


def test_client_rejects_empty_repo() -> None:
    """A repository name is required."""
    with pytest.raises(ValueError, match="cannot be empty"):
        GitHubContentsClient("  ")
