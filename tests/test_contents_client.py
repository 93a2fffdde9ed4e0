"""Unit tests for the GitHub contents API client."""

from __future__ import annotations

import json
import typing as typ

import pytest
import requests

from adlib_pages.admin import GitHubContentsClient, UpstreamFailure

if typ.TYPE_CHECKING:
    from unittest import mock

    from pytest_mock import MockerFixture


def _session(
    mocker: MockerFixture, status_code: int, payload: object = None, text: str = ""
) -> mock.Mock:
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    session.request.return_value = response
    return session


def test_fetch_revision_uses_token_and_contents_url(mocker: MockerFixture) -> None:
    """The client should authenticate and address the contents endpoint."""
    session = _session(mocker, 200, {"sha": "abc123", "path": "content.json"})
    client = GitHubContentsClient(
        "owner/site",
        token="secret-token",
        api_base="https://example.invalid/",
        session=session,
    )

    assert client.fetch_revision("content.json") == "abc123"

    session.request.assert_called_once()
    method, url = session.request.call_args.args
    assert (method, url) == (
        "GET",
        "https://example.invalid/repos/owner/site/contents/content.json",
    ), f"unexpected request {method} {url}"
    kwargs = session.request.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer secret-token", (
        "expected Authorization header to include Bearer token"
    )
    assert kwargs["params"] is None, "no ref should be sent without a branch"
    assert kwargs["timeout"] == client.timeout


def test_fetch_revision_passes_branch_as_ref(mocker: MockerFixture) -> None:
    session = _session(mocker, 200, {"sha": "abc123"})
    client = GitHubContentsClient("owner/site", session=session)
    client.fetch_revision("images/hero bg.mp4", branch="main")

    url = session.request.call_args.args[1]
    assert url.endswith("/contents/images/hero%20bg.mp4"), url
    assert session.request.call_args.kwargs["params"] == {"ref": "main"}
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_fetch_revision_returns_none_for_missing_file(mocker: MockerFixture) -> None:
    """GitHub answers 404 for a path with no file; that is not an error."""
    client = GitHubContentsClient("owner/site", session=_session(mocker, 404))
    assert client.fetch_revision("images/new.jpg") is None, (
        "expected None for a file that does not exist yet"
    )


@pytest.mark.parametrize(
    ("status_code", "payload"),
    [
        (500, None),
        (401, None),
        (200, {"path": "content.json"}),
        (200, ["not", "a", "file"]),
    ],
)
def test_fetch_revision_failures_raise(
    mocker: MockerFixture, status_code: int, payload: object
) -> None:
    """Error statuses and responses without a SHA are upstream failures."""
    session = _session(mocker, status_code, payload, text="Server Error")
    client = GitHubContentsClient("owner/site", session=session)
    with pytest.raises(UpstreamFailure) as excinfo:
        client.fetch_revision("content.json")
    assert excinfo.value.status_code == status_code


def test_fetch_revision_rejects_invalid_json(mocker: MockerFixture) -> None:
    session = _session(mocker, 200, text="<html>")
    session.request.return_value.json.side_effect = json.JSONDecodeError(
        "Expecting value", "<html>", 0
    )
    client = GitHubContentsClient("owner/site", session=session)
    with pytest.raises(UpstreamFailure, match="not valid JSON") as excinfo:
        client.fetch_revision("content.json")
    assert excinfo.value.details == "<html>"


def test_put_file_sends_revision_and_branch(mocker: MockerFixture) -> None:
    """Writes carry the revision marker they were keyed to."""
    session = _session(mocker, 200, {"content": {"sha": "def456"}})
    client = GitHubContentsClient("owner/site", token="t", session=session)

    result = client.put_file(
        "content.json",
        content_b64="e30K",
        message="Update content via admin",
        sha="abc123",
        branch="main",
    )

    assert result == {"content": {"sha": "def456"}}
    method, url = session.request.call_args.args
    assert method == "PUT"
    assert url == "https://api.github.com/repos/owner/site/contents/content.json"
    assert session.request.call_args.kwargs["json"] == {
        "message": "Update content via admin",
        "content": "e30K",
        "sha": "abc123",
        "branch": "main",
    }


def test_put_file_without_revision_creates(mocker: MockerFixture) -> None:
    session = _session(mocker, 201, {})
    client = GitHubContentsClient("owner/site", session=session)
    client.put_file("images/new.jpg", content_b64="AAAA", message="Add")
    body = session.request.call_args.kwargs["json"]
    assert "sha" not in body and "branch" not in body, body


def test_stale_revision_is_not_retried(mocker: MockerFixture) -> None:
    """A 409 conflict surfaces immediately as an upstream failure."""
    session = _session(
        mocker, 409, text='{"message": "content.json does not match abc123"}'
    )
    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(UpstreamFailure) as excinfo:
        client.put_file("content.json", content_b64="e30K", message="m", sha="abc123")

    assert excinfo.value.status_code == 409
    assert "does not match" in excinfo.value.details
    session.request.assert_called_once()


def test_transport_errors_become_upstream_failures(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("connection refused")
    client = GitHubContentsClient("owner/site", session=session)

    with pytest.raises(UpstreamFailure) as excinfo:
        client.fetch_revision("content.json")

    assert excinfo.value.status_code is None
    assert "connection refused" in excinfo.value.details


def test_empty_repository_is_rejected() -> None:
    with pytest.raises(ValueError, match="cannot be empty"):
        GitHubContentsClient(" / ")
