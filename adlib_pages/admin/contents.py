r"""Minimal client for the GitHub repository contents API.

Only the two calls the admin handlers need are wrapped: reading a file's
current blob SHA (the revision marker) and writing new file content keyed to
that marker. A write with a stale marker is rejected by GitHub with HTTP 409;
that rejection is raised as :class:`UpstreamFailure` and never retried.

Example
-------
>>> from adlib_pages.admin.contents import GitHubContentsClient
>>> client = GitHubContentsClient("owner/site", token="ghp_example")  # doctest: +SKIP
>>> sha = client.fetch_revision("content.json")  # doctest: +SKIP
>>> client.put_file(
...     "content.json", content_b64="e30K", message="Update", sha=sha
... )  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import requests

from adlib_pages._constants import DEFAULT_API_BASE

logger = logging.getLogger(__name__)

_ACCEPT_HEADER = "application/vnd.github+json"
_SNIPPET_LENGTH = 200


class UpstreamFailure(RuntimeError):
    """Raised when the contents API cannot be reached or rejects a call.

    Attributes
    ----------
    status_code : int | None
        HTTP status returned by the API, or ``None`` for transport errors.
    details : str
        Response body snippet or transport error text.
    """

    def __init__(
        self, message: str, *, status_code: int | None = None, details: str = ""
    ) -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class GitHubContentsClient:
    """Thin wrapper around ``/repos/:owner/:repo/contents/:path``.

    The client centralises authentication, timeouts and error handling. It
    does not retry failed requests.
    """

    def __init__(
        self,
        repo: str,
        *,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the client for ``repo`` with optional authentication.

        Parameters
        ----------
        repo : str
            Repository identifier in ``owner/name`` form.
        token : str | None, optional
            Token with contents write access, sent as a bearer token.
        api_base : str, optional
            Base URL for the GitHub API; override for GitHub Enterprise.
        session : requests.Session, optional
            Preconfigured session to reuse connections (and to inject test
            doubles). Defaults to a new session per client.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``10.0``.
        """
        normalized = repo.strip().strip("/")
        if not normalized:
            msg = "Repository name cannot be empty"
            raise ValueError(msg)
        self.repo = normalized
        self._api_base = api_base.rstrip("/") or DEFAULT_API_BASE
        self._session = session or requests.Session()
        self.timeout = timeout
        self._headers = {
            "Accept": _ACCEPT_HEADER,
            "User-Agent": "adlib-pages-admin",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def contents_url(self, path: str) -> str:
        """Return the API URL of the file at repository ``path``."""
        return f"{self._api_base}/repos/{self.repo}/contents/{quote(path.lstrip('/'))}"

    def fetch_revision(self, path: str, *, branch: str | None = None) -> str | None:
        """Return the blob SHA of ``path``, or ``None`` when it does not exist.

        Raises
        ------
        UpstreamFailure
            For transport errors, non-404 error statuses, or responses that
            carry no SHA.
        """
        params = {"ref": branch} if branch else None
        response = self._send("get", path, params=params)
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        self._raise_for_status(response, f"Reading '{path}'")
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            msg = f"GitHub response for '{path}' was not valid JSON"
            raise UpstreamFailure(
                msg,
                status_code=response.status_code,
                details=response.text[:_SNIPPET_LENGTH],
            ) from exc
        sha = payload.get("sha") if isinstance(payload, dict) else None
        if not isinstance(sha, str) or not sha:
            msg = f"GitHub response for '{path}' has no revision marker"
            raise UpstreamFailure(msg, status_code=response.status_code)
        return sha

    def put_file(
        self,
        path: str,
        *,
        content_b64: str,
        message: str,
        sha: str | None = None,
        branch: str | None = None,
    ) -> dict[str, typ.Any]:
        """Create or update ``path`` with base64 ``content_b64``.

        Parameters
        ----------
        path : str
            Repository-relative file path.
        content_b64 : str
            New file content, already base64-encoded.
        message : str
            Commit message.
        sha : str | None, optional
            Revision marker of the file being replaced; omit to create it.
        branch : str | None, optional
            Target branch; defaults to the repository's default branch.

        Returns
        -------
        dict
            Decoded JSON response body (empty when the body is not JSON).
        """
        body: dict[str, str] = {"message": message, "content": content_b64}
        if sha:
            body["sha"] = sha
        if branch:
            body["branch"] = branch
        response = self._send("put", path, json=body)
        self._raise_for_status(response, f"Writing '{path}'")
        logger.info("committed %s to %s", path, self.repo)
        try:
            payload = response.json()
        except json.JSONDecodeError:
            return {}
        return payload if isinstance(payload, dict) else {}

    def _send(self, method: str, path: str, **kwargs: typ.Any) -> requests.Response:
        url = self.contents_url(path)
        try:
            return self._session.request(
                method.upper(),
                url,
                headers=self._headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach GitHub contents API for '{path}': {exc}"
            raise UpstreamFailure(msg, details=str(exc)) from exc

    @staticmethod
    def _raise_for_status(response: requests.Response, action: str) -> None:
        if response.status_code < HTTPStatus.BAD_REQUEST:
            return
        snippet = response.text[:_SNIPPET_LENGTH]
        msg = f"{action} failed with status {response.status_code}: {snippet}"
        raise UpstreamFailure(msg, status_code=response.status_code, details=snippet)


__all__ = ["GitHubContentsClient", "UpstreamFailure"]
