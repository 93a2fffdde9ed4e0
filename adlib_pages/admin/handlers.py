"""Password-protected handlers that commit edits through the contents API.

Both handlers accept a serverless-style event mapping with ``httpMethod`` and
a JSON ``body`` and return a :class:`HandlerResponse`. Each invocation makes at
most two sequential calls upstream (read the revision marker, then write keyed
to it) and reports a definite outcome:

=====  =================================================================
200    ``{"ok": true}``
400    body is not a JSON object, or the image path is not allow-listed
401    ``{"error": "Unauthorized"}``
405    method other than POST
500    ``{"error": ..., "details": ...}`` when the upstream API fails
=====  =================================================================
"""

from __future__ import annotations

import base64
import binascii
import dataclasses as dc
import hmac
import json
import logging
import typing as typ
from http import HTTPStatus

from adlib_pages._constants import (
    CONTENT_COMMIT_MESSAGE,
    DEFAULT_IMAGE_PATHS,
    IMAGE_COMMIT_MESSAGE,
)
from adlib_pages.content import dump_content

from .contents import GitHubContentsClient, UpstreamFailure

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from adlib_pages.config import AdminSettings

logger = logging.getLogger(__name__)

Event = typ.Mapping[str, typ.Any]


class Unauthorized(PermissionError):
    """Raised when the submitted password does not match the admin secret."""


class BadRequest(ValueError):
    """Raised when a request body cannot be used."""


@dc.dataclass(frozen=True, slots=True)
class HandlerResponse:
    """Status code and body returned to the serverless runtime."""

    status_code: int
    body: str

    @classmethod
    def json(cls, status: HTTPStatus, payload: object) -> HandlerResponse:
        """Return a response whose body is ``payload`` serialized as JSON."""
        return cls(status_code=int(status), body=json.dumps(payload))

    @property
    def payload(self) -> typ.Any:
        """Return the decoded JSON body."""
        return json.loads(self.body)

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the response in the runtime's ``statusCode``/``body`` shape."""
        return {"statusCode": self.status_code, "body": self.body}


_METHOD_NOT_ALLOWED = HandlerResponse(
    status_code=int(HTTPStatus.METHOD_NOT_ALLOWED), body="Method not allowed"
)


def _parse_body(event: Event) -> dict[str, typ.Any]:
    raw = event.get("body") or ""
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        payload = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = "Invalid JSON"
        raise BadRequest(msg) from exc
    if not isinstance(payload, dict):
        msg = "Request body must be a JSON object"
        raise BadRequest(msg)
    return payload


def _authorize(payload: cabc.Mapping[str, typ.Any], settings: AdminSettings) -> None:
    password = payload.get("password")
    if not isinstance(password, str) or not password or not settings.password:
        raise Unauthorized
    if not hmac.compare_digest(password.encode(), settings.password.encode()):
        raise Unauthorized


def _is_base64(data: str) -> bool:
    if not data:
        return False
    try:
        base64.b64decode(data, validate=True)
    except binascii.Error:
        return False
    return True


def _client_for(
    settings: AdminSettings, client: GitHubContentsClient | None
) -> GitHubContentsClient:
    if client is not None:
        return client
    return GitHubContentsClient(
        settings.repo, token=settings.github_token, api_base=settings.api_base
    )


def _upstream_error(error: str, exc: UpstreamFailure) -> HandlerResponse:
    logger.error("%s: %s", error, exc)
    return HandlerResponse.json(
        HTTPStatus.INTERNAL_SERVER_ERROR,
        {"error": error, "details": exc.details or str(exc)},
    )


def _guard(
    event: Event, settings: AdminSettings
) -> dict[str, typ.Any] | HandlerResponse:
    """Run the method, body and password checks shared by both handlers."""
    if str(event.get("httpMethod", "")).upper() != "POST":
        return _METHOD_NOT_ALLOWED
    try:
        payload = _parse_body(event)
        _authorize(payload, settings)
    except BadRequest as exc:
        return HandlerResponse.json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
    except Unauthorized:
        logger.info("rejected admin request with a bad password")
        return HandlerResponse.json(
            HTTPStatus.UNAUTHORIZED, {"error": "Unauthorized"}
        )
    return payload


def save_content(
    event: Event,
    *,
    settings: AdminSettings,
    client: GitHubContentsClient | None = None,
    content_path: str = "content.json",
) -> HandlerResponse:
    """Commit the submitted content document to ``content_path``.

    Parameters
    ----------
    event : Mapping
        Request event carrying ``httpMethod`` and a JSON body of the form
        ``{"password": ..., "content": {...}}``.
    settings : AdminSettings
        Admin secret and repository coordinates.
    client : GitHubContentsClient, optional
        Contents API client; built from ``settings`` when omitted.
    content_path : str, optional
        Repository path of the content document.

    Returns
    -------
    HandlerResponse
        Outcome of the request. The content file must already exist, since
        its revision marker keys the write.
    """
    payload = _guard(event, settings)
    if isinstance(payload, HandlerResponse):
        return payload
    if "content" not in payload:
        return HandlerResponse.json(
            HTTPStatus.BAD_REQUEST, {"error": "Missing content"}
        )

    contents = _client_for(settings, client)
    try:
        sha = contents.fetch_revision(content_path, branch=settings.branch)
    except UpstreamFailure as exc:
        return _upstream_error("Failed to read current content", exc)
    if sha is None:
        exc = UpstreamFailure(
            f"'{content_path}' does not exist", status_code=int(HTTPStatus.NOT_FOUND)
        )
        return _upstream_error("Failed to read current content", exc)

    encoded = base64.b64encode(dump_content(payload["content"]).encode("utf-8"))
    try:
        contents.put_file(
            content_path,
            content_b64=encoded.decode("ascii"),
            message=CONTENT_COMMIT_MESSAGE,
            sha=sha,
            branch=settings.branch,
        )
    except UpstreamFailure as exc:
        return _upstream_error("Failed to save", exc)
    return HandlerResponse.json(HTTPStatus.OK, {"ok": True})


def upload_image(
    event: Event,
    *,
    settings: AdminSettings,
    client: GitHubContentsClient | None = None,
    allowed_paths: cabc.Collection[str] = DEFAULT_IMAGE_PATHS,
) -> HandlerResponse:
    """Commit a base64-encoded image to one of the allow-listed paths.

    Parameters
    ----------
    event : Mapping
        Request event whose JSON body is
        ``{"password": ..., "path": ..., "data": <base64>}``.
    settings : AdminSettings
        Admin secret and repository coordinates.
    client : GitHubContentsClient, optional
        Contents API client; built from ``settings`` when omitted.
    allowed_paths : Collection[str], optional
        Repository paths images may be written to.

    Returns
    -------
    HandlerResponse
        Outcome of the request. A path with no existing file is created.
    """
    payload = _guard(event, settings)
    if isinstance(payload, HandlerResponse):
        return payload
    path = payload.get("path")
    if not isinstance(path, str) or path not in allowed_paths:
        return HandlerResponse.json(
            HTTPStatus.BAD_REQUEST, {"error": "Invalid image path"}
        )
    data = payload.get("data")
    if not isinstance(data, str) or not _is_base64(data):
        return HandlerResponse.json(
            HTTPStatus.BAD_REQUEST, {"error": "Invalid image data"}
        )

    contents = _client_for(settings, client)
    try:
        sha = contents.fetch_revision(path, branch=settings.branch)
        contents.put_file(
            path,
            content_b64=data,
            message=IMAGE_COMMIT_MESSAGE.format(path=path),
            sha=sha,
            branch=settings.branch,
        )
    except UpstreamFailure as exc:
        return _upstream_error("Failed to upload", exc)
    return HandlerResponse.json(HTTPStatus.OK, {"ok": True})


__all__ = [
    "BadRequest",
    "HandlerResponse",
    "Unauthorized",
    "save_content",
    "upload_image",
]
