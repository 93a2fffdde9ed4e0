"""Admin persistence handlers backed by the GitHub contents API.

Exports
-------
- ``save_content``: commit an edited content document.
- ``upload_image``: commit a replacement image to an allow-listed path.
- ``GitHubContentsClient``: revision lookup and file writes.
- ``HandlerResponse``, ``Unauthorized``, ``UpstreamFailure``.
"""

from __future__ import annotations

from .contents import GitHubContentsClient, UpstreamFailure
from .handlers import (
    BadRequest,
    HandlerResponse,
    Unauthorized,
    save_content,
    upload_image,
)

__all__ = [
    "BadRequest",
    "GitHubContentsClient",
    "HandlerResponse",
    "Unauthorized",
    "UpstreamFailure",
    "save_content",
    "upload_image",
]
