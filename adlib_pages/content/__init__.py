"""The structured content document and its static schema.

Exports
-------
- ``ContentDocument``: validated, immutable document value.
- ``SchemaViolation``: raised for documents or paths outside the schema.
- ``load_content`` / ``dump_content``: JSON persistence helpers.
- ``CONTENT_SCHEMA`` and ``resolve_path``: shape lookups by dotted path.
"""

from __future__ import annotations

from .document import ContentDocument, dump_content, load_content
from .schema import (
    CONTENT_SCHEMA,
    SECTIONS,
    SchemaViolation,
    join_path,
    resolve_path,
    split_path,
)

__all__ = [
    "CONTENT_SCHEMA",
    "SECTIONS",
    "ContentDocument",
    "SchemaViolation",
    "dump_content",
    "join_path",
    "load_content",
    "resolve_path",
    "split_path",
]
