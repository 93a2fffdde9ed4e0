"""Render content documents into annotated markup and extract them back.

The two halves share one wire format (the ``data-adlib-*`` attributes), one
escaping table and one table of derived fields, so that
``extract(render(document)) == document`` holds for every valid document.

Examples
--------
>>> from adlib_pages.codec import extract, render
>>> markup = render(document)  # doctest: +SKIP
>>> extract(markup) == document  # doctest: +SKIP
True
"""

from __future__ import annotations

from .escaping import decode_entities, escape_rich, escape_text
from .extractor import DocumentBuilder, MalformedMarkup, extract
from .fragments import rich_content, text_content
from .renderer import ContentRenderer, FieldRenderer, render
from .scanner import MarkupSyntaxError, Tag, find_matching_close, scan_tags
from .transforms import TRANSFORMS, FieldTransform, find_transform

__all__ = [
    "TRANSFORMS",
    "ContentRenderer",
    "DocumentBuilder",
    "FieldRenderer",
    "FieldTransform",
    "MalformedMarkup",
    "MarkupSyntaxError",
    "Tag",
    "decode_entities",
    "escape_rich",
    "escape_text",
    "extract",
    "find_matching_close",
    "find_transform",
    "render",
    "rich_content",
    "scan_tags",
    "text_content",
]
