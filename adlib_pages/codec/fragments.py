"""Decode the inner markup of an annotated element back into a value."""

from __future__ import annotations

from .escaping import RICH_TAGS, decode_entities
from .scanner import scan_tags


def text_content(inner: str) -> str:
    """Return the plain-text value of an element's inner markup.

    Forced ``<br>`` breaks become newlines and every other tag is dropped
    while its text is kept, which makes animation word-wrapper spans
    transparent. Character references are decoded per text run.
    """
    parts: list[str] = []
    cursor = 0
    for tag in scan_tags(inner):
        parts.append(decode_entities(inner[cursor : tag.start]))
        if tag.name == "br" and not tag.closing:
            parts.append("\n")
        cursor = tag.end
    parts.append(decode_entities(inner[cursor:]))
    return "".join(parts).strip()


def rich_content(inner: str) -> str:
    """Return the rich-text value of an element's inner markup.

    Only the allow-listed inline tags survive, rewritten into the canonical
    form the renderer accepts; links lose the ``rel`` attribute the renderer
    adds. Everything else is dropped and text runs are entity-decoded, so an
    escaped ``&lt;script&gt;`` comes back as literal ``<script>`` text.
    """
    parts: list[str] = []
    cursor = 0
    for tag in scan_tags(inner):
        parts.append(decode_entities(inner[cursor : tag.start]))
        cursor = tag.end
        if tag.name == "br" and not tag.closing:
            parts.append("\n")
            continue
        if tag.name not in RICH_TAGS:
            continue
        if tag.closing:
            parts.append(f"</{tag.name}>")
        elif tag.name == "a":
            href = tag.get("href")
            if href is not None:
                parts.append(_canonical_link(href, tag.get("target")))
        else:
            parts.append(f"<{tag.name}>")
    parts.append(decode_entities(inner[cursor:]))
    return "".join(parts).strip()


def _canonical_link(href: str, target: str | None) -> str:
    """Return the source form of a link as the renderer expects to receive it."""
    if target is None:
        return f'<a href="{href}">'
    return f'<a href="{href}" target="{target}">'


__all__ = ["rich_content", "text_content"]
