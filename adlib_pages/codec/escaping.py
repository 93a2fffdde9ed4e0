"""Entity escaping for scalar text, rich text, and attribute values.

Scalar text uses the site's typographic escaping table: ``&``, ``<`` and
``>`` become their named entities, apostrophes become ``&rsquo;`` and double
hyphens become ``&mdash;``. Newlines are emitted as forced ``<br>`` breaks.
:func:`decode_entities` is the exact inverse of that table and falls back to
the HTML5 named-entity table for anything else found in hand-edited markup.

Rich text runs the same escaping and then restores a small allow-list of
inline tags that were escaped along with everything else.

Examples
--------
>>> escape_text("Fish & Chips -- it's <b>")
'Fish &amp; Chips &mdash; it&rsquo;s &lt;b&gt;'
>>> decode_entities("Fish &amp; Chips &mdash; it&rsquo;s &lt;b&gt;")
"Fish & Chips -- it's <b>"
>>> escape_rich("<em>x</em><script>y</script>")
'<em>x</em>&lt;script&gt;y&lt;/script&gt;'
"""

from __future__ import annotations

import html
import re

from markupsafe import escape

_TEXT_ESCAPES: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ("'", "&rsquo;"),
    ("--", "&mdash;"),
)
_ENTITY_OVERRIDES = {"&rsquo;": "'", "&mdash;": "--"}
_ENTITY_PATTERN = re.compile(r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

# Allow-listed inline tags as they look after escaping.
_RICH_TAG_PATTERN = re.compile(
    r"&lt;(?P<closing>/)?(?P<name>em|strong|a)"
    r"(?: href=\"(?P<href>[^\"]*)\"(?: target=\"(?P<target>[^\"]*)\")?)?&gt;"
)
RICH_TAGS = frozenset({"em", "strong", "a"})
LINK_REL = "noopener noreferrer"


def escape_text(value: str) -> str:
    """Escape a scalar text value for embedding as element content."""
    escaped = value
    for raw, entity in _TEXT_ESCAPES:
        escaped = escaped.replace(raw, entity)
    return escaped.replace("\n", "<br>")


def escape_attribute(value: str) -> str:
    """Escape a value for a double-quoted attribute."""
    return str(escape(value))


def escape_rich(value: str) -> str:
    """Escape rich text, restoring allow-listed inline markup.

    Parameters
    ----------
    value : str
        Text that may contain ``<em>``, ``<strong>``, and
        ``<a href="..." target="...">`` tags in exactly that canonical form.

    Returns
    -------
    str
        Escaped markup in which only the allow-listed tags are live. Links
        opened in a new browsing context gain ``rel="noopener noreferrer"``.
    """
    return _RICH_TAG_PATTERN.sub(_restore_rich_tag, escape_text(value))


def _restore_rich_tag(match: re.Match[str]) -> str:
    name = match.group("name")
    href = match.group("href")
    target = match.group("target")
    if match.group("closing"):
        return match.group(0) if href is not None else f"</{name}>"
    if name != "a":
        return match.group(0) if href is not None else f"<{name}>"
    if href is None:
        return match.group(0)
    return build_link(decode_entities(href), _decode_optional(target))


def _decode_optional(value: str | None) -> str | None:
    return None if value is None else decode_entities(value)


def build_link(href: str, target: str | None) -> str:
    """Return a live anchor opening tag for decoded ``href`` and ``target``."""
    attrs = f' href="{escape_attribute(href)}"'
    if target is not None:
        attrs += f' target="{escape_attribute(target)}" rel="{LINK_REL}"'
    return f"<a{attrs}>"


def decode_entities(text: str) -> str:
    """Decode character references in a single pass.

    ``&rsquo;`` and ``&mdash;`` map back to the ASCII sequences that
    :func:`escape_text` produced them from; every other reference decodes per
    the HTML5 table, and unknown references are left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        entity = match.group(0)
        override = _ENTITY_OVERRIDES.get(entity)
        if override is not None:
            return override
        return html.unescape(entity)

    return _ENTITY_PATTERN.sub(_replace, text)


__all__ = [
    "LINK_REL",
    "RICH_TAGS",
    "build_link",
    "decode_entities",
    "escape_attribute",
    "escape_rich",
    "escape_text",
]
