"""Declarative table of derived (decorated) fields.

Some fields are rendered as a deterministic decoration of their canonical
value: a forced line break in a title, a trailing arrow on a call-to-action,
typographic quotes around a testimonial, or a per-word wrapper used by the
reveal animation. Each decoration is registered here once as an
``(encode, decode)`` pair keyed by a path pattern, and both the renderer and
the extractor look fields up in the same table.

Pattern segments are literal field names, ``*`` (any list index) or ``$``
(the last index of the enclosing list).

Examples
--------
>>> transform = find_transform("approach.title", lambda _path: None)
>>> transform.encode("Our Approach Matters")
'Our<br>Approach Matters'
>>> transform.decode("Our\\nApproach Matters")
'Our Approach Matters'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc

from adlib_pages._constants import (
    ARROW_GLYPH,
    CLOSE_QUOTE,
    OPEN_QUOTE,
    PROVE_WORD_CLASS,
)
from adlib_pages.content.schema import is_index, join_path, split_path

from .escaping import escape_text

LengthLookup = cabc.Callable[[str], int | None]


@dc.dataclass(frozen=True, slots=True)
class FieldTransform:
    """A derived-field rule.

    Attributes
    ----------
    name : str
        Short identifier used in logs and tests.
    pattern : str
        Dotted path pattern selecting the decorated field(s).
    encode : Callable[[str], str]
        Canonical value to escaped inner markup.
    decode : Callable[[str], str]
        Decoded text content back to the canonical value.
    """

    name: str
    pattern: str
    encode: cabc.Callable[[str], str]
    decode: cabc.Callable[[str], str]

    def matches(self, path: str, length_of: LengthLookup) -> bool:
        """Return True when ``path`` is selected by this rule's pattern.

        ``length_of`` maps the dotted path of a list to its length and is
        only consulted for ``$`` segments.
        """
        expected = split_path(self.pattern)
        actual = split_path(path)
        if len(expected) != len(actual):
            return False
        for position, (want, got) in enumerate(zip(expected, actual, strict=True)):
            if want == "*":
                if not is_index(got):
                    return False
            elif want == "$":
                length = length_of(join_path(*actual[:position]))
                if not is_index(got) or length is None or int(got) != length - 1:
                    return False
            elif want != got:
                return False
        return True


def _break_after_first_word(value: str) -> str:
    first, _, rest = value.partition(" ")
    if not rest:
        return escape_text(value)
    return f"{escape_text(first)}<br>{escape_text(rest)}"


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def _append_arrow(value: str) -> str:
    return f"{escape_text(value)} &rarr;"


def _strip_arrow(text: str) -> str:
    if text.endswith(ARROW_GLYPH):
        return text[: -len(ARROW_GLYPH)].rstrip()
    return text


def _quote(value: str) -> str:
    return f"&ldquo;{escape_text(value)}&rdquo;"


def _unquote(text: str) -> str:
    return text.removeprefix(OPEN_QUOTE).removesuffix(CLOSE_QUOTE)


def _wrap_words(value: str) -> str:
    return " ".join(
        f'<span class="{PROVE_WORD_CLASS}">{escape_text(word)}</span>'
        for word in value.split(" ")
    )


def _identity(text: str) -> str:
    return text


TRANSFORMS: tuple[FieldTransform, ...] = (
    FieldTransform(
        name="title-break",
        pattern="approach.title",
        encode=_break_after_first_word,
        decode=_collapse_whitespace,
    ),
    FieldTransform(
        name="cta-arrow",
        pattern="mission.ctaLink",
        encode=_append_arrow,
        decode=_strip_arrow,
    ),
    FieldTransform(
        name="quote-marks",
        pattern="testimonials.*.quote",
        encode=_quote,
        decode=_unquote,
    ),
    FieldTransform(
        name="prove-words",
        pattern="mission.ctaQuestions.$",
        encode=_wrap_words,
        decode=_identity,
    ),
)


def find_transform(path: str, length_of: LengthLookup) -> FieldTransform | None:
    """Return the first transform whose pattern selects ``path``."""
    for transform in TRANSFORMS:
        if transform.matches(path, length_of):
            return transform
    return None


__all__ = ["TRANSFORMS", "FieldTransform", "LengthLookup", "find_transform"]
