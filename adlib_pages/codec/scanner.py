"""Tag-level state machine over rendered markup.

The extractor never pattern-matches HTML. Instead :class:`TagScanner` walks
the markup once, moving between a handful of explicit states:

``content``
    Ordinary character data; advance to the next ``<``.
``tag-open``
    A ``<`` was seen; decide between a comment, a declaration, an element
    tag, or a stray ``<`` in text.
``tag``
    Read the tag name and its attributes. Quoted attribute values may contain
    ``>`` without ending the tag.
``comment`` / ``declaration``
    Skip ``<!-- ... -->`` and ``<!DOCTYPE ...>`` style constructs.
``raw-text``
    Inside ``script``/``style``/``textarea``/``title`` the content is opaque
    until the matching close tag.

Each element tag is yielded as a :class:`Tag` token carrying its character
offsets, so inner content is always a slice between the end of an opening tag
and the start of its matching close tag. :func:`find_matching_close` performs
the same-name depth matching that makes nested ``<li>`` inside ``<li>`` (or
``<div>`` inside ``<div>``) safe.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import typing as typ

from .escaping import decode_entities

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)
RAW_TEXT_ELEMENTS = frozenset({"script", "style", "textarea", "title"})
_WHITESPACE = " \t\n\r\f"


class MarkupSyntaxError(ValueError):
    """Raised when the scanner meets an unterminated tag or comment."""

    def __init__(self, message: str, offset: int) -> None:
        self.offset = offset
        super().__init__(f"{message} at offset {offset}")


class _State(enum.Enum):
    CONTENT = "content"
    TAG_OPEN = "tag-open"
    TAG = "tag"
    COMMENT = "comment"
    DECLARATION = "declaration"
    RAW_TEXT = "raw-text"


@dc.dataclass(frozen=True, slots=True)
class Tag:
    """An element tag located in markup.

    Attributes
    ----------
    name : str
        Lower-cased element name.
    start : int
        Offset of the opening ``<``.
    end : int
        Offset just past the closing ``>``.
    closing : bool
        True for ``</name>`` tags.
    self_closing : bool
        True when the tag ends with ``/>``.
    attributes : Mapping[str, str]
        Attribute values with character references decoded. Attributes
        without a value map to an empty string.
    """

    name: str
    start: int
    end: int
    closing: bool = False
    self_closing: bool = False
    attributes: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    @property
    def is_void(self) -> bool:
        """Return True when the element can have no content."""
        return self.self_closing or self.name in VOID_ELEMENTS

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the decoded value of attribute ``name``."""
        return self.attributes.get(name, default)


class TagScanner:
    """Iterate over the element tags of a markup string."""

    def __init__(self, markup: str) -> None:
        self.markup = markup

    def __iter__(self) -> cabc.Iterator[Tag]:
        markup = self.markup
        length = len(markup)
        state = _State.CONTENT
        position = 0
        raw_name = ""
        while position < length:
            match state:
                case _State.CONTENT:
                    position = markup.find("<", position)
                    if position == -1:
                        return
                    state = _State.TAG_OPEN
                case _State.TAG_OPEN:
                    state, position = self._classify(position)
                case _State.COMMENT:
                    end = markup.find("-->", position + 4)
                    if end == -1:
                        msg = "unterminated comment"
                        raise MarkupSyntaxError(msg, position)
                    position = end + 3
                    state = _State.CONTENT
                case _State.DECLARATION:
                    end = markup.find(">", position)
                    if end == -1:
                        msg = "unterminated declaration"
                        raise MarkupSyntaxError(msg, position)
                    position = end + 1
                    state = _State.CONTENT
                case _State.TAG:
                    tag = self._read_tag(position)
                    yield tag
                    position = tag.end
                    state = _State.CONTENT
                    if (
                        not tag.closing
                        and not tag.self_closing
                        and tag.name in RAW_TEXT_ELEMENTS
                    ):
                        raw_name = tag.name
                        state = _State.RAW_TEXT
                case _State.RAW_TEXT:
                    close = markup.lower().find(f"</{raw_name}", position)
                    if close == -1:
                        msg = f"unterminated <{raw_name}> element"
                        raise MarkupSyntaxError(msg, position)
                    position = close
                    state = _State.TAG

    def _classify(self, position: int) -> tuple[_State, int]:
        """Decide what kind of construct starts at the ``<`` at ``position``."""
        markup = self.markup
        if markup.startswith("<!--", position):
            return _State.COMMENT, position
        if markup.startswith(("<!", "<?"), position):
            return _State.DECLARATION, position
        following = markup[position + 1 : position + 2]
        if following == "/" or following.isalpha():
            return _State.TAG, position
        # A bare "<" in character data is text.
        return _State.CONTENT, position + 1

    def _read_tag(self, start: int) -> Tag:
        """Read one element tag starting at ``start`` (which holds ``<``)."""
        markup = self.markup
        length = len(markup)
        index = start + 1
        closing = markup.startswith("/", index)
        if closing:
            index += 1
        name_start = index
        while index < length and markup[index] not in _WHITESPACE + "/>":
            index += 1
        name = markup[name_start:index].lower()
        attributes: dict[str, str] = {}
        self_closing = False
        while True:
            if index >= length:
                msg = f"unterminated <{name}> tag"
                raise MarkupSyntaxError(msg, start)
            char = markup[index]
            if char in _WHITESPACE:
                index += 1
                continue
            if char == ">":
                index += 1
                break
            if char == "/":
                self_closing = markup.startswith("/>", index)
                index += 1
                continue
            attr_name, value, index = self._read_attribute(index, start, name)
            attributes.setdefault(attr_name, value)
        return Tag(
            name=name,
            start=start,
            end=index,
            closing=closing,
            self_closing=self_closing,
            attributes=attributes,
        )

    def _read_attribute(
        self, index: int, tag_start: int, tag_name: str
    ) -> tuple[str, str, int]:
        """Read ``name``, ``name=value`` or ``name="value"`` at ``index``."""
        markup = self.markup
        length = len(markup)
        name_start = index
        while index < length and markup[index] not in _WHITESPACE + "=/>":
            index += 1
        attr_name = markup[name_start:index].lower()
        lookahead = index
        while lookahead < length and markup[lookahead] in _WHITESPACE:
            lookahead += 1
        if lookahead >= length or markup[lookahead] != "=":
            return attr_name, "", index
        index = lookahead + 1
        while index < length and markup[index] in _WHITESPACE:
            index += 1
        if index >= length:
            msg = f"unterminated <{tag_name}> tag"
            raise MarkupSyntaxError(msg, tag_start)
        quote = markup[index]
        if quote in "\"'":
            close = markup.find(quote, index + 1)
            if close == -1:
                msg = f"unterminated attribute value in <{tag_name}> tag"
                raise MarkupSyntaxError(msg, tag_start)
            return attr_name, decode_entities(markup[index + 1 : close]), close + 1
        value_start = index
        while index < length and markup[index] not in _WHITESPACE + ">":
            index += 1
        return attr_name, decode_entities(markup[value_start:index]), index


def scan_tags(markup: str) -> list[Tag]:
    """Return every element tag in ``markup`` in document order."""
    return list(TagScanner(markup))


def find_matching_close(tags: typ.Sequence[Tag], index: int) -> int | None:
    """Return the position in ``tags`` of the tag closing ``tags[index]``.

    Only tags with the same name affect the depth counter: a nested opening
    tag of that name increments it and each matching close decrements it.
    Returns None when the depth never returns to zero.
    """
    opening = tags[index]
    depth = 1
    for position in range(index + 1, len(tags)):
        tag = tags[position]
        if tag.name != opening.name:
            continue
        if tag.closing:
            depth -= 1
            if depth == 0:
                return position
        elif not tag.self_closing:
            depth += 1
    return None


__all__ = [
    "RAW_TEXT_ELEMENTS",
    "VOID_ELEMENTS",
    "MarkupSyntaxError",
    "Tag",
    "TagScanner",
    "find_matching_close",
    "scan_tags",
]
