"""Recover a content document from previously rendered, annotated markup.

The extractor walks the tag stream produced by :class:`TagScanner` once. Every
element carrying a path marker contributes one leaf value, decoded according
to its type marker; list-item markers contribute the identity of list
occurrences even when an item has no annotated leaves of its own. All writes
go through a :class:`DocumentBuilder`, which resolves every path against the
static schema, so container types come from declared structure instead of
from the spelling of path segments.

Examples
--------
>>> from adlib_pages.codec import extract, render
>>> extract(render(document)) == document  # doctest: +SKIP
True
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import re
import typing as typ

from adlib_pages._constants import (
    INDEX_ATTR,
    LIST_ATTR,
    MIRROR_ATTR,
    PATH_ATTR,
    TYPE_ATTR,
    TYPE_IMAGE,
    TYPE_NUMBER,
    TYPE_RICHTEXT,
    TYPE_VIDEO,
    VALUE_ATTR,
)
from adlib_pages.content import ContentDocument
from adlib_pages.content.schema import (
    CONTENT_SCHEMA,
    Leaf,
    Node,
    Record,
    SchemaViolation,
    Sequence,
    is_index,
    join_path,
    resolve_path,
    split_path,
)

from .fragments import rich_content, text_content
from .scanner import MarkupSyntaxError, Tag, find_matching_close, scan_tags
from .transforms import find_transform

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


class MalformedMarkup(ValueError):
    """Raised when annotated markup cannot be decoded into a document.

    Attributes
    ----------
    path : str | None
        Dotted path of the offending annotation, when one is known.
    detail : str
        Description of the failure without the path prefix.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        self.detail = message
        super().__init__(f"{path}: {message}" if path else message)


class DocumentBuilder:
    """Collect decoded leaves and list markers, then build a document.

    The builder is the only place that writes extracted values. It refuses
    duplicate annotations, requires list indices to be contiguous from zero,
    and applies the derived-field decoders once every list length is known.
    """

    def __init__(self) -> None:
        self._values: dict[str, object] = {}
        self._items: dict[str, set[int]] = {}
        self._mirrors: list[tuple[str, str]] = []

    def add_value(self, path: str, value: object) -> None:
        """Record the decoded value of the leaf at ``path``."""
        node = _resolve(path)
        if not isinstance(node, Leaf):
            msg = "path marker must address a leaf value"
            raise MalformedMarkup(msg, path=path)
        if path in self._values:
            msg = "field is annotated more than once"
            raise MalformedMarkup(msg, path=path)
        self._values[path] = value
        self._note_indices(path)

    def add_item(self, list_path: str, index: str) -> None:
        """Record that occurrence ``index`` of the list at ``list_path`` exists."""
        if not isinstance(_resolve(list_path), Sequence):
            msg = "list marker must address a list"
            raise MalformedMarkup(msg, path=list_path)
        if not is_index(index):
            msg = f"invalid list index {index!r}"
            raise MalformedMarkup(msg, path=list_path)
        self._items.setdefault(list_path, set()).add(int(index))
        self._note_indices(list_path)

    def add_mirror(self, path: str, text: str) -> None:
        """Record display text that should repeat the field at ``path``."""
        self._mirrors.append((path, text))

    def build(self) -> ContentDocument:
        """Return the finished, validated document.

        Raises
        ------
        MalformedMarkup
            If list indices have gaps or the collected values do not satisfy
            the schema (for example a required field was never annotated).
        """
        for list_path, indices in self._items.items():
            expected = set(range(len(indices)))
            if indices != expected:
                missing = min(expected - indices) if expected - indices else None
                msg = f"list indices are not contiguous (missing {missing})"
                raise MalformedMarkup(msg, path=list_path)
        tree: dict[str, typ.Any] = {}
        for path, value in self._values.items():
            _assign(tree, split_path(path), self._decode(path, value))
        for list_path, indices in self._items.items():
            node = _resolve(list_path)
            if not isinstance(node, Sequence):
                continue
            for index in sorted(indices):
                item_path = join_path(list_path, index)
                if isinstance(node.item, Record):
                    _assign(tree, split_path(item_path), None)
                elif item_path not in self._values:
                    msg = "list item carries no annotated value"
                    raise MalformedMarkup(msg, path=item_path)
        try:
            document = ContentDocument.from_mapping(_materialize(tree), total=True)
        except SchemaViolation as exc:
            raise MalformedMarkup(exc.detail, path=exc.path or None) from exc
        self._check_mirrors(document)
        return document

    def _decode(self, path: str, value: object) -> object:
        if not isinstance(value, str):
            return value
        transform = find_transform(path, self._length_of)
        if transform is None:
            return value
        logger.debug("decoding %s with %s", path, transform.name)
        return transform.decode(value)

    def _length_of(self, list_path: str) -> int | None:
        indices = self._items.get(list_path)
        return len(indices) if indices else None

    def _note_indices(self, path: str) -> None:
        """Register every list occurrence implied by the segments of ``path``."""
        segments = split_path(path)
        for position, segment in enumerate(segments):
            if position and is_index(segment):
                parent = join_path(*segments[:position])
                self._items.setdefault(parent, set()).add(int(segment))

    def _check_mirrors(self, document: ContentDocument) -> None:
        for path, text in self._mirrors:
            try:
                canonical = document.get(path)
            except SchemaViolation:
                logger.warning("mirror of %s has no canonical field", path)
                continue
            if text != canonical:
                logger.warning(
                    "mirror of %s shows %r but the field holds %r",
                    path,
                    text,
                    canonical,
                )


def _resolve(path: str) -> Node:
    try:
        return resolve_path(path)
    except SchemaViolation as exc:
        raise MalformedMarkup(exc.detail, path=exc.path or path) from exc


def _assign(tree: dict[str, typ.Any], segments: tuple[str, ...], value: object) -> None:
    """Store ``value`` at ``segments``; sequences are index-keyed until built.

    A ``None`` value only creates the container for a record list item.
    """
    node: Node = CONTENT_SCHEMA
    container: typ.Any = tree
    for position, segment in enumerate(segments):
        match node:
            case Record():
                spec = node.field(segment)
                node = spec.node if spec is not None else node
                key: str | int = segment
            case Sequence():
                node = node.item
                key = int(segment)
            case _:  # pragma: no cover - paths are resolved before assignment
                break
        if position == len(segments) - 1:
            if value is None:
                container.setdefault(key, {})
            else:
                container[key] = value
            return
        container = container.setdefault(key, {})


def _materialize(value: object) -> object:
    """Turn index-keyed containers into ordered lists."""
    if not isinstance(value, cabc.Mapping):
        return value
    if value and all(isinstance(key, int) for key in value):
        return [_materialize(value[index]) for index in sorted(value)]
    return {key: _materialize(item) for key, item in value.items()}


class MarkupExtractor:
    """Decode annotated elements from one markup string."""

    def __init__(self, markup: str) -> None:
        self.markup = markup
        try:
            self.tags = scan_tags(markup)
        except MarkupSyntaxError as exc:
            raise MalformedMarkup(str(exc), path=self._path_near(exc.offset)) from exc

    def extract(self) -> ContentDocument:
        """Return the document encoded in the markup."""
        builder = DocumentBuilder()
        for index, tag in enumerate(self.tags):
            if tag.closing:
                continue
            list_path = tag.get(LIST_ATTR)
            if list_path is not None:
                builder.add_item(list_path, tag.get(INDEX_ATTR, "") or "")
            path = tag.get(PATH_ATTR)
            if path is not None:
                builder.add_value(path, self._leaf_value(index, tag, path))
            mirror = tag.get(MIRROR_ATTR)
            if mirror is not None:
                builder.add_mirror(mirror, text_content(self._inner(index, tag, mirror)))
        document = builder.build()
        logger.debug("extracted document from %d tags", len(self.tags))
        return document

    def _leaf_value(self, index: int, tag: Tag, path: str) -> object:
        kind = tag.get(TYPE_ATTR)
        if kind == TYPE_NUMBER:
            return self._number(tag, path)
        if kind in (TYPE_IMAGE, TYPE_VIDEO):
            src = tag.get("src")
            if src is None:
                msg = f"{kind} element has no src attribute"
                raise MalformedMarkup(msg, path=path)
            return src.strip()
        if kind == TYPE_RICHTEXT:
            return rich_content(self._inner(index, tag, path))
        if kind is not None:
            logger.debug("unknown type %r at %s decoded as text", kind, path)
        return text_content(self._inner(index, tag, path))

    def _number(self, tag: Tag, path: str) -> int:
        raw = tag.get(VALUE_ATTR)
        if raw is None or not _INTEGER_PATTERN.fullmatch(raw.strip()):
            msg = f"numeric field needs an integer {VALUE_ATTR} attribute"
            raise MalformedMarkup(msg, path=path)
        return int(raw.strip())

    def _inner(self, index: int, tag: Tag, path: str) -> str:
        if tag.is_void:
            msg = f"<{tag.name}> element cannot hold text content"
            raise MalformedMarkup(msg, path=path)
        close = find_matching_close(self.tags, index)
        if close is None:
            msg = f"no closing </{tag.name}> tag"
            raise MalformedMarkup(msg, path=path)
        return self.markup[tag.end : self.tags[close].start]

    def _path_near(self, offset: int) -> str | None:
        """Return the path marker of the tag opened at ``offset``, if readable."""
        end = self.markup.find("\n", offset)
        snippet = self.markup[offset : end if end != -1 else None]
        match = re.search(rf'{PATH_ATTR}="([^"]*)"', snippet)
        return match.group(1) if match else None


def extract(markup: str) -> ContentDocument:
    """Return the content document encoded in ``markup``.

    Parameters
    ----------
    markup : str
        A page produced by :func:`~adlib_pages.codec.render`, possibly edited
        by hand.

    Returns
    -------
    ContentDocument
        The decoded document with derived fields reduced to their canonical
        values and optional fields defaulted.

    Raises
    ------
    MalformedMarkup
        If an annotated element is unterminated, has no matching close tag,
        addresses a path unknown to the schema, or the annotations do not add
        up to a complete document. The error's ``path`` names the field.
    """
    return MarkupExtractor(markup).extract()


__all__ = [
    "DocumentBuilder",
    "MalformedMarkup",
    "MarkupExtractor",
    "extract",
]
