"""Static shape description of the structured content document.

The schema is the single authority on which fields exist, which leaves carry
an explicit annotation type, and which fields may be omitted. Validation,
rendering, and extraction all walk the same node tree, so container types are
always driven by declared structure rather than guessed from path spelling.

Examples
--------
>>> from adlib_pages.content.schema import resolve_path
>>> resolve_path("services.2.deliverables.0").kind
'text'
>>> resolve_path("mission.stats.0.number").kind
'number'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from adlib_pages._constants import (
    TYPE_IMAGE,
    TYPE_NUMBER,
    TYPE_RICHTEXT,
    TYPE_TEXT,
    TYPE_VIDEO,
)

_INDEX_PATTERN = re.compile(r"0|[1-9][0-9]*")


class SchemaViolation(ValueError):
    """Raised when a content document or path does not satisfy the schema."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.detail = message
        super().__init__(f"{path or '<document>'}: {message}")


class _Missing:
    """Sentinel type marking a field without a default."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: typ.Final = _Missing()


@dc.dataclass(frozen=True, slots=True)
class Leaf:
    """A scalar value; ``kind`` selects its encoding and annotation type."""

    kind: str = TYPE_TEXT


@dc.dataclass(frozen=True, slots=True)
class Sequence:
    """An ordered list whose display order is significant."""

    item: Node
    min_items: int = 0


@dc.dataclass(frozen=True, slots=True)
class FieldSpec:
    """A named member of a record with an optional default."""

    key: str
    node: Node
    default: object = MISSING

    @property
    def required(self) -> bool:
        """Return True when the field has no declared default."""
        return self.default is MISSING


@dc.dataclass(frozen=True, slots=True)
class Record:
    """A mapping with a fixed, ordered set of fields."""

    fields: tuple[FieldSpec, ...]

    def field(self, key: str) -> FieldSpec | None:
        """Return the field spec named ``key`` or None."""
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    @property
    def keys(self) -> tuple[str, ...]:
        """Return the field names in canonical order."""
        return tuple(spec.key for spec in self.fields)


Node: typ.TypeAlias = "Leaf | Sequence | Record"

TEXT = Leaf(TYPE_TEXT)
RICHTEXT = Leaf(TYPE_RICHTEXT)
NUMBER = Leaf(TYPE_NUMBER)
IMAGE = Leaf(TYPE_IMAGE)
VIDEO = Leaf(TYPE_VIDEO)


def _record(*fields: FieldSpec) -> Record:
    return Record(fields=tuple(fields))


def _field(key: str, node: Node, default: object = MISSING) -> FieldSpec:
    return FieldSpec(key=key, node=node, default=default)


CONTENT_SCHEMA = _record(
    _field(
        "hero",
        _record(
            _field("headline", Sequence(TEXT, min_items=1)),
            _field("cta", TEXT),
            _field("videoWebm", VIDEO, ""),
            _field("videoMp4", VIDEO, ""),
        ),
    ),
    _field(
        "testimonials",
        Sequence(
            _record(
                _field("quote", TEXT),
                _field("name", TEXT),
                _field("title", TEXT),
                _field("photo", IMAGE, ""),
            )
        ),
    ),
    _field("marquee", Sequence(TEXT)),
    _field(
        "mission",
        _record(
            _field("lead", TEXT),
            _field("body", Sequence(TEXT)),
            _field(
                "stats",
                Sequence(_record(_field("number", NUMBER), _field("label", TEXT))),
            ),
            _field("ctaQuestions", Sequence(TEXT, min_items=1)),
            _field("ctaLink", TEXT),
        ),
    ),
    _field(
        "approach",
        _record(
            _field("title", TEXT),
            _field("intro", TEXT),
            _field("principlesLead", TEXT),
            _field("principles", Sequence(TEXT)),
            _field(
                "pillars",
                Sequence(_record(_field("title", TEXT), _field("description", TEXT))),
            ),
        ),
    ),
    _field(
        "services",
        Sequence(
            _record(
                _field("name", TEXT),
                _field("description", TEXT),
                _field("listHeading", TEXT),
                _field("deliverables", Sequence(TEXT)),
            )
        ),
    ),
    _field(
        "clients",
        Sequence(
            _record(
                _field("category", TEXT),
                _field(
                    "clients",
                    Sequence(_record(_field("name", TEXT), _field("location", TEXT))),
                ),
            )
        ),
    ),
    _field(
        "about",
        _record(
            _field("name", TEXT),
            _field("role", TEXT),
            _field("lead", TEXT),
            _field("bio", Sequence(RICHTEXT)),
            _field("photo", IMAGE, ""),
        ),
    ),
    _field(
        "contact",
        _record(
            _field("intro", TEXT),
            _field("phone", TEXT),
            _field("email", TEXT),
            _field("location", TEXT),
        ),
    ),
    _field("footer", _record(_field("tagline", TEXT))),
)
"""Shape of the whole content document, in canonical section order."""

SECTIONS: tuple[str, ...] = CONTENT_SCHEMA.keys


def is_index(segment: str) -> bool:
    """Return True when ``segment`` is a canonical zero-based list index."""
    return _INDEX_PATTERN.fullmatch(segment) is not None


def split_path(path: str) -> tuple[str, ...]:
    """Split a dotted path into its segments, rejecting empty segments."""
    segments = tuple(path.split("."))
    if not path or any(not segment for segment in segments):
        raise SchemaViolation(path, "malformed dotted path")
    return segments


def join_path(*segments: str | int) -> str:
    """Join field names and indices into a dotted path."""
    return ".".join(str(segment) for segment in segments if segment != "")


def resolve_path(path: str, root: Node = CONTENT_SCHEMA) -> Node:
    """Return the schema node addressed by ``path``.

    Parameters
    ----------
    path : str
        Dotted path of field names and zero-based indices, for example
        ``services.2.deliverables.0``.
    root : Node, optional
        Node the path is resolved against; defaults to the document schema.

    Returns
    -------
    Node
        The addressed leaf, sequence, or record node.

    Raises
    ------
    SchemaViolation
        If a segment names an unknown field, a non-index segment addresses a
        sequence, or the path continues past a leaf.
    """
    node = root
    walked: list[str] = []
    for segment in split_path(path):
        walked.append(segment)
        match node:
            case Record():
                spec = node.field(segment)
                if spec is None:
                    raise SchemaViolation(join_path(*walked), "unknown field")
                node = spec.node
            case Sequence():
                if not is_index(segment):
                    raise SchemaViolation(join_path(*walked), "expected a list index")
                node = node.item
            case _:
                raise SchemaViolation(
                    join_path(*walked), "path continues past a leaf value"
                )
    return node


__all__ = [
    "CONTENT_SCHEMA",
    "IMAGE",
    "MISSING",
    "NUMBER",
    "RICHTEXT",
    "SECTIONS",
    "TEXT",
    "VIDEO",
    "FieldSpec",
    "Leaf",
    "Node",
    "Record",
    "SchemaViolation",
    "Sequence",
    "is_index",
    "join_path",
    "resolve_path",
    "split_path",
]
