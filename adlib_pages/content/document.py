"""Immutable content document values and their JSON persistence.

A :class:`ContentDocument` is only ever produced by validating a JSON-shaped
payload against :data:`~adlib_pages.content.schema.CONTENT_SCHEMA`. The
validation step is also where the documented normalizations happen: string
leaves lose surrounding whitespace, optional fields receive their declared
defaults, and every record is re-keyed into canonical schema order so the
serialized form is stable and diffable.

Examples
--------
>>> from adlib_pages.content import ContentDocument
>>> doc = ContentDocument.from_mapping(payload)  # doctest: +SKIP
>>> doc.get("services.0.name")  # doctest: +SKIP
'Strategic Planning'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import json
import types
import typing as typ

from adlib_pages._constants import TYPE_NUMBER

from .schema import (
    CONTENT_SCHEMA,
    Leaf,
    Node,
    Record,
    SchemaViolation,
    Sequence,
    join_path,
    split_path,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True, eq=False)
class ContentDocument:
    """A validated, frozen content document.

    Attributes
    ----------
    sections : Mapping[str, Any]
        Read-only mapping of section name to section value. Nested records
        are read-only mappings and nested lists are tuples.
    """

    sections: cabc.Mapping[str, typ.Any]

    @classmethod
    def from_mapping(
        cls, payload: cabc.Mapping[str, typ.Any], *, total: bool = False
    ) -> ContentDocument:
        """Validate ``payload`` and return it as a frozen document.

        Parameters
        ----------
        payload : Mapping[str, Any]
            JSON-shaped content tree keyed by section name.
        total : bool, optional
            When True, absent list fields are treated as empty lists. The
            extractor uses this because an empty list leaves no markers in
            the rendered markup.

        Returns
        -------
        ContentDocument
            Normalized document in canonical field order.

        Raises
        ------
        SchemaViolation
            If a required field is missing, an unknown field is present, a
            leaf has the wrong type, or a list is shorter than allowed.
        """
        normalized = _normalize(CONTENT_SCHEMA, payload, (), total=total)
        return cls(sections=_freeze(normalized))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, section: str) -> typ.Any:
        return self.sections[section]

    def get(self, path: str) -> typ.Any:
        """Return the value stored at dotted ``path``."""
        value: typ.Any = self.sections
        for segment in split_path(path):
            try:
                if isinstance(value, tuple):
                    value = value[int(segment)]
                else:
                    value = value[segment]
            except (KeyError, IndexError, ValueError) as exc:
                raise SchemaViolation(path, "no value at this path") from exc
        return value

    def to_dict(self) -> dict[str, typ.Any]:
        """Return a mutable, JSON-serializable copy of the document."""
        return typ.cast("dict[str, typ.Any]", _thaw(self.sections))


def _normalize(
    node: Node, value: object, path: tuple[str, ...], *, total: bool
) -> object:
    """Validate ``value`` against ``node`` and return its normalized form."""
    location = join_path(*path)
    match node:
        case Record():
            if not isinstance(value, cabc.Mapping):
                raise SchemaViolation(location, "expected a mapping")
            unknown = sorted(set(value) - set(node.keys))
            if unknown:
                raise SchemaViolation(join_path(*path, unknown[0]), "unknown field")
            result: dict[str, object] = {}
            for spec in node.fields:
                child_path = (*path, spec.key)
                if spec.key in value:
                    result[spec.key] = _normalize(
                        spec.node, value[spec.key], child_path, total=total
                    )
                elif not spec.required:
                    result[spec.key] = spec.default
                elif total and isinstance(spec.node, Sequence):
                    result[spec.key] = _normalize(
                        spec.node, [], child_path, total=total
                    )
                else:
                    raise SchemaViolation(
                        join_path(*child_path), "missing required field"
                    )
            return result
        case Sequence():
            if isinstance(value, str | bytes) or not isinstance(
                value, cabc.Sequence
            ):
                raise SchemaViolation(location, "expected a list")
            if len(value) < node.min_items:
                msg = f"expected at least {node.min_items} item(s)"
                raise SchemaViolation(location, msg)
            return [
                _normalize(node.item, item, (*path, str(index)), total=total)
                for index, item in enumerate(value)
            ]
        case Leaf(kind=kind):
            if kind == TYPE_NUMBER:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise SchemaViolation(location, "expected an integer")
                return value
            if not isinstance(value, str):
                raise SchemaViolation(location, f"expected a string for {kind}")
            return value.strip()
    msg = f"unsupported schema node {node!r}"  # pragma: no cover - closed union
    raise TypeError(msg)


def _freeze(value: object) -> object:
    if isinstance(value, cabc.Mapping):
        return types.MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: object) -> object:
    if isinstance(value, cabc.Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple | list):
        return [_thaw(item) for item in value]
    return value


def load_content(path: Path) -> ContentDocument:
    """Read and validate the JSON content document stored at ``path``."""
    if not path.exists():
        msg = f"Content file '{path}' not found."
        raise FileNotFoundError(msg)
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        msg = "Top-level content structure must be a mapping."
        raise TypeError(msg)
    return ContentDocument.from_mapping(payload)


def dump_content(content: ContentDocument | cabc.Mapping[str, typ.Any]) -> str:
    """Serialize a document (or raw mapping) as indented JSON text.

    Raw mappings are written as given; the admin save path relies on this to
    persist whatever the editor submitted without reshaping it.
    """
    payload = content.to_dict() if isinstance(content, ContentDocument) else content
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


__all__ = ["ContentDocument", "dump_content", "load_content"]
