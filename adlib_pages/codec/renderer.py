"""Render a content document into annotated homepage markup.

Rendering is a pure function of the document and the site chrome: the Jinja
template only arranges markup, while :class:`FieldRenderer` owns every
encoding decision the extractor later has to invert. For each leaf it emits
the ``data-adlib-cms`` path marker, the ``data-adlib-type`` tag when the
schema declares a non-text kind, and for numeric leaves the authoritative
``data-target`` value next to a zero-initialized display. List item
containers receive ``data-adlib-list``/``data-adlib-index`` markers.

Typical usage:

>>> from adlib_pages.codec import render
>>> html = render(document)  # doctest: +SKIP
>>> html.startswith("<!DOCTYPE html>")  # doctest: +SKIP
True
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import re
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from markupsafe import Markup

from adlib_pages._constants import (
    INDEX_ATTR,
    LIST_ATTR,
    MIRROR_ATTR,
    PATH_ATTR,
    TYPE_ATTR,
    TYPE_IMAGE,
    TYPE_NUMBER,
    TYPE_RICHTEXT,
    TYPE_TAGS,
    TYPE_VIDEO,
    VALUE_ATTR,
)
from adlib_pages.config.models import SiteChrome
from adlib_pages.content import ContentDocument
from adlib_pages.content.schema import (
    Leaf,
    SchemaViolation,
    is_index,
    join_path,
    resolve_path,
    split_path,
)

from .escaping import escape_attribute, escape_rich, escape_text
from .transforms import find_transform

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "home_page.jinja"
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


class FieldRenderer:
    """Template helper that encodes and annotates document fields."""

    def __init__(self, document: ContentDocument) -> None:
        self.document = document

    def attrs(self, path: str) -> Markup:
        """Return the annotation attributes for the leaf at ``path``."""
        leaf = self._leaf(path)
        parts = [f'{PATH_ATTR}="{escape_attribute(path)}"']
        if leaf.kind in TYPE_TAGS:
            parts.append(f'{TYPE_ATTR}="{leaf.kind}"')
        if leaf.kind == TYPE_NUMBER:
            parts.append(f'{VALUE_ATTR}="{int(self.document.get(path))}"')
        return Markup(" " + " ".join(parts))

    def html(self, path: str) -> Markup:
        """Return the encoded inner markup for the leaf at ``path``."""
        leaf = self._leaf(path)
        value = self.document.get(path)
        if leaf.kind == TYPE_NUMBER:
            return Markup("0")
        if leaf.kind in (TYPE_IMAGE, TYPE_VIDEO):
            msg = f"media reference '{path}' has no inner content"
            raise SchemaViolation(path, msg)
        transform = find_transform(path, self._length_of)
        if transform is not None:
            return Markup(transform.encode(value))
        if leaf.kind == TYPE_RICHTEXT:
            return Markup(escape_rich(value))
        return Markup(escape_text(value))

    def media(self, path: str) -> Markup:
        """Return ``src`` plus annotation attributes for a media reference."""
        value = self.document.get(path)
        return Markup(f' src="{escape_attribute(value)}"') + self.attrs(path)

    def item(self, list_path: str, index: int) -> Markup:
        """Return the list-identity and index markers for a list item."""
        return Markup(
            f' {LIST_ATTR}="{escape_attribute(list_path)}" {INDEX_ATTR}="{int(index)}"'
        )

    def mirror(self, path: str) -> Markup:
        """Return the marker for an element repeating the field at ``path``."""
        self._leaf(path)
        return Markup(f' {MIRROR_ATTR}="{escape_attribute(path)}"')

    def element(
        self,
        tag: str,
        path: str,
        *,
        class_: str | None = None,
        item: bool = False,
    ) -> Markup:
        """Return a complete annotated element holding the leaf at ``path``.

        Parameters
        ----------
        tag : str
            Element name to emit.
        path : str
            Dotted path of the leaf.
        class_ : str, optional
            Presentation classes for the element.
        item : bool, optional
            When True the element is itself a list item and also carries the
            list-identity and index markers derived from ``path``.
        """
        attributes = Markup("")
        if class_:
            attributes += Markup(f' class="{escape_attribute(class_)}"')
        attributes += self.attrs(path)
        if item:
            *parent, index = split_path(path)
            if not is_index(index):
                raise SchemaViolation(path, "list item path must end in an index")
            attributes += self.item(join_path(*parent), int(index))
        return Markup(f"<{tag}") + attributes + Markup(">") + self.html(path) + Markup(
            f"</{tag}>"
        )

    def _leaf(self, path: str) -> Leaf:
        node = resolve_path(path)
        if not isinstance(node, Leaf):
            raise SchemaViolation(path, "expected a leaf value")
        return node

    def _length_of(self, path: str) -> int | None:
        try:
            value = self.document.get(path)
        except SchemaViolation:
            return None
        return len(value) if isinstance(value, tuple) else None


def initials(name: str) -> str:
    """Return the avatar initials for ``name`` (first and last word)."""
    parts = name.split()
    if not parts:
        return ""
    if len(parts) < 2:
        return parts[0][0].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def phone_digits(phone: str) -> str:
    """Return only the digits of ``phone`` for ``tel:`` links."""
    return re.sub(r"\D", "", phone)


class ContentRenderer:
    """Render documents through the homepage template."""

    def __init__(self, *, templates_dir: Path | None = None) -> None:
        """Configure the Jinja environment and load the homepage template.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing ``home_page.jinja``. Defaults to the
            package's ``templates`` directory.
        """
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["initials"] = initials
        self.env.filters["phone_digits"] = phone_digits
        self.template = self.env.get_template(TEMPLATE_NAME)

    def render(
        self,
        document: ContentDocument | cabc.Mapping[str, typ.Any],
        chrome: SiteChrome | None = None,
    ) -> str:
        """Return the annotated page for ``document``.

        Raises
        ------
        SchemaViolation
            If ``document`` is a raw mapping that does not satisfy the schema.
        """
        if not isinstance(document, ContentDocument):
            document = ContentDocument.from_mapping(document)
        context = {
            "content": document.sections,
            "f": FieldRenderer(document),
            "chrome": chrome or SiteChrome(),
        }
        html = self.template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        logger.debug("rendered %d characters of markup", len(html))
        return html


def render(
    document: ContentDocument | cabc.Mapping[str, typ.Any],
    chrome: SiteChrome | None = None,
    *,
    templates_dir: Path | None = None,
) -> str:
    """Render ``document`` into annotated markup with the default template."""
    return ContentRenderer(templates_dir=templates_dir).render(document, chrome)


__all__ = [
    "ContentRenderer",
    "FieldRenderer",
    "initials",
    "phone_digits",
    "render",
]
