"""Homepage build pipeline: content JSON to annotated HTML and back.

This module wires the site configuration, the content document and the codec
to the filesystem. ``HomePageBuilder`` renders ``content.json`` into the
static ``public/index.html`` artefact; ``ContentExtractor`` reads a rendered
(possibly hand-edited) page and writes the recovered document back to JSON.

Typical usage mirrors the build pipeline:

>>> from adlib_pages.config import load_site_config
>>> builder = HomePageBuilder(load_site_config())  # doctest: +SKIP
>>> output_path = builder.run()  # doctest: +SKIP

Both classes produce UTF-8 files with a trailing newline and create parent
directories as needed.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from .codec import ContentRenderer, extract
from .content import ContentDocument, dump_content, load_content

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import SiteChrome, SiteConfig

logger = logging.getLogger(__name__)


class HomePageBuilder:
    """Render the homepage from the content document and site chrome."""

    def __init__(
        self, site: SiteConfig, *, templates_dir: Path | None = None
    ) -> None:
        """Initialize the builder and its renderer.

        Parameters
        ----------
        site : SiteConfig
            Parsed site configuration; provides the content and output paths
            and the page chrome.
        templates_dir : Path, optional
            Directory containing ``home_page.jinja``. Defaults to the
            package's ``templates`` directory.
        """
        self.site = site
        self.renderer = ContentRenderer(templates_dir=templates_dir)

    def render(self, document: ContentDocument | None = None) -> str:
        """Return the page markup for ``document`` (or the configured file)."""
        if document is None:
            document = load_content(self.site.content)
        return self.renderer.render(document, self.site.chrome)

    def run(self, *, output: Path | None = None) -> Path:
        """Render and write the homepage HTML, returning the output path.

        Raises
        ------
        FileNotFoundError
            If the content document does not exist.
        SchemaViolation
            If the content document does not satisfy the schema.
        """
        output_path = output or self.site.output
        html = self.render()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.info("rendered %s into %s", self.site.content, output_path)
        return output_path


class ContentExtractor:
    """Recover the content document from a rendered page."""

    def __init__(self, source: Path) -> None:
        self.source = source

    def document(self) -> ContentDocument:
        """Return the document encoded in the source page.

        Raises
        ------
        FileNotFoundError
            If the page does not exist.
        MalformedMarkup
            If the page cannot be decoded.
        """
        if not self.source.exists():
            msg = f"Page '{self.source}' not found."
            raise FileNotFoundError(msg)
        return extract(self.source.read_text(encoding="utf-8"))

    def run(self, output: Path) -> Path:
        """Write the recovered document to ``output`` as JSON."""
        text = dump_content(self.document())
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        logger.info("extracted %s into %s", self.source, output)
        return output


@dc.dataclass(slots=True)
class RoundTripReport:
    """Outcome of rendering a document and extracting it again."""

    document_matches: bool
    markup_matches: bool
    mismatched_sections: list[str] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True when both the document and the markup are stable."""
        return self.document_matches and self.markup_matches


def verify_round_trip(
    document: ContentDocument,
    chrome: SiteChrome | None = None,
    *,
    renderer: ContentRenderer | None = None,
) -> RoundTripReport:
    """Check that ``document`` survives render, extract and re-render unchanged.

    Parameters
    ----------
    document : ContentDocument
        Document to check.
    chrome : SiteChrome, optional
        Page chrome used for both renders.
    renderer : ContentRenderer, optional
        Renderer to reuse; a default one is created when omitted.

    Returns
    -------
    RoundTripReport
        Which sections (if any) changed on the way back.

    Raises
    ------
    MalformedMarkup
        If the rendered page cannot be extracted at all.
    """
    renderer = renderer or ContentRenderer()
    markup = renderer.render(document, chrome)
    recovered = extract(markup)
    original = document.to_dict()
    restored = recovered.to_dict()
    mismatched = [key for key in original if original[key] != restored.get(key)]
    return RoundTripReport(
        document_matches=not mismatched,
        markup_matches=renderer.render(recovered, chrome) == markup,
        mismatched_sections=mismatched,
    )


__all__ = [
    "ContentExtractor",
    "HomePageBuilder",
    "RoundTripReport",
    "verify_round_trip",
]
