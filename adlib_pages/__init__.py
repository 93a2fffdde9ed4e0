"""Render, extract and persist the adlib static homepage.

This package turns a structured JSON content document into an annotated
static page, reads such pages back into the same document, and commits edits
through password-protected admin handlers.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from adlib_pages import main
>>> main()  # doctest: +SKIP
>>> from adlib_pages import app
>>> app(["build"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
