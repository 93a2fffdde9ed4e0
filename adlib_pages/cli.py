"""Cyclopts CLI entrypoint for building and editing the adlib homepage.

The ``adlib`` console script renders ``content.json`` into the annotated
homepage, extracts a (possibly hand-edited) page back into JSON, checks that a
document survives the round trip, and drives the admin persistence handlers
locally so edits can be committed without the hosted admin page.

Examples
--------
Render the homepage with the default configuration:

>>> from adlib_pages.cli import main
>>> main()  # doctest: +SKIP

Recover the content document from an edited page:

>>> from adlib_pages.cli import app
>>> app.run(["extract", "public/index.html", "--output", "content.json"])  # doctest: +SKIP
"""

from __future__ import annotations

import base64
import json
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .admin import save_content as save_content_handler
from .admin import upload_image as upload_image_handler
from .config import (
    DEFAULT_SITE_CONFIG,
    SiteConfig,
    load_site_config,
    resolve_admin_settings,
    save_admin_settings,
)
from .config.settings import DEFAULT_CONFIG_PATH
from .content import dump_content, load_content
from .homepage import ContentExtractor, HomePageBuilder, verify_round_trip

if typ.TYPE_CHECKING:
    from .admin import HandlerResponse
    from .config import AdminSettings

app = App(name="adlib", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]
VerboseOption = typ.Annotated[bool, Parameter(help="Log debug output")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _load_site(config: Path) -> SiteConfig:
    """Load the site config, falling back to defaults when the file is absent."""
    if config.exists():
        return load_site_config(config)
    if config != DEFAULT_SITE_CONFIG:
        msg = f"Configuration file '{config}' not found."
        raise FileNotFoundError(msg)
    return SiteConfig()


@app.command(help="Render the content document into the annotated homepage.")
def build(
    *,
    config: ConfigOption = DEFAULT_SITE_CONFIG,
    content: typ.Annotated[
        Path | None,
        Parameter(help="Override the content JSON path", env_var="INPUT_CONTENT"),
    ] = None,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Override the output HTML path", env_var="INPUT_OUTPUT"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Render the homepage and print the written path.

    Parameters
    ----------
    config : Path, optional
        Path to ``site.yaml`` (overridable via ``INPUT_CONFIG``).
    content : Path or None, optional
        Content document to render instead of the configured one.
    output : Path or None, optional
        Output file to write instead of the configured one.
    verbose : bool, optional
        Emit debug logging.
    """
    _configure_logging(verbose)
    site = _load_site(config)
    if content is not None:
        site.content = content
    path = HomePageBuilder(site).run(output=output)
    print(f"wrote {_format_path(path)}")


@app.command(help="Recover the content document from a rendered homepage.")
def extract(
    page: typ.Annotated[Path, Parameter(help="Rendered HTML page")],
    *,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Write JSON here instead of stdout", env_var="INPUT_OUTPUT"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Decode ``page`` and write (or print) the content JSON."""
    _configure_logging(verbose)
    extractor = ContentExtractor(page)
    if output is None:
        print(dump_content(extractor.document()), end="")
        return
    path = extractor.run(output)
    print(f"wrote {_format_path(path)}")


@app.command(help="Check that the content document survives a round trip.")
def verify(
    *,
    config: ConfigOption = DEFAULT_SITE_CONFIG,
    content: typ.Annotated[
        Path | None,
        Parameter(help="Override the content JSON path", env_var="INPUT_CONTENT"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Render, extract and re-render the document; exit 1 on any difference.

    Raises
    ------
    SystemExit
        With status 1 when the document or the markup changes.
    """
    _configure_logging(verbose)
    site = _load_site(config)
    document = load_content(content or site.content)
    report = verify_round_trip(document, site.chrome)
    if report.ok:
        print("round trip ok")
        return
    if report.mismatched_sections:
        print(f"sections changed: {', '.join(report.mismatched_sections)}")
    if not report.markup_matches:
        print("re-rendered markup differs")
    raise SystemExit(1)


def _resolve_settings(
    site: SiteConfig,
    credentials: Path,
    password: str | None,
    github_token: str | None,
    save: bool,
) -> AdminSettings:
    settings = resolve_admin_settings(
        config_path=credentials,
        admin=site.admin,
        password=password,
        github_token=github_token,
    )
    if save:
        save_admin_settings(settings, path=credentials)
    return settings


def _report(response: HandlerResponse) -> None:
    print(f"{response.status_code} {response.body}")
    if response.status_code != 200:
        raise SystemExit(1)


CredentialsOption = typ.Annotated[
    Path,
    Parameter(
        help="Where admin secrets are stored (TOML)", env_var="ADLIB_CONFIG_FILE"
    ),
]


@app.command(
    name="save-content", help="Commit the content document via the admin handler."
)
def save_content(
    *,
    config: ConfigOption = DEFAULT_SITE_CONFIG,
    content: typ.Annotated[
        Path | None,
        Parameter(help="Override the content JSON path", env_var="INPUT_CONTENT"),
    ] = None,
    credentials: CredentialsOption = DEFAULT_CONFIG_PATH,
    password: str | None = None,
    github_token: str | None = None,
    save: bool = False,
    verbose: VerboseOption = False,
) -> None:
    """Validate the local content document and commit it upstream."""
    _configure_logging(verbose)
    site = _load_site(config)
    document = load_content(content or site.content)
    settings = _resolve_settings(site, credentials, password, github_token, save)
    body = {"password": settings.password, "content": document.to_dict()}
    response = save_content_handler(
        {"httpMethod": "POST", "body": json.dumps(body)},
        settings=settings,
        content_path=site.admin.content_path,
    )
    _report(response)


@app.command(name="upload-image", help="Commit an image via the admin handler.")
def upload_image(
    image: typ.Annotated[Path, Parameter(help="Local image file")],
    target: typ.Annotated[str, Parameter(help="Allow-listed repository path")],
    *,
    config: ConfigOption = DEFAULT_SITE_CONFIG,
    credentials: CredentialsOption = DEFAULT_CONFIG_PATH,
    password: str | None = None,
    github_token: str | None = None,
    save: bool = False,
    verbose: VerboseOption = False,
) -> None:
    """Base64-encode ``image`` and commit it to ``target``."""
    _configure_logging(verbose)
    site = _load_site(config)
    settings = _resolve_settings(site, credentials, password, github_token, save)
    data = base64.b64encode(image.read_bytes()).decode("ascii")
    body = {"password": settings.password, "path": target, "data": data}
    response = upload_image_handler(
        {"httpMethod": "POST", "body": json.dumps(body)},
        settings=settings,
        allowed_paths=site.admin.image_paths,
    )
    _report(response)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``adlib`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
