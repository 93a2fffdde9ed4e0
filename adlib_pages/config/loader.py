"""Load the site YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .models import (
    AdminConfig,
    NavLinkConfig,
    SectionHeadings,
    SiteChrome,
    SiteConfig,
    SiteConfigError,
)

DEFAULT_SITE_CONFIG = Path("config/site.yaml")


def load_site_config(path: Path = DEFAULT_SITE_CONFIG) -> SiteConfig:
    """Load the YAML file describing the homepage chrome and admin targets.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration (for example
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Parsed configuration. Sections missing from the file fall back to the
        dataclass defaults.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If a section is present but malformed.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.output  # doctest: +SKIP
    PosixPath('public/index.html')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    site_raw = raw.get("site", {}) or {}
    if not isinstance(site_raw, dict):
        msg = "The 'site' section must be a mapping."
        raise SiteConfigError(msg)

    return SiteConfig(
        content=Path(site_raw.get("content", "content.json")),
        output=Path(site_raw.get("output", "public/index.html")),
        chrome=_build_chrome(site_raw),
        admin=_build_admin_config(raw.get("admin")),
    )


def _build_chrome(payload: typ.Mapping[str, typ.Any]) -> SiteChrome:
    """Build the page chrome, keeping defaults for keys the YAML omits."""
    defaults = SiteChrome()
    year = payload.get("copyright_year")
    match year:
        case None:
            copyright_year = None
        case int() if not isinstance(year, bool):
            copyright_year = year
        case _:
            msg = "Site 'copyright_year' must be an integer."
            raise SiteConfigError(msg)
    navigation = _build_nav_links(payload.get("navigation"))
    return SiteChrome(
        title=str(payload.get("title", defaults.title)),
        description=str(payload.get("description", defaults.description)),
        keywords=str(payload.get("keywords", defaults.keywords)),
        og_description=str(payload.get("og_description", defaults.og_description)),
        brand=str(payload.get("brand", defaults.brand)),
        copyright_year=copyright_year,
        stylesheet=str(payload.get("stylesheet", defaults.stylesheet)),
        script=str(payload.get("script", defaults.script)),
        navigation=navigation or defaults.navigation,
        headings=_build_headings(payload.get("headings")),
    )


def _build_nav_links(entries: object) -> list[NavLinkConfig]:
    """Build navigation links for the header."""
    links: list[NavLinkConfig] = []
    match entries:
        case None:
            return links
        case list() as items:
            iterable = items
        case _:
            msg = "Site 'navigation' must be a list of links."
            raise SiteConfigError(msg)
    for entry in iterable:
        match entry:
            case {"label": label, "href": href, **rest} if label and href:
                pass
            case _:
                msg = "Navigation links require 'label' and 'href'."
                raise SiteConfigError(msg)
        links.append(
            NavLinkConfig(
                label=str(label),
                href=str(href),
                current=bool(rest.get("current", False)),
                cta=bool(rest.get("cta", False)),
            )
        )
    return links


def _build_headings(payload: object) -> SectionHeadings:
    """Build the fixed section headings."""
    match payload:
        case None:
            return SectionHeadings()
        case dict() as data:
            pass
        case _:
            msg = "Site 'headings' must be a mapping."
            raise SiteConfigError(msg)
    defaults = SectionHeadings()
    return SectionHeadings(
        services=str(data.get("services", defaults.services)),
        clients=str(data.get("clients", defaults.clients)),
        clients_subtitle=str(data.get("clients_subtitle", defaults.clients_subtitle)),
        contact=str(data.get("contact", defaults.contact)),
    )


def _build_admin_config(payload: object) -> AdminConfig:
    """Build the admin persistence targets."""
    match payload:
        case None:
            return AdminConfig()
        case dict() as data:
            pass
        case _:
            msg = "The 'admin' section must be a mapping."
            raise SiteConfigError(msg)
    defaults = AdminConfig()
    image_paths = data.get("image_paths")
    match image_paths:
        case None:
            allowed = defaults.image_paths
        case list() as items if all(isinstance(item, str) and item for item in items):
            allowed = tuple(items)
        case _:
            msg = "Admin 'image_paths' must be a list of non-empty strings."
            raise SiteConfigError(msg)
    repo = data.get("repo")
    if repo is not None and "/" not in str(repo):
        msg = "Admin 'repo' must use the 'owner/name' form."
        raise SiteConfigError(msg)
    branch = data.get("branch")
    return AdminConfig(
        repo=str(repo) if repo is not None else None,
        branch=str(branch) if branch else None,
        content_path=str(data.get("content_path", defaults.content_path)),
        image_paths=allowed,
    )


__all__ = ["DEFAULT_SITE_CONFIG", "load_site_config"]
