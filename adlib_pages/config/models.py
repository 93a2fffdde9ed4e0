"""Typed dataclasses describing the site chrome and admin configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from adlib_pages._constants import DEFAULT_IMAGE_PATHS


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class NavLinkConfig:
    """Navigation link metadata for the homepage header."""

    label: str
    href: str
    current: bool = False
    cta: bool = False


def _default_navigation() -> list[NavLinkConfig]:
    return [
        NavLinkConfig(label="Our Mission", href="#home", current=True),
        NavLinkConfig(label="Our Approach", href="#approach"),
        NavLinkConfig(label="Services", href="#services"),
        NavLinkConfig(label="Who We Serve", href="#clients"),
        NavLinkConfig(label="About", href="#about"),
        NavLinkConfig(label="Contact", href="#contact", cta=True),
    ]


@dc.dataclass(slots=True)
class SectionHeadings:
    """Fixed section headings that are part of the page design, not content."""

    services: str = "Our Services"
    clients: str = "Who We Serve"
    clients_subtitle: str = (
        "We have been blessed to serve the following exceptional organizations."
    )
    contact: str = "Get in Touch"


@dc.dataclass(slots=True)
class SiteChrome:
    """Page-level metadata and navigation wrapped around the content."""

    title: str = "JME Group | Nonprofit Advancement Consulting"
    description: str = (
        "JME Group is a boutique consulting firm in Austin, TX specializing in "
        "advancement strategies for nonprofit organizations."
    )
    keywords: str = (
        "nonprofit consulting, strategic planning, resource development, "
        "community relations, Austin TX, mission advancement"
    )
    og_description: str = (
        "Our mission is advancing yours. Boutique consulting for nonprofit "
        "organizations."
    )
    brand: str = "JME Group"
    copyright_year: int | None = None
    stylesheet: str = "styles.css"
    script: str = "script.js"
    navigation: list[NavLinkConfig] = dc.field(default_factory=_default_navigation)
    headings: SectionHeadings = dc.field(default_factory=SectionHeadings)


@dc.dataclass(slots=True)
class AdminConfig:
    """Where the admin handlers persist content and images."""

    repo: str | None = None
    branch: str | None = None
    content_path: str = "content.json"
    image_paths: tuple[str, ...] = DEFAULT_IMAGE_PATHS


@dc.dataclass(slots=True)
class SiteConfig:
    """Aggregated build configuration sourced from YAML."""

    content: Path = Path("content.json")
    output: Path = Path("public/index.html")
    chrome: SiteChrome = dc.field(default_factory=SiteChrome)
    admin: AdminConfig = dc.field(default_factory=AdminConfig)


__all__ = [
    "AdminConfig",
    "NavLinkConfig",
    "SectionHeadings",
    "SiteChrome",
    "SiteConfig",
    "SiteConfigError",
]
