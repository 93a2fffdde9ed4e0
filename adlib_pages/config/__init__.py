"""Load site configuration and admin settings for adlib page builds.

The YAML file (``config/site.yaml`` by default) describes the page chrome
wrapped around the content document and the repository the admin handlers
commit to. Secrets never live in that file; :func:`resolve_admin_settings`
gathers them from the environment or a private TOML file instead.

Examples
--------
>>> from pathlib import Path
>>> from adlib_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.chrome.brand  # doctest: +SKIP
'JME Group'
"""

from .loader import DEFAULT_SITE_CONFIG, load_site_config
from .models import (
    AdminConfig,
    NavLinkConfig,
    SectionHeadings,
    SiteChrome,
    SiteConfig,
    SiteConfigError,
)
from .settings import (
    AdminSettings,
    SettingsError,
    resolve_admin_settings,
    save_admin_settings,
)

__all__ = [
    "DEFAULT_SITE_CONFIG",
    "AdminConfig",
    "AdminSettings",
    "NavLinkConfig",
    "SectionHeadings",
    "SettingsError",
    "SiteChrome",
    "SiteConfig",
    "SiteConfigError",
    "load_site_config",
    "resolve_admin_settings",
    "save_admin_settings",
]
