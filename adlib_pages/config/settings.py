"""Resolve the admin handlers' secrets and repository coordinates.

Values are taken from explicit arguments first, then the environment
(``ADMIN_PASSWORD``, ``GITHUB_TOKEN``, ``GITHUB_REPO``, ``GITHUB_API_URL``),
then the ``[admin]`` table of ``~/.config/adlib-pages/config.toml``. The TOML
location can be moved with ``ADLIB_CONFIG_FILE``.
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

import tomlkit

from adlib_pages._constants import DEFAULT_API_BASE

if typ.TYPE_CHECKING:
    from .models import AdminConfig

DEFAULT_CONFIG_PATH = Path(
    os.getenv(
        "ADLIB_CONFIG_FILE",
        Path.home() / ".config" / "adlib-pages" / "config.toml",
    )
)

_CONFIG_FILE_MODE = 0o600


class SettingsError(RuntimeError):
    """Raised when a required admin setting cannot be resolved."""


@dc.dataclass(slots=True)
class AdminSettings:
    """Secrets and coordinates used by the admin persistence handlers."""

    password: str
    github_token: str
    repo: str
    api_base: str = DEFAULT_API_BASE
    branch: str | None = None

    def __repr__(self) -> str:
        return (
            f"AdminSettings(password='***', github_token='***', repo={self.repo!r}, "
            f"api_base={self.api_base!r}, branch={self.branch!r})"
        )


def _load_stored(path: Path) -> dict[str, typ.Any]:
    if not path.exists():
        return {}
    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse config TOML at {path}"
        raise SettingsError(msg) from exc
    table = doc.get("admin")
    return {key: value for key, value in table.items()} if table else {}


def resolve_admin_settings(
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    admin: AdminConfig | None = None,
    password: str | None = None,
    github_token: str | None = None,
    repo: str | None = None,
    api_base: str | None = None,
) -> AdminSettings:
    """Merge arguments, environment, the site config and ``config.toml``.

    Parameters
    ----------
    config_path : Path, optional
        TOML file holding stored secrets under an ``[admin]`` table.
    admin : AdminConfig, optional
        Admin block of the site YAML; supplies the repository and branch when
        neither arguments nor the environment do.
    password, github_token, repo, api_base : str, optional
        Explicit overrides, typically from CLI options.

    Returns
    -------
    AdminSettings
        Fully resolved settings.

    Raises
    ------
    SettingsError
        If the admin password, GitHub token or repository is missing from
        every source.
    """
    stored = _load_stored(config_path)
    resolved_repo = (
        repo
        or os.getenv("GITHUB_REPO")
        or (admin.repo if admin else None)
        or stored.get("repo")
    )
    settings = AdminSettings(
        password=password or os.getenv("ADMIN_PASSWORD") or stored.get("password") or "",
        github_token=github_token
        or os.getenv("GITHUB_TOKEN")
        or os.getenv("GH_TOKEN")
        or stored.get("github_token")
        or "",
        repo=str(resolved_repo or ""),
        api_base=api_base
        or os.getenv("GITHUB_API_URL")
        or stored.get("api_base")
        or DEFAULT_API_BASE,
        branch=(admin.branch if admin else None) or stored.get("branch"),
    )
    missing = [
        name
        for name, value in (
            ("ADMIN_PASSWORD", settings.password),
            ("GITHUB_TOKEN", settings.github_token),
            ("GITHUB_REPO", settings.repo),
        )
        if not value
    ]
    if missing:
        msg = (
            f"Missing admin settings: {', '.join(missing)}. "
            "Provide them via CLI options, environment, or config.toml."
        )
        raise SettingsError(msg)
    return settings


def save_admin_settings(
    settings: AdminSettings, *, path: Path = DEFAULT_CONFIG_PATH
) -> None:
    """Persist settings into ``config.toml`` preserving other tables."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        doc = tomlkit.document()

    admin_table = doc.get("admin")
    if not isinstance(admin_table, tomlkit.items.Table):
        admin_table = tomlkit.table()
    admin_table["password"] = settings.password
    admin_table["github_token"] = settings.github_token
    admin_table["repo"] = settings.repo
    admin_table["api_base"] = settings.api_base
    if settings.branch:
        admin_table["branch"] = settings.branch
    else:
        admin_table.pop("branch", None)
    doc["admin"] = admin_table

    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    os.chmod(path, _CONFIG_FILE_MODE)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AdminSettings",
    "SettingsError",
    "resolve_admin_settings",
    "save_admin_settings",
]
