"""Tests for the site YAML loader and the admin settings resolver."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from adlib_pages.config import (
    AdminConfig,
    AdminSettings,
    SettingsError,
    SiteConfigError,
    load_site_config,
    resolve_admin_settings,
    save_admin_settings,
)

REPO_ROOT = Path(__file__).resolve().parents[1]

_SETTINGS_ENV = (
    "ADMIN_PASSWORD",
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_REPO",
    "GITHUB_API_URL",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


def _write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def _write_toml(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        """
[admin]
password = "stored-pass"
github_token = "stored-token"
repo = "stored/site"
api_base = "https://github.example.com/api/v3"
""".strip()
        + "\n",
        encoding="utf-8",
    )
    return path


def test_repository_site_config_loads() -> None:
    """The checked-in site configuration parses cleanly."""
    config = load_site_config(REPO_ROOT / "config" / "site.yaml")
    assert config.chrome.brand == "JME Group"
    assert config.chrome.copyright_year == 2025
    assert config.admin.repo == "jmegroup/website"
    assert config.admin.branch == "main"
    assert "images/jeanne-marie-ellis.jpg" in config.admin.image_paths
    assert [link.label for link in config.chrome.navigation][-1] == "Contact"
    assert config.chrome.navigation[-1].cta


def test_missing_sections_fall_back_to_defaults(tmp_path: Path) -> None:
    """An empty site block keeps every dataclass default."""
    config = load_site_config(_write_yaml(tmp_path, "site: {}"))
    assert config.content == Path("content.json")
    assert config.output == Path("public/index.html")
    assert config.chrome.copyright_year is None
    assert config.chrome.headings.contact == "Get in Touch"
    assert config.admin == AdminConfig()


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_site_config(tmp_path / "absent.yaml")


def test_top_level_must_be_a_mapping(tmp_path: Path) -> None:
    with pytest.raises(TypeError, match="mapping"):
        load_site_config(_write_yaml(tmp_path, "- just\n- a list"))


@pytest.mark.parametrize(
    ("text", "fragment"),
    [
        ("site:\n  copyright_year: soon", "copyright_year"),
        ("site:\n  copyright_year: true", "copyright_year"),
        ("site:\n  navigation:\n    - label: Home", "label"),
        ("site:\n  navigation: home", "navigation"),
        ("site:\n  headings: [a]", "headings"),
        ("admin:\n  image_paths: images/a.jpg", "image_paths"),
        ("admin:\n  image_paths: ['']", "image_paths"),
        ("admin:\n  repo: website", "owner/name"),
        ("admin: [repo]", "admin"),
        ("site: [a]", "site"),
    ],
)
def test_malformed_sections_raise(tmp_path: Path, text: str, fragment: str) -> None:
    """Present-but-malformed sections are rejected with a pointed message."""
    with pytest.raises(SiteConfigError, match=fragment):
        load_site_config(_write_yaml(tmp_path, text))


def test_settings_prefer_arguments_then_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Arguments beat the environment, which beats stored values."""
    config_path = _write_toml(tmp_path)
    monkeypatch.setenv("ADMIN_PASSWORD", "env-pass")
    monkeypatch.setenv("GH_TOKEN", "env-token")

    settings = resolve_admin_settings(config_path=config_path, password="cli-pass")

    assert settings.password == "cli-pass"
    assert settings.github_token == "env-token"
    assert settings.repo == "stored/site"
    assert settings.api_base == "https://github.example.com/api/v3"
    assert settings.branch is None


def test_site_admin_block_supplies_repo_and_branch(tmp_path: Path) -> None:
    """The YAML admin block outranks stored values for repo and branch."""
    config_path = _write_toml(tmp_path)
    admin = AdminConfig(repo="jmegroup/website", branch="main")

    settings = resolve_admin_settings(config_path=config_path, admin=admin)

    assert settings.repo == "jmegroup/website"
    assert settings.branch == "main"
    assert settings.password == "stored-pass"


def test_missing_settings_are_listed(tmp_path: Path) -> None:
    """Every unresolved setting is named in the error."""
    with pytest.raises(SettingsError) as excinfo:
        resolve_admin_settings(config_path=tmp_path / "absent.toml", repo="a/b")
    message = str(excinfo.value)
    assert "ADMIN_PASSWORD" in message and "GITHUB_TOKEN" in message
    assert "GITHUB_REPO" not in message


def test_unparseable_toml_is_a_settings_error(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("[admin\npassword = ", encoding="utf-8")
    with pytest.raises(SettingsError, match="parse"):
        resolve_admin_settings(config_path=config_path)


def test_settings_round_trip(tmp_path: Path) -> None:
    """Saved settings reload unchanged and the file is private."""
    config_path = tmp_path / "nested" / "config.toml"
    original = AdminSettings(
        password="s3cret",
        github_token="ghp_token",
        repo="jmegroup/website",
        branch="preview",
    )
    save_admin_settings(original, path=config_path)

    loaded = resolve_admin_settings(config_path=config_path)

    assert (loaded.password, loaded.github_token, loaded.repo) == (
        "s3cret",
        "ghp_token",
        "jmegroup/website",
    )
    assert loaded.branch == "preview"
    assert stat.S_IMODE(config_path.stat().st_mode) == 0o600


def test_saving_keeps_unrelated_tables(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[editor]\ntheme = "dark"\n', encoding="utf-8")
    save_admin_settings(
        AdminSettings(password="p", github_token="t", repo="o/r"), path=config_path
    )
    text = config_path.read_text(encoding="utf-8")
    assert 'theme = "dark"' in text
    assert "[admin]" in text
    assert "branch" not in text


def test_settings_repr_masks_secrets() -> None:
    settings = AdminSettings(password="hunter2", github_token="ghp_x", repo="o/r")
    assert "hunter2" not in repr(settings)
    assert "ghp_x" not in repr(settings)
