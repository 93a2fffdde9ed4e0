"""Tests for the ``adlib`` command functions."""

from __future__ import annotations

import base64
import json
import typing as typ
from http import HTTPStatus
from pathlib import Path
from textwrap import dedent

import pytest

from adlib_pages import cli
from adlib_pages.admin import HandlerResponse
from adlib_pages.codec import extract as extract_markup
from adlib_pages.content import ContentDocument, dump_content

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

REPO_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CONTENT = REPO_ROOT / "content.json"


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ADMIN_PASSWORD", "GITHUB_TOKEN", "GH_TOKEN", "GITHUB_REPO"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def site_config(tmp_path: Path) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(
        dedent(
            f"""
            site:
              content: {SAMPLE_CONTENT.as_posix()}
              output: {(tmp_path / "public" / "index.html").as_posix()}
              brand: Example Co
              copyright_year: 2030
            admin:
              repo: example/site
              content_path: data/content.json
              image_paths:
                - images/hero.jpg
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    return path


def test_build_writes_configured_output(
    site_config: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.build(config=site_config)

    output = tmp_path / "public" / "index.html"
    assert output.exists(), "expected the configured output to be written"
    html = output.read_text(encoding="utf-8")
    assert "2030 Example Co" in html
    assert capsys.readouterr().out.startswith("wrote ")


def test_build_honours_overrides(
    site_config: Path, tmp_path: Path, document: ContentDocument
) -> None:
    output = tmp_path / "elsewhere" / "page.html"
    cli.build(config=site_config, content=SAMPLE_CONTENT, output=output)
    assert extract_markup(output.read_text(encoding="utf-8")) == document


def test_build_rejects_missing_explicit_config(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        cli.build(config=tmp_path / "missing.yaml")


def test_extract_prints_json_to_stdout(
    site_config: Path,
    tmp_path: Path,
    document: ContentDocument,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Without ``--output`` the recovered document is printed."""
    cli.build(config=site_config)
    capsys.readouterr()

    cli.extract(tmp_path / "public" / "index.html")

    assert capsys.readouterr().out == dump_content(document)


def test_extract_writes_output_file(
    site_config: Path, tmp_path: Path, document: ContentDocument
) -> None:
    cli.build(config=site_config)
    target = tmp_path / "recovered" / "content.json"

    cli.extract(tmp_path / "public" / "index.html", output=target)

    payload = json.loads(target.read_text(encoding="utf-8"))
    assert ContentDocument.from_mapping(payload) == document


def test_extract_reports_missing_page(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        cli.extract(tmp_path / "absent.html")


def test_verify_accepts_sample_content(
    site_config: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.verify(config=site_config)
    assert capsys.readouterr().out.strip() == "round trip ok"


def test_verify_exits_non_zero_on_unstable_content(
    site_config: Path,
    tmp_path: Path,
    content_payload: dict[str, typ.Any],
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A title whose spacing the line break cannot preserve is reported."""
    content_payload["approach"]["title"] = "Our  Approach"
    content = tmp_path / "unstable.json"
    content.write_text(json.dumps(content_payload), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.verify(config=site_config, content=content)

    assert excinfo.value.code == 1
    assert "sections changed: approach" in capsys.readouterr().out


def test_save_content_invokes_handler(
    site_config: Path,
    tmp_path: Path,
    document: ContentDocument,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """The local command drives the same handler as the hosted admin page."""
    handler = mocker.patch(
        "adlib_pages.cli.save_content_handler",
        return_value=HandlerResponse.json(HTTPStatus.OK, {"ok": True}),
    )

    cli.save_content(
        config=site_config,
        credentials=tmp_path / "config.toml",
        password="pw",
        github_token="ghp_test",
    )

    event = handler.call_args.args[0]
    body = json.loads(event["body"])
    assert event["httpMethod"] == "POST"
    assert body["password"] == "pw"
    assert ContentDocument.from_mapping(body["content"]) == document
    settings = handler.call_args.kwargs["settings"]
    assert settings.repo == "example/site"
    assert handler.call_args.kwargs["content_path"] == "data/content.json"
    assert capsys.readouterr().out.strip() == '200 {"ok": true}'
    assert not (tmp_path / "config.toml").exists(), "secrets saved without --save"


def test_save_content_failure_exits_non_zero(
    site_config: Path, tmp_path: Path, mocker: MockerFixture
) -> None:
    mocker.patch(
        "adlib_pages.cli.save_content_handler",
        return_value=HandlerResponse.json(
            HTTPStatus.UNAUTHORIZED, {"error": "Unauthorized"}
        ),
    )
    with pytest.raises(SystemExit) as excinfo:
        cli.save_content(
            config=site_config,
            credentials=tmp_path / "config.toml",
            password="pw",
            github_token="ghp_test",
        )
    assert excinfo.value.code == 1


def test_save_option_persists_credentials(
    site_config: Path, tmp_path: Path, mocker: MockerFixture
) -> None:
    mocker.patch(
        "adlib_pages.cli.save_content_handler",
        return_value=HandlerResponse.json(HTTPStatus.OK, {"ok": True}),
    )
    credentials = tmp_path / "config.toml"
    cli.save_content(
        config=site_config,
        credentials=credentials,
        password="pw",
        github_token="ghp_test",
        save=True,
    )
    text = credentials.read_text(encoding="utf-8")
    assert 'repo = "example/site"' in text
    assert 'password = "pw"' in text


def test_upload_image_sends_encoded_file(
    site_config: Path, tmp_path: Path, mocker: MockerFixture
) -> None:
    handler = mocker.patch(
        "adlib_pages.cli.upload_image_handler",
        return_value=HandlerResponse.json(HTTPStatus.OK, {"ok": True}),
    )
    image = tmp_path / "hero.jpg"
    image.write_bytes(b"\xff\xd8\xff\xe0jpeg")

    cli.upload_image(
        image,
        "images/hero.jpg",
        config=site_config,
        credentials=tmp_path / "config.toml",
        password="pw",
        github_token="ghp_test",
    )

    body = json.loads(handler.call_args.args[0]["body"])
    assert body["path"] == "images/hero.jpg"
    assert base64.b64decode(body["data"]) == b"\xff\xd8\xff\xe0jpeg"
    assert tuple(handler.call_args.kwargs["allowed_paths"]) == ("images/hero.jpg",)
