"""Behaviour tests for the admin save handler using pytest-bdd.

These scenarios drive :func:`adlib_pages.admin.save_content` against recorded
GitHub contents API responses. They verify that a save reads the current
revision and commits keyed to it, that a stale revision surfaces as a failure
without a retry, and that a wrong password never reaches GitHub. Betamax
replays the cassettes under ``tests/cassettes/admin`` so no live network
calls are made.

Usage
-----
Run ``pytest tests/bdd/test_admin_persistence.py -v`` or filter with
``pytest -k admin_persistence``.
"""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
import requests
from betamax import Betamax
from pytest_bdd import given, parsers, scenarios, then, when

from adlib_pages.admin import GitHubContentsClient, HandlerResponse, save_content
from adlib_pages.config import AdminSettings

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "admin_persistence.feature"
)
scenarios(FEATURE_FILE)

ADMIN_PASSWORD = "let-me-edit"

ScenarioState = dict[str, typ.Any]


@pytest.fixture(scope="session")
def cassette_dir() -> Path:
    """Locate the directory holding Betamax cassettes.

    Returns
    -------
    Path
        Filesystem path under ``tests/cassettes`` where recordings live.
    """
    return Path(__file__).resolve().parents[1] / "cassettes"


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps.

    Returns
    -------
    ScenarioState
        Mutable dictionary used to exchange state between ``given``, ``when``,
        and ``then`` steps.
    """
    return {}


@given(parsers.parse('admin settings for the "{repo}" repository'))
def given_settings(scenario_state: ScenarioState, repo: str) -> None:
    """Build admin settings targeting ``repo`` on its default branch.

    Parameters
    ----------
    scenario_state : ScenarioState
        Mutable dictionary receiving the ``settings`` entry.
    repo : str
        Repository in ``owner/name`` form, parsed from the step text.
    """
    scenario_state["settings"] = AdminSettings(
        password=ADMIN_PASSWORD, github_token="ghp_replayed", repo=repo
    )


@given(parsers.parse('GitHub responses are replayed from the "{cassette}" cassette'))
def given_betamax(
    scenario_state: ScenarioState,
    cassette_dir: Path,
    mocker: MockerFixture,
    cassette: str,
) -> None:
    """Configure a Betamax-backed session that only replays recordings.

    Parameters
    ----------
    scenario_state : ScenarioState
        Mutable dictionary receiving the session, recorder, spy and cassette
        name.
    cassette_dir : Path
        Filesystem path containing the Betamax cassette library.
    mocker : MockerFixture
        Used to spy on the session so steps can count outgoing requests.
    cassette : str
        Cassette name relative to the library, parsed from the step text.
    """
    session = requests.Session()
    recorder = Betamax(
        session,
        cassette_library_dir=str(cassette_dir),
        default_cassette_options={"record_mode": "none"},
    )
    scenario_state["session"] = session
    scenario_state["recorder"] = recorder
    scenario_state["spy"] = mocker.spy(session, "request")
    scenario_state["cassette"] = cassette


def _save(scenario_state: ScenarioState, password: str) -> None:
    settings = typ.cast("AdminSettings", scenario_state["settings"])
    recorder = typ.cast("Betamax", scenario_state["recorder"])
    client = GitHubContentsClient(
        settings.repo,
        token=settings.github_token,
        api_base=settings.api_base,
        session=scenario_state["session"],
    )
    body = {"password": password, "content": scenario_state["content"]}
    with recorder.use_cassette(scenario_state["cassette"]):
        scenario_state["response"] = save_content(
            {"httpMethod": "POST", "body": json.dumps(body)},
            settings=settings,
            client=client,
        )


@when("I save the sample content with the admin password")
def when_save(
    scenario_state: ScenarioState, content_payload: dict[str, typ.Any]
) -> None:
    """Submit the sample content through the save handler."""
    scenario_state["content"] = content_payload
    _save(scenario_state, ADMIN_PASSWORD)


@when(parsers.parse('I save the sample content with the password "{password}"'))
def when_save_with_password(
    scenario_state: ScenarioState, content_payload: dict[str, typ.Any], password: str
) -> None:
    scenario_state["content"] = content_payload
    _save(scenario_state, password)


@then(parsers.parse("the handler responds with status {status:d}"))
def then_status(scenario_state: ScenarioState, status: int) -> None:
    response = typ.cast("HandlerResponse", scenario_state["response"])
    assert response.status_code == status, (
        f"expected status {status}, got {response.status_code}: {response.body}"
    )
    if status == 200:
        assert response.payload == {"ok": True}
        assert scenario_state["spy"].call_count == 2, "expected a read then a write"


@then(parsers.parse('the error is "{error}"'))
def then_error(scenario_state: ScenarioState, error: str) -> None:
    """Check the failure payload and that the write was attempted only once."""
    response = typ.cast("HandlerResponse", scenario_state["response"])
    assert response.payload["error"] == error
    assert "does not match" in response.payload["details"]
    methods = [call.args[0] for call in scenario_state["spy"].call_args_list]
    assert methods == ["GET", "PUT"], f"expected no retry, saw {methods}"


@then("no GitHub request was made")
def then_no_requests(scenario_state: ScenarioState) -> None:
    assert scenario_state["spy"].call_count == 0
