"""Shared fixtures for content document tests."""

from __future__ import annotations

import copy
import json
import typing as typ
from pathlib import Path

import pytest

from adlib_pages.content import ContentDocument

SAMPLE_CONTENT = Path(__file__).resolve().parents[1] / "content.json"


@pytest.fixture(scope="session")
def _sample_payload() -> dict[str, typ.Any]:
    return json.loads(SAMPLE_CONTENT.read_text(encoding="utf-8"))


@pytest.fixture
def content_payload(_sample_payload: dict[str, typ.Any]) -> dict[str, typ.Any]:
    """Return a fresh, mutable copy of the sample content payload."""
    return copy.deepcopy(_sample_payload)


@pytest.fixture
def document(content_payload: dict[str, typ.Any]) -> ContentDocument:
    """Return the sample payload as a validated document."""
    return ContentDocument.from_mapping(content_payload)
