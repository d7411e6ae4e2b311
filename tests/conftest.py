"""Test fixtures: in-memory record store and a small shared library."""

from __future__ import annotations

import copy
from typing import Any

import pytest
from fastapi.testclient import TestClient

from prompt_shop.core.defaults import (
    DEFAULT_LENSES,
    DEFAULT_LOOKS,
    DEFAULT_MICRO_DETAILS,
    DEFAULT_MICRO_TEXTURES,
)
from prompt_shop.core.library import EntityLibrary
from prompt_shop.core.projects import GlobalLibrary, ProjectService
from prompt_shop.db.models import CharacterProfile, PromptRequest, WardrobeProfile
from prompt_shop.db.store import RecordStore
from prompt_shop.suggest.client import SuggestionClient
from tests.constants import COZY_LOOK_ID


class MockRecordStore(RecordStore):
    """In-memory record store for testing."""

    def __init__(self):
        self.records: dict[str, dict[str, Any]] = {}

    def load(self, key: str) -> dict[str, Any] | None:
        record = self.records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def save(self, key: str, record: dict[str, Any]) -> None:
        self.records[key] = copy.deepcopy(record)

    def delete(self, key: str) -> bool:
        return self.records.pop(key, None) is not None

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self.records if key.startswith(prefix))


@pytest.fixture
def store() -> MockRecordStore:
    """Fresh record store for each test."""
    return MockRecordStore()


@pytest.fixture
def service(store) -> ProjectService:
    return ProjectService(store)


@pytest.fixture
def global_library(store, service) -> GlobalLibrary:
    return GlobalLibrary(store, service)


@pytest.fixture
def milo() -> CharacterProfile:
    return CharacterProfile(
        id="char-milo",
        ui_name="Milo",
        injected_text="Milo, a small red fox with a white-tipped tail and amber eyes",
    )


@pytest.fixture
def juniper() -> CharacterProfile:
    return CharacterProfile(
        id="char-juniper",
        ui_name="Juniper",
        injected_text="Juniper, a tall grey heron with a long yellow beak",
    )


@pytest.fixture
def raincoat() -> WardrobeProfile:
    return WardrobeProfile(
        id="ward-raincoat",
        ui_name="Yellow Raincoat",
        outfit_text="bright yellow raincoat with wooden toggles",
        bans_text="no hats",
    )


@pytest.fixture
def scarf() -> WardrobeProfile:
    return WardrobeProfile(
        id="ward-scarf",
        ui_name="Knit Scarf",
        outfit_text="chunky green knit scarf",
    )


@pytest.fixture
def library(milo, juniper, raincoat, scarf) -> EntityLibrary:
    """Two characters, two wardrobes and the built-in looks, lenses and packs."""
    return EntityLibrary(
        characters=[milo, juniper],
        wardrobes=[raincoat, scarf],
        lenses=list(DEFAULT_LENSES),
        looks=list(DEFAULT_LOOKS),
        micro_textures=list(DEFAULT_MICRO_TEXTURES),
        micro_details=list(DEFAULT_MICRO_DETAILS),
    )


@pytest.fixture
def request_data() -> dict[str, Any]:
    """A complete, valid prompt request as plain JSON."""
    return {
        "aspect_ratio": "2x3",
        "output_mode": "compact",
        "scene_heart": "Milo the fox reads a map by lantern light",
        "cast": [{"character_id": "char-milo", "wardrobe_id": "ward-raincoat"}],
        "framing": "medium",
        "lens_mode": "auto",
        "look_family_id": COZY_LOOK_ID,
        "environment_anchors": ["oak desk", "brass lantern", "rolled maps"],
        "mechanic_lock": "Lantern light spills across the map onto Milo's paws",
        "focus_target": "Milo's eyes and the map in his paws",
        "selected_micro_textures": [],
        "selected_micro_details": [],
    }


@pytest.fixture
def valid_request(request_data) -> PromptRequest:
    return PromptRequest.model_validate(request_data)


@pytest.fixture
def suggestion_client() -> SuggestionClient:
    return SuggestionClient(api_url="https://ai.test/chat/completions", api_key="test-key")


@pytest.fixture
def app(service, global_library, suggestion_client):
    """FastAPI test app with mocked dependencies."""
    from prompt_shop.core.projects import get_global_library, get_project_service
    from prompt_shop.main import app as _app
    from prompt_shop.suggest.client import get_suggestion_client

    _app.dependency_overrides[get_project_service] = lambda: service
    _app.dependency_overrides[get_global_library] = lambda: global_library
    _app.dependency_overrides[get_suggestion_client] = lambda: suggestion_client

    yield _app

    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture
def project(service, milo, juniper, raincoat, scarf):
    """A stored project with the test characters and the built-in library under fixed ids."""
    created = service.create_project("Fox Tales")
    created.characters = [milo, juniper]
    created.wardrobes = [raincoat, scarf]
    created.lenses = list(DEFAULT_LENSES)
    created.looks = list(DEFAULT_LOOKS)
    created.micro_textures = list(DEFAULT_MICRO_TEXTURES)
    created.micro_details = list(DEFAULT_MICRO_DETAILS)
    service.save_project(created)
    return created
