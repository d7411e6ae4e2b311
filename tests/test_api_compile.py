"""Tests for the stateless validate and compile endpoints."""

import pytest


@pytest.fixture
def library_payload(library):
    return {
        "characters": [c.model_dump(mode="json") for c in library.characters],
        "wardrobes": [w.model_dump(mode="json") for w in library.wardrobes],
        "lenses": [lens.model_dump(mode="json") for lens in library.lenses],
        "looks": [look.model_dump(mode="json") for look in library.looks],
    }


class TestStatelessAPI:
    def test_validate(self, client, request_data, library_payload):
        resp = client.post("/api/v1/validate", json={"prompt_request": request_data, "library": library_payload})
        assert resp.status_code == 200
        assert resp.json() == {"errors": [], "can_compile": True}

    def test_validate_with_empty_library(self, client, request_data):
        resp = client.post("/api/v1/validate", json={"prompt_request": request_data})
        data = resp.json()
        assert data["can_compile"] is False
        assert data["errors"][0]["field"] == "cast[0].character_id"

    def test_compile_expanded(self, client, request_data, library_payload):
        body = {"prompt_request": {**request_data, "output_mode": "expanded"}, "library": library_payload}
        resp = client.post("/api/v1/compile", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["text"].startswith("== WHO/WHAT/WHERE ==")
        assert data["seed_summary"] == "[2x3] Milo | medium | 50mm | Cozy Chiaroscuro Interior"

    def test_compile_returns_soft_warnings(self, client, request_data, library_payload):
        body = {
            "prompt_request": {**request_data, "scene_heart": "Milo reads, then naps"},
            "library": library_payload,
        }
        data = client.post("/api/v1/compile", json=body).json()
        assert [w["severity"] for w in data["warnings"]] == ["soft"]

    def test_compile_hard_errors(self, client, library_payload):
        resp = client.post("/api/v1/compile", json={"prompt_request": {}, "library": library_payload})
        assert resp.status_code == 422
        fields = [err["field"] for err in resp.json()["detail"]]
        assert fields[0] == "aspect_ratio"

    def test_compile_without_lenses(self, client, request_data, library_payload):
        library_payload["lenses"] = []
        resp = client.post("/api/v1/compile", json={"prompt_request": request_data, "library": library_payload})
        assert resp.status_code == 422
        assert "Lens library is empty" in resp.json()["detail"]

    def test_unknown_enum_rejected(self, client, request_data, library_payload):
        body = {"prompt_request": {**request_data, "aspect_ratio": "4x5"}, "library": library_payload}
        assert client.post("/api/v1/compile", json=body).status_code == 422
