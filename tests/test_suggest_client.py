"""Tests for the AI suggestion client."""

import json

import httpx
import pytest

from prompt_shop.core.one_and_done import OneAndDoneOptions
from prompt_shop.db.models import Framing, PromptDraft
from prompt_shop.suggest.client import SuggestionClient, SuggestionError, extract_json, json_system_prompt


def _completion(content) -> dict:
    return {"choices": [{"message": {"content": content}}]}


def _client(handler, api_key: str = "test-key") -> SuggestionClient:
    return SuggestionClient(
        api_url="https://ai.test/chat/completions",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestExtractJson:
    def test_raw_json(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced_block(self):
        assert extract_json('Here you go:\n```json\n{"a": 1}\n```') == {"a": 1}

    def test_first_object_in_prose(self):
        assert extract_json('Sure! {"a": [1, 2]} Hope that helps.') == {"a": [1, 2]}

    def test_unparseable(self):
        with pytest.raises(SuggestionError) as exc:
            extract_json("no json here")
        assert exc.value.code == "INVALID_JSON"

    def test_system_prompt_carries_schema(self):
        prompt = json_system_prompt("Be helpful.", '{"x": "string"}')
        assert prompt.startswith("Be helpful.\n\nCRITICAL:")
        assert '{"x": "string"}' in prompt


class TestCallLLM:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"ok": true}'))

        result = await _client(handler)._call_llm("system text", "user text", temperature=0.2, max_tokens=99)
        assert result == {"ok": True}
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "sonar-pro"
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert seen["body"]["temperature"] == 0.2
        assert seen["body"]["max_tokens"] == 99

    @pytest.mark.asyncio
    async def test_missing_key(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(SuggestionError) as exc:
            await _client(handler, api_key="")._call_llm("s", "u")
        assert exc.value.code == "MISSING_API_KEY"

    @pytest.mark.asyncio
    async def test_http_error_uses_upstream_message(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "Too many requests"}})

        with pytest.raises(SuggestionError) as exc:
            await _client(handler)._call_llm("s", "u")
        assert exc.value.code == "HTTP_429"
        assert exc.value.message == "Too many requests"

    @pytest.mark.asyncio
    async def test_http_error_without_body(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        with pytest.raises(SuggestionError) as exc:
            await _client(handler)._call_llm("s", "u")
        assert exc.value.code == "HTTP_500"
        assert exc.value.message == "API error: 500"

    @pytest.mark.asyncio
    async def test_empty_content(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(SuggestionError) as exc:
            await _client(handler)._call_llm("s", "u")
        assert exc.value.code == "EMPTY_RESPONSE"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(SuggestionError) as exc:
            await _client(handler)._call_llm("s", "u")
        assert exc.value.code == "NETWORK_ERROR"

    @pytest.mark.asyncio
    async def test_structured_content_passes_through(self):
        def handler(request):
            return httpx.Response(200, json=_completion({"already": "parsed"}))

        assert await _client(handler)._call_llm("s", "u") == {"already": "parsed"}


class TestOperations:
    @pytest.mark.asyncio
    async def test_suggest_mechanic_locks_prompt(self):
        seen = {}

        def handler(request):
            seen["user"] = json.loads(request.content)["messages"][1]["content"]
            locks = [f"lock {i}" for i in range(5)]
            return httpx.Response(200, json=_completion(json.dumps({"mechanic_locks": locks})))

        result = await _client(handler).suggest_mechanic_locks("A fox", ["Milo the fox"], framing=Framing.MEDIUM)
        assert len(result.mechanic_locks) == 5
        assert "Cast members: Milo the fox" in seen["user"]
        assert "Framing: medium" in seen["user"]

    @pytest.mark.asyncio
    async def test_wrong_count_is_invalid_format(self):
        def handler(request):
            return httpx.Response(200, json=_completion('{"micro_details": ["only one"]}'))

        with pytest.raises(SuggestionError) as exc:
            await _client(handler).suggest_micro_details("A fox", ["desk"])
        assert exc.value.code == "INVALID_FORMAT"

    @pytest.mark.asyncio
    async def test_qa_review_includes_draft(self):
        seen = {}

        def handler(request):
            seen["user"] = json.loads(request.content)["messages"][1]["content"]
            return httpx.Response(200, json=_completion('{"warnings": ["w"], "suggested_fixes": ["f"]}'))

        draft = PromptDraft(scene_heart="A fox naps", environment_anchors=["desk", " "])
        result = await _client(handler).qa_review(draft)
        assert result.warnings == ["w"]
        assert 'Scene Heart: "A fox naps"' in seen["user"]
        assert "Environment Anchors: desk\n" in seen["user"]
        assert "Framing: Not specified" in seen["user"]

    @pytest.mark.asyncio
    async def test_upgrade_scene_heart(self):
        seen = {}

        def handler(request):
            body = json.loads(request.content)
            seen["temperature"] = body["temperature"]
            seen["max_tokens"] = body["max_tokens"]
            payload = {
                "versions": {"clean": "c", "cinematic": "ci", "precise": "p"},
                "anchor_candidates": [f"a{i}" for i in range(8)],
                "recommended_anchors": ["a0", "a1", "a2"],
            }
            return httpx.Response(200, json=_completion(f"```json\n{json.dumps(payload)}\n```"))

        result = await _client(handler).upgrade_scene_heart("A fox reads a map by the fire tonight")
        assert result.versions.cinematic == "ci"
        assert seen == {"temperature": 0.5, "max_tokens": 2048}

    @pytest.mark.asyncio
    async def test_upgrade_rejects_short_scene_heart(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(ValueError):
            await _client(handler).upgrade_scene_heart("too short")

    @pytest.mark.asyncio
    async def test_one_and_done_lists_options(self):
        seen = {}

        def handler(request):
            seen["user"] = json.loads(request.content)["messages"][1]["content"]
            payload = {
                "ultra_precise_prompt": {"text": "x", "confidence": "high"},
                "environment_anchors": {"anchors": ["a", "b", "c"], "confidence": "high"},
                "look_lens": {"look_family_id": "look-a", "lens_mode": "auto", "confidence": "high"},
                "mechanic_lock": {"text": "m", "confidence": "high"},
                "focus_target": {"text": "f", "confidence": "high"},
                "micro_packs": {"texture_pack_ids": ["tex-1"], "confidence": "medium"},
            }
            return httpx.Response(200, json=_completion(json.dumps(payload)))

        options = OneAndDoneOptions.model_validate(
            {
                "look_families": [{"id": "look-a", "name": "Look A"}],
                "micro_texture_packs": [{"id": "tex-1", "name": "Fur"}],
            }
        )
        result = await _client(handler).one_and_done("A fox reads a map", options)
        assert result.look_lens.valid
        assert result.micro_packs.value.texture_pack_ids == ["tex-1"]
        assert '"id": "look-a"' in seen["user"]

    @pytest.mark.asyncio
    async def test_one_and_done_requires_scene_heart(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(ValueError):
            await _client(handler).one_and_done("  ", OneAndDoneOptions())


def _environment_payload(anchor_count: int = 3) -> dict:
    return {
        "scene_description": "A cluttered attic study with a slanted timber ceiling.",
        "stage_anchors": [
            {
                "name": f"anchor {i}",
                "position": "left midground near",
                "material_texture": "scuffed oak",
                "unique_detail": "brass corner plates",
            }
            for i in range(anchor_count)
        ],
        "spatial_layout_notes": "- desk under the window",
        "lighting_notes": "- warm lamp key from the left",
        "color_palette_grade_notes": "- amber and walnut",
        "camera_view_notes": "- eye level",
        "environment_do_not_change_constraints": "keep the round window",
    }


class TestAnalyzeEnvironment:
    @pytest.mark.asyncio
    async def test_sends_image_as_data_url(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user"] = json.loads(request.content)["messages"][1]["content"]
            return httpx.Response(200, json=_completion(json.dumps(_environment_payload(4))))

        analysis = await _client(handler).analyze_environment(b"\x89PNG", "image/png")
        assert [part["type"] for part in seen["user"]] == ["text", "image_url"]
        assert seen["user"][1]["image_url"]["url"] == "data:image/png;base64,iVBORw=="
        assert analysis.anchor_names == ["anchor 0", "anchor 1", "anchor 2", "anchor 3"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("anchor_count", [2, 6])
    async def test_anchor_count_outside_three_to_five(self, anchor_count):
        def handler(request):
            return httpx.Response(200, json=_completion(json.dumps(_environment_payload(anchor_count))))

        with pytest.raises(SuggestionError) as exc:
            await _client(handler).analyze_environment(b"\x89PNG")
        assert exc.value.code == "INVALID_FORMAT"

    @pytest.mark.asyncio
    async def test_empty_image(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(ValueError):
            await _client(handler).analyze_environment(b"")
