"""Tests for One & Done suggestion validation."""

import pytest

from prompt_shop.core.one_and_done import (
    ANCHOR_COUNT,
    LOOK_LENS_UNAVAILABLE,
    NO_FOCUS_TARGET,
    NO_LOOKS_AVAILABLE,
    NO_MATCHING_PACKS,
    NO_PACKS_AVAILABLE,
    NO_PROMPT_REWRITE,
    USING_ALTERNATE,
    OneAndDoneOptions,
    OneAndDoneSuggestion,
    validate_suggestion,
)
from prompt_shop.db.models import LensMode


@pytest.fixture
def options() -> OneAndDoneOptions:
    return OneAndDoneOptions.model_validate(
        {
            "look_families": [{"id": "look-a", "name": "Look A"}, {"id": "look-b", "name": "Look B"}],
            "lens_profiles": [{"id": "lens-50", "name": "50mm", "focal_length_mm": 50, "category": "normal"}],
            "micro_texture_packs": [{"id": "tex-1", "name": "Fur"}],
            "micro_detail_packs": [{"id": "det-1", "name": "Dust"}],
        }
    )


def _suggestion(**overrides) -> OneAndDoneSuggestion:
    data = {
        "ultra_precise_prompt": {"text": "A fox reads a map by lantern light.", "confidence": "high"},
        "environment_anchors": {"anchors": ["desk", "lantern", "maps"], "confidence": "medium"},
        "look_lens": {
            "look_family_id": "look-a",
            "lens_mode": "manual",
            "lens_profile_id": "lens-50",
            "confidence": "high",
        },
        "mechanic_lock": {"text": "Light spills onto the map.", "confidence": "high"},
        "focus_target": {"text": "The fox's eyes.", "confidence": "low"},
        "micro_packs": {"texture_pack_ids": ["tex-1"], "detail_pack_ids": ["det-1"], "confidence": "medium"},
        "assumptions": ["Night-time interior"],
    }
    data.update(overrides)
    return OneAndDoneSuggestion.model_validate(data)


class TestValidateSuggestion:
    def test_all_valid(self, options):
        result = validate_suggestion(_suggestion(), options)
        assert result.ultra_precise_prompt.valid
        assert result.environment_anchors.value == ["desk", "lantern", "maps"]
        assert result.look_lens.valid
        assert result.look_lens.value.lens_profile_id == "lens-50"
        assert result.micro_packs.value.texture_pack_ids == ["tex-1"]
        assert result.assumptions == ["Night-time interior"]
        assert result.focus_target.confidence.value == "low"

    def test_blank_text_is_invalid(self, options):
        result = validate_suggestion(
            _suggestion(
                ultra_precise_prompt={"text": "   ", "confidence": "high"},
                focus_target={"confidence": "low"},
            ),
            options,
        )
        assert not result.ultra_precise_prompt.valid
        assert result.ultra_precise_prompt.reason == NO_PROMPT_REWRITE
        assert result.focus_target.reason == NO_FOCUS_TARGET

    @pytest.mark.parametrize("count", [2, 6])
    def test_anchor_count_out_of_range(self, options, count):
        anchors = [f"anchor {i}" for i in range(count)]
        result = validate_suggestion(
            _suggestion(environment_anchors={"anchors": anchors, "confidence": "high"}), options
        )
        assert not result.environment_anchors.valid
        assert result.environment_anchors.value is None
        assert result.environment_anchors.reason == ANCHOR_COUNT

    def test_unknown_look_is_invalid(self, options):
        look_lens = {"look_family_id": "look-x", "lens_mode": "auto", "confidence": "high"}
        result = validate_suggestion(_suggestion(look_lens=look_lens), options)
        assert not result.look_lens.valid
        assert result.look_lens.reason == LOOK_LENS_UNAVAILABLE

    def test_manual_without_lens_is_invalid(self, options):
        look_lens = {"look_family_id": "look-a", "lens_mode": "manual", "confidence": "high"}
        result = validate_suggestion(_suggestion(look_lens=look_lens), options)
        assert result.look_lens.reason == LOOK_LENS_UNAVAILABLE

    def test_auto_mode_drops_lens_id(self, options):
        look_lens = {
            "look_family_id": "look-b",
            "lens_mode": "auto",
            "lens_profile_id": "lens-unknown",
            "confidence": "medium",
        }
        result = validate_suggestion(_suggestion(look_lens=look_lens), options)
        assert result.look_lens.valid
        assert result.look_lens.value.lens_mode == LensMode.AUTO
        assert result.look_lens.value.lens_profile_id is None

    def test_falls_back_to_alternate(self, options):
        look_lens = {
            "look_family_id": "look-x",
            "lens_mode": "auto",
            "confidence": "medium",
            "alternate": {"look_family_id": "look-b", "lens_mode": "manual", "lens_profile_id": "lens-50"},
        }
        result = validate_suggestion(_suggestion(look_lens=look_lens), options)
        assert result.look_lens.valid
        assert result.look_lens.reason == USING_ALTERNATE
        assert result.look_lens.value.look_family_id == "look-b"

    def test_valid_primary_keeps_valid_alternate(self, options):
        look_lens = {
            "look_family_id": "look-a",
            "lens_mode": "auto",
            "confidence": "high",
            "alternate": {"look_family_id": "look-b", "lens_mode": "auto"},
        }
        result = validate_suggestion(_suggestion(look_lens=look_lens), options)
        assert result.look_lens.value.look_family_id == "look-a"
        assert result.look_lens.alternate.look_family_id == "look-b"

    def test_no_looks_available(self):
        result = validate_suggestion(_suggestion(), OneAndDoneOptions())
        assert not result.look_lens.valid
        assert result.look_lens.reason == NO_LOOKS_AVAILABLE

    def test_unknown_pack_ids_filtered(self, options):
        packs = {"texture_pack_ids": ["tex-1", "tex-x"], "detail_pack_ids": ["det-x"], "confidence": "high"}
        result = validate_suggestion(_suggestion(micro_packs=packs), options)
        assert result.micro_packs.valid
        assert result.micro_packs.value.texture_pack_ids == ["tex-1"]
        assert result.micro_packs.value.detail_pack_ids == []

    def test_no_matching_packs(self, options):
        packs = {"texture_pack_ids": ["tex-x"], "detail_pack_ids": [], "confidence": "high"}
        result = validate_suggestion(_suggestion(micro_packs=packs), options)
        assert not result.micro_packs.valid
        assert result.micro_packs.reason == NO_MATCHING_PACKS

    def test_no_packs_available(self, options):
        no_packs = options.model_copy(update={"micro_texture_packs": [], "micro_detail_packs": []})
        result = validate_suggestion(_suggestion(), no_packs)
        assert result.micro_packs.reason == NO_PACKS_AVAILABLE
