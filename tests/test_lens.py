"""Tests for lens resolution."""

import pytest

from prompt_shop.core.lens import (
    AUTO_MAPPING_MISSING,
    NO_SUITABLE_LENS,
    EmptyLensLibraryError,
    LensSource,
    resolve_lens,
    resolve_library_lens,
)
from prompt_shop.core.library import EntityLibrary
from prompt_shop.db.models import FocalLength, LensCategory, LensProfile, PromptDraft
from tests.constants import COZY_LOOK_ID, LENS_35_ID, LENS_50_ID, LENS_85_ID, STUDIO_LOOK_ID


def _lens(lens_id: str, focal: int) -> LensProfile:
    return LensProfile(
        id=lens_id,
        ui_name=f"{focal}mm",
        focal_length_mm=FocalLength(focal),
        category=LensCategory.NORMAL,
        injected_text=f"{focal}mm lens",
    )


class TestResolveLens:
    @pytest.mark.parametrize(
        "framing, expected",
        [
            ("face_emotion", 85),
            ("medium", 50),
            ("full_body", 35),
            ("wide_scene", 24),
        ],
    )
    def test_auto_follows_look_recommendation(self, library, framing, expected):
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, framing=framing, lens_mode="auto")
        resolved = resolve_lens(draft, library.looks, library.lenses)
        assert resolved.focal_length_mm == expected
        assert resolved.source == LensSource.AUTO
        assert resolved.warning is None

    def test_studio_look_prefers_85_for_medium(self, library):
        draft = PromptDraft(look_family_id=STUDIO_LOOK_ID, framing="medium")
        resolved = resolve_lens(draft, library.looks, library.lenses)
        assert resolved.profile.id == LENS_85_ID

    def test_missing_framing_defaults_to_medium(self, library):
        draft = PromptDraft(look_family_id=COZY_LOOK_ID)
        assert resolve_lens(draft, library.looks, library.lenses).profile.id == LENS_50_ID

    def test_manual_lens_is_used(self, library):
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, lens_mode="manual", lens_profile_id=LENS_35_ID)
        resolved = resolve_lens(draft, library.looks, library.lenses)
        assert resolved.profile.id == LENS_35_ID
        assert resolved.source == LensSource.MANUAL
        assert resolved.warning is None

    def test_manual_with_deleted_lens_falls_back_to_auto(self, library):
        draft = PromptDraft(
            look_family_id=COZY_LOOK_ID, framing="face_emotion", lens_mode="manual", lens_profile_id="gone"
        )
        resolved = resolve_lens(draft, library.looks, library.lenses)
        assert resolved.profile.id == LENS_85_ID
        assert resolved.source == LensSource.AUTO

    def test_auto_ignores_lens_profile_id(self, library):
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, lens_mode="auto", lens_profile_id=LENS_35_ID)
        assert resolve_lens(draft, library.looks, library.lenses).profile.id == LENS_50_ID

    def test_unknown_look_falls_back_to_50mm(self, library):
        draft = PromptDraft(look_family_id="look-gone", framing="face_emotion")
        resolved = resolve_lens(draft, library.looks, library.lenses)
        assert resolved.profile.id == LENS_50_ID
        assert resolved.source == LensSource.AUTO
        assert resolved.warning == AUTO_MAPPING_MISSING

    def test_recommended_focal_not_in_library(self, library):
        lenses = [_lens("l-35", 35), _lens("l-50", 50)]
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, framing="face_emotion")
        resolved = resolve_lens(draft, library.looks, lenses)
        assert resolved.profile.id == "l-50"
        assert resolved.warning == AUTO_MAPPING_MISSING

    def test_first_lens_when_no_50mm(self):
        lenses = [_lens("l-135", 135), _lens("l-24", 24)]
        resolved = resolve_lens(PromptDraft(look_family_id="none"), [], lenses)
        assert resolved.profile.id == "l-135"
        assert resolved.warning == NO_SUITABLE_LENS

    def test_first_match_wins_on_duplicate_focal_length(self, library):
        lenses = [_lens("first-50", 50), _lens("second-50", 50)]
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, framing="medium")
        assert resolve_lens(draft, library.looks, lenses).profile.id == "first-50"

    def test_empty_library_raises(self, library):
        with pytest.raises(EmptyLensLibraryError):
            resolve_lens(PromptDraft(look_family_id=COZY_LOOK_ID), library.looks, [])

    def test_to_dict(self, library):
        resolved = resolve_lens(PromptDraft(look_family_id=COZY_LOOK_ID), library.looks, library.lenses)
        data = resolved.to_dict()
        assert data["source"] == "auto"
        assert data["profile"]["focal_length_mm"] == 50
        assert data["warning"] is None

    def test_manual_lens_with_duplicate_id_uses_first(self, library):
        lenses = [_lens("dup", 85), _lens("dup", 24)]
        draft = PromptDraft(look_family_id=COZY_LOOK_ID, lens_mode="manual", lens_profile_id="dup")
        assert resolve_lens(draft, library.looks, lenses).focal_length_mm == 85


class TestResolveLibraryLens:
    def test_matches_list_resolution(self, library):
        draft = PromptDraft(look_family_id=STUDIO_LOOK_ID, framing="face_emotion")
        assert resolve_library_lens(draft, library) == resolve_lens(draft, library.looks, library.lenses)

    def test_empty_library_raises(self, library):
        with pytest.raises(EmptyLensLibraryError):
            resolve_library_lens(PromptDraft(look_family_id=COZY_LOOK_ID), EntityLibrary(looks=library.looks))
