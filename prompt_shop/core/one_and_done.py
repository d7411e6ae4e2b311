"""One & Done: checks an AI suggestion bundle against the project's real options.

The model is told to pick only from the ids it was shown, but nothing forces
it to. Every recommendation is re-checked here and marked valid or invalid with
a reason; nothing is applied to a prompt automatically.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from prompt_shop.db.models import LensMode

T = TypeVar("T")


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# --- Suggestion bundle, as returned by the model ---


class ConfidentText(BaseModel):
    text: str = ""
    confidence: Confidence


class SuggestedAnchors(BaseModel):
    anchors: list[str] = Field(default_factory=list)
    confidence: Confidence


class LookLensRecommendation(BaseModel):
    look_family_id: str
    lens_mode: LensMode
    lens_profile_id: str | None = None


class SuggestedLookLens(LookLensRecommendation):
    confidence: Confidence
    alternate: LookLensRecommendation | None = None


class SuggestedMicroPacks(BaseModel):
    texture_pack_ids: list[str] = Field(default_factory=list)
    detail_pack_ids: list[str] = Field(default_factory=list)
    confidence: Confidence


class OneAndDoneSuggestion(BaseModel):
    ultra_precise_prompt: ConfidentText
    environment_anchors: SuggestedAnchors
    look_lens: SuggestedLookLens
    mechanic_lock: ConfidentText
    focus_target: ConfidentText
    micro_packs: SuggestedMicroPacks
    assumptions: list[str] = Field(default_factory=list)


# --- Options offered to the model ---


class OneAndDoneOption(BaseModel):
    id: str
    name: str


class LensOption(OneAndDoneOption):
    focal_length_mm: int | None = None
    category: str | None = None


class OneAndDoneOptions(BaseModel):
    look_families: list[OneAndDoneOption] = Field(default_factory=list)
    lens_profiles: list[LensOption] = Field(default_factory=list)
    micro_texture_packs: list[OneAndDoneOption] = Field(default_factory=list)
    micro_detail_packs: list[OneAndDoneOption] = Field(default_factory=list)


# --- Validated result ---


class Recommendation(BaseModel, Generic[T]):
    value: T | None = None
    confidence: Confidence
    valid: bool
    reason: str | None = None


class MicroPackSelection(BaseModel):
    texture_pack_ids: list[str] = Field(default_factory=list)
    detail_pack_ids: list[str] = Field(default_factory=list)


class LookLensResult(Recommendation[LookLensRecommendation]):
    alternate: LookLensRecommendation | None = None


class ValidatedSuggestion(BaseModel):
    ultra_precise_prompt: Recommendation[str]
    environment_anchors: Recommendation[list[str]]
    look_lens: LookLensResult
    mechanic_lock: Recommendation[str]
    focus_target: Recommendation[str]
    micro_packs: Recommendation[MicroPackSelection]
    assumptions: list[str] = Field(default_factory=list)


NO_PROMPT_REWRITE = "AI did not provide a prompt rewrite."
NO_MECHANIC_LOCK = "AI did not provide a mechanic lock recommendation."
NO_FOCUS_TARGET = "AI did not provide a focus target recommendation."
ANCHOR_COUNT = "Anchors must include 3-5 placement-aware items."
NO_LOOKS_AVAILABLE = "No look families are available in this project."
LOOK_LENS_UNAVAILABLE = "Recommended look/lens is not available."
USING_ALTERNATE = "Primary look/lens was invalid; using alternate recommendation."
NO_MATCHING_PACKS = "No valid micro pack recommendations matched your options."
NO_PACKS_AVAILABLE = "No micro packs are available in this project."


def _text(suggested: ConfidentText, missing_reason: str) -> Recommendation[str]:
    value = suggested.text.strip()
    return Recommendation[str](
        value=value,
        confidence=suggested.confidence,
        valid=bool(value),
        reason=None if value else missing_reason,
    )


def _check_look_lens(
    recommendation: LookLensRecommendation,
    look_ids: set[str],
    lens_ids: set[str],
) -> tuple[LookLensRecommendation | None, str | None]:
    """Return (normalised recommendation, None) or (None, reason)."""
    if not look_ids:
        return None, NO_LOOKS_AVAILABLE
    has_look = recommendation.look_family_id in look_ids
    if recommendation.lens_mode == LensMode.MANUAL:
        has_lens = bool(recommendation.lens_profile_id) and recommendation.lens_profile_id in lens_ids
    else:
        has_lens = True
    if not (has_look and has_lens):
        return None, LOOK_LENS_UNAVAILABLE
    return (
        LookLensRecommendation(
            look_family_id=recommendation.look_family_id,
            lens_mode=recommendation.lens_mode,
            lens_profile_id=(
                recommendation.lens_profile_id if recommendation.lens_mode == LensMode.MANUAL else None
            ),
        ),
        None,
    )


def validate_suggestion(suggestion: OneAndDoneSuggestion, options: OneAndDoneOptions) -> ValidatedSuggestion:
    """Validate every recommendation in a One & Done bundle against ``options``."""
    look_ids = {option.id for option in options.look_families}
    lens_ids = {option.id for option in options.lens_profiles}

    anchors = suggestion.environment_anchors.anchors
    anchors_valid = 3 <= len(anchors) <= 5

    primary, primary_reason = _check_look_lens(suggestion.look_lens, look_ids, lens_ids)
    alternate = None
    if suggestion.look_lens.alternate is not None:
        alternate, _ = _check_look_lens(suggestion.look_lens.alternate, look_ids, lens_ids)

    look_confidence = suggestion.look_lens.confidence
    if primary is None and alternate is not None:
        look_lens = LookLensResult(
            value=alternate, confidence=look_confidence, valid=True, reason=USING_ALTERNATE
        )
    else:
        look_lens = LookLensResult(
            value=primary,
            confidence=look_confidence,
            valid=primary is not None,
            reason=primary_reason,
            alternate=alternate,
        )

    texture_ids = {option.id for option in options.micro_texture_packs}
    detail_ids = {option.id for option in options.micro_detail_packs}
    kept_textures = [pid for pid in suggestion.micro_packs.texture_pack_ids if pid in texture_ids]
    kept_details = [pid for pid in suggestion.micro_packs.detail_pack_ids if pid in detail_ids]
    has_pack_options = bool(texture_ids or detail_ids)
    packs_valid = has_pack_options and bool(kept_textures or kept_details)
    if packs_valid:
        packs_reason = None
    elif has_pack_options:
        packs_reason = NO_MATCHING_PACKS
    else:
        packs_reason = NO_PACKS_AVAILABLE

    return ValidatedSuggestion(
        ultra_precise_prompt=_text(suggestion.ultra_precise_prompt, NO_PROMPT_REWRITE),
        environment_anchors=Recommendation[list[str]](
            value=list(anchors) if anchors_valid else None,
            confidence=suggestion.environment_anchors.confidence,
            valid=anchors_valid,
            reason=None if anchors_valid else ANCHOR_COUNT,
        ),
        look_lens=look_lens,
        mechanic_lock=_text(suggestion.mechanic_lock, NO_MECHANIC_LOCK),
        focus_target=_text(suggestion.focus_target, NO_FOCUS_TARGET),
        micro_packs=Recommendation[MicroPackSelection](
            value=(
                MicroPackSelection(texture_pack_ids=kept_textures, detail_pack_ids=kept_details)
                if packs_valid
                else None
            ),
            confidence=suggestion.micro_packs.confidence,
            valid=packs_valid,
            reason=packs_reason,
        ),
        assumptions=list(suggestion.assumptions),
    )
