"""Validator: checks a prompt draft against the entity library before compilation.

Hard errors block compilation; soft errors are warnings shown alongside the
compiled prompt. Nothing here raises or logs: every finding is returned.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from prompt_shop.core.library import EntityLibrary
from prompt_shop.db.models import (
    CharacterProfile,
    Framing,
    LensMode,
    LensProfile,
    LookFamily,
    PromptDraft,
    WardrobeProfile,
)

MIN_ANCHORS = 3
MAX_ANCHORS = 5

_MULTI_ACTION = re.compile(r"\b(then|after|next|before)\b", re.IGNORECASE)
_VAGUE_ANCHOR = re.compile(r"^(stuff|things|items|objects|misc|etc)$", re.IGNORECASE)
_WIDE_FOCAL_LENGTHS = {24, 35}


class Severity(str, Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    severity: Severity

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "severity": self.severity.value}


def _blank(value: str | None) -> bool:
    return not (value and value.strip())


def count_anchors(anchors: list[str]) -> int:
    """Number of anchors that are non-blank after trimming."""
    return sum(1 for anchor in anchors if anchor.strip())


def validate(
    request: PromptDraft,
    characters: list[CharacterProfile],
    wardrobes: list[WardrobeProfile],
    looks: list[LookFamily],
    lenses: list[LensProfile],
) -> list[ValidationError]:
    """Validate a (possibly partial) prompt request.

    Returns hard errors first, then soft warnings. ``looks`` is accepted so
    callers can pass the whole library; a dangling look id is not an error
    because the compiler degrades gracefully without one.
    """
    errors: list[ValidationError] = []
    library = EntityLibrary(
        characters=list(characters),
        wardrobes=list(wardrobes),
        looks=list(looks),
        lenses=list(lenses),
    )

    def hard(field: str, message: str) -> None:
        errors.append(ValidationError(field, message, Severity.HARD))

    def soft(field: str, message: str) -> None:
        errors.append(ValidationError(field, message, Severity.SOFT))

    if request.aspect_ratio is None:
        hard("aspect_ratio", "Aspect ratio is required")
    if _blank(request.scene_heart):
        hard("scene_heart", "Scene heart is required")
    if not request.cast:
        hard("cast", "At least one cast member is required")

    for idx, member in enumerate(request.cast):
        character = library.get_character(member.character_id)
        if member.character_id and character is None:
            hard(f"cast[{idx}].character_id", f"Character '{member.character_id}' no longer exists")
        if not member.wardrobe_id:
            name = character.ui_name if character else "Character"
            hard(f"cast[{idx}].wardrobe_id", f"{name} is missing wardrobe binding")
        elif library.get_wardrobe(member.wardrobe_id) is None:
            hard(f"cast[{idx}].wardrobe_id", f"Wardrobe '{member.wardrobe_id}' no longer exists")

    anchor_count = count_anchors(request.environment_anchors)
    if anchor_count < MIN_ANCHORS:
        hard("environment_anchors", f"At least {MIN_ANCHORS} environment anchors required")
    if anchor_count > MAX_ANCHORS:
        hard("environment_anchors", f"Maximum {MAX_ANCHORS} environment anchors allowed")

    if _blank(request.mechanic_lock):
        hard("mechanic_lock", "Mechanic lock is required")
    if _blank(request.focus_target):
        hard("focus_target", "Focus target is required")
    if not request.look_family_id:
        hard("look_family_id", "Look family is required")
    if request.lens_mode == LensMode.MANUAL and not request.lens_profile_id:
        hard("lens_profile_id", "Lens profile required in manual mode")

    if request.scene_heart and _MULTI_ACTION.search(request.scene_heart):
        soft("scene_heart", "Scene heart may contain multi-action phrases (then/after/next/before)")

    if (
        request.lens_mode == LensMode.MANUAL
        and request.lens_profile_id
        and request.framing == Framing.FACE_EMOTION
    ):
        lens = library.get_lens(request.lens_profile_id)
        if lens is not None and int(lens.focal_length_mm) in _WIDE_FOCAL_LENGTHS:
            soft("lens_profile_id", "Wide lens with tight face framing may cause distortion")

    if any(_VAGUE_ANCHOR.match(anchor.strip()) for anchor in request.environment_anchors):
        soft("environment_anchors", "Some anchors may be too vague")

    return errors


def can_compile(errors: list[ValidationError]) -> bool:
    """True when no hard error is present."""
    return not any(error.severity == Severity.HARD for error in errors)


def hard_errors(errors: list[ValidationError]) -> list[ValidationError]:
    return [error for error in errors if error.severity == Severity.HARD]


def soft_errors(errors: list[ValidationError]) -> list[ValidationError]:
    return [error for error in errors if error.severity == Severity.SOFT]
