"""Response shapes expected from the suggestion model.

A response that does not match raises pydantic.ValidationError, which the
client reports as INVALID_FORMAT.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class AnchorSuggestions(BaseModel):
    anchor_candidates: list[str] = Field(..., min_length=10, max_length=10)
    recommended: list[str] = Field(..., min_length=5, max_length=5)


class MechanicLockSuggestions(BaseModel):
    mechanic_locks: list[str] = Field(..., min_length=5, max_length=5)


class FocusTargetSuggestions(BaseModel):
    focus_targets: list[str] = Field(..., min_length=3, max_length=3)


class MicroDetailSuggestions(BaseModel):
    micro_details: list[str] = Field(..., min_length=12, max_length=12)


class QASuggestions(BaseModel):
    warnings: list[str] = Field(default_factory=list)
    suggested_fixes: list[str] = Field(default_factory=list)


class SceneHeartVersions(BaseModel):
    clean: str
    cinematic: str
    precise: str


class SceneHeartUpgrade(BaseModel):
    versions: SceneHeartVersions
    anchor_candidates: list[str] = Field(..., min_length=8, max_length=12)
    recommended_anchors: list[str] = Field(..., min_length=3, max_length=5)


class StageAnchor(BaseModel):
    name: str
    position: str
    material_texture: str
    unique_detail: str


class EnvironmentAnalysis(BaseModel):
    """Environment fields read off a single reference image."""

    scene_description: str
    stage_anchors: list[StageAnchor] = Field(..., min_length=3, max_length=5)
    spatial_layout_notes: str
    lighting_notes: str
    color_palette_grade_notes: str
    camera_view_notes: str
    environment_do_not_change_constraints: str

    @property
    def anchor_names(self) -> list[str]:
        """Anchor names, ready to drop into a prompt's environment anchors."""
        return [anchor.name.strip() for anchor in self.stage_anchors if anchor.name.strip()]
