"""Pydantic request/response models for the API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from prompt_shop.core.compiler import CompiledPrompt
from prompt_shop.core.library import EntityLibrary
from prompt_shop.core.one_and_done import OneAndDoneOptions
from prompt_shop.core.validator import ValidationError
from prompt_shop.db.models import (
    CharacterProfile,
    Framing,
    LensProfile,
    LookFamily,
    MicroDetailPack,
    MicroTexturePack,
    PromptDraft,
    PromptHistoryEntry,
    ProjectPrompt,
    WardrobeProfile,
)

# --- Projects ---


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class ProjectUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


# --- Prompts ---


class PromptCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    prompt_request: PromptDraft | None = None


class PromptRename(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class HistoryCreate(BaseModel):
    note: str | None = None


class PromptResponse(BaseModel):
    id: str
    title: str
    prompt_request: PromptDraft
    created_at: datetime
    updated_at: datetime
    history: list[PromptHistoryEntry] = Field(default_factory=list)

    @classmethod
    def from_prompt(cls, prompt: ProjectPrompt) -> PromptResponse:
        return cls(**prompt.model_dump())


# --- Validation & compilation ---


class ValidationErrorOut(BaseModel):
    field: str
    message: str
    severity: str

    @classmethod
    def from_error(cls, error: ValidationError) -> ValidationErrorOut:
        return cls(**error.to_dict())


class ValidateResponse(BaseModel):
    errors: list[ValidationErrorOut]
    can_compile: bool


class ResolvedLensOut(BaseModel):
    profile: LensProfile
    source: str
    warning: str | None = None


class CompileResponse(BaseModel):
    text: str
    seed_summary: str
    resolved_lens: ResolvedLensOut
    warnings: list[ValidationErrorOut] = Field(default_factory=list)

    @classmethod
    def build(cls, compiled: CompiledPrompt, errors: list[ValidationError]) -> CompileResponse:
        return cls(
            text=compiled.text,
            seed_summary=compiled.seed_summary,
            resolved_lens=ResolvedLensOut(
                profile=compiled.resolved_lens.profile,
                source=compiled.resolved_lens.source.value,
                warning=compiled.resolved_lens.warning,
            ),
            warnings=[ValidationErrorOut.from_error(e) for e in errors],
        )


class LibraryPayload(BaseModel):
    """A full entity library sent inline for stateless validate/compile."""

    characters: list[CharacterProfile] = Field(default_factory=list)
    wardrobes: list[WardrobeProfile] = Field(default_factory=list)
    lenses: list[LensProfile] = Field(default_factory=list)
    looks: list[LookFamily] = Field(default_factory=list)
    micro_textures: list[MicroTexturePack] = Field(default_factory=list)
    micro_details: list[MicroDetailPack] = Field(default_factory=list)

    def to_library(self) -> EntityLibrary:
        return EntityLibrary(
            characters=self.characters,
            wardrobes=self.wardrobes,
            lenses=self.lenses,
            looks=self.looks,
            micro_textures=self.micro_textures,
            micro_details=self.micro_details,
        )


class StatelessRequest(BaseModel):
    prompt_request: PromptDraft
    library: LibraryPayload = Field(default_factory=LibraryPayload)


# --- Global library ---


class ImportGlobalRequest(BaseModel):
    character_ids: list[str] = Field(default_factory=list)
    wardrobe_ids: list[str] = Field(default_factory=list)


# --- Suggestions ---


class AnchorsRequest(BaseModel):
    scene_heart: str = Field(..., min_length=1)
    location_type: str | None = None


class MechanicLocksRequest(BaseModel):
    scene_heart: str = Field(..., min_length=1)
    cast_snippets: list[str] = Field(default_factory=list)
    framing: Framing | None = None


class FocusTargetsRequest(BaseModel):
    scene_heart: str = Field(..., min_length=1)
    framing: Framing | None = None
    lens: str | None = None


class MicroDetailsRequest(BaseModel):
    scene_heart: str = Field(..., min_length=1)
    environment_anchors: list[str] = Field(default_factory=list)


class QARequest(BaseModel):
    prompt_request: PromptDraft


class EnvironmentRequest(BaseModel):
    image_base64: str = Field(..., min_length=1)
    mime_type: str = "image/png"


class SceneContext(BaseModel):
    scene_heart: str
    cast_summaries: list[str] = Field(default_factory=list)
    framing: Framing = Framing.MEDIUM
    mechanic_lock: str | None = None
    focus_target: str | None = None
    existing_anchors: list[str] = Field(default_factory=list)


class UpgradeSceneHeartRequest(SceneContext):
    look_family_name: str | None = None


class OneAndDoneRequest(SceneContext):
    options: OneAndDoneOptions = Field(default_factory=OneAndDoneOptions)
