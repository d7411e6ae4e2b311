"""Entity and project models.

These mirror the JSON records kept in the record store. Enumerated fields are
closed enums, so unknown values are rejected when a record or request body is
parsed rather than deep inside the compiler.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, IntEnum
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_entity_id() -> str:
    return str(uuid4())


def new_prefixed_id(prefix: str) -> str:
    """Short ids used for projects, prompts and history entries (e.g. proj_1a2b3c4d5e6f)."""
    return f"{prefix}_{uuid4().hex[:12]}"


# --- Enumerations ---


class AspectRatio(str, Enum):
    SQUARE = "1x1"
    PORTRAIT = "2x3"
    LANDSCAPE = "3x2"


class OutputMode(str, Enum):
    COMPACT = "compact"
    EXPANDED = "expanded"


class Framing(str, Enum):
    FACE_EMOTION = "face_emotion"
    MEDIUM = "medium"
    FULL_BODY = "full_body"
    WIDE_SCENE = "wide_scene"

    @property
    def label(self) -> str:
        """Human-facing label, e.g. ``full body``."""
        return self.value.replace("_", " ")


class LensMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class LensCategory(str, Enum):
    WIDE = "wide"
    NORMAL = "normal"
    TELE = "tele"
    MACRO = "macro"


class FocalLength(IntEnum):
    MM_24 = 24
    MM_35 = 35
    MM_50 = 50
    MM_85 = 85
    MM_100 = 100
    MM_135 = 135


class EntityKind(str, Enum):
    """Library collections held by a project; values match the Project attribute names."""

    CHARACTERS = "characters"
    WARDROBES = "wardrobes"
    LENSES = "lenses"
    LOOKS = "looks"
    MICRO_TEXTURES = "micro_textures"
    MICRO_DETAILS = "micro_details"


# --- Library entities ---


class Entity(BaseModel):
    """Fields shared by every library entity."""

    id: str = Field(default_factory=new_entity_id, min_length=1)
    ui_name: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_timestamps(self) -> Entity:
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    def touch(self) -> None:
        """Refresh updated_at, never moving it before created_at."""
        self.updated_at = max(utcnow(), self.created_at)


class CharacterHelperFields(BaseModel):
    """Authoring aids rolled into injected_text by hand; the compiler never reads them."""

    species: str | None = None
    anatomy: str | None = None
    face: str | None = None
    materials: str | None = None
    signature_traits: str | None = None
    proportions: str | None = None
    size_notes: str | None = None
    bans: str | None = None


class CharacterProfile(Entity):
    """Identity only; outfits live in WardrobeProfile."""

    injected_text: str = Field(..., min_length=1)
    helper_fields: CharacterHelperFields | None = None


class WardrobeProfile(Entity):
    """One complete outfit."""

    outfit_text: str = Field(..., min_length=1)
    bans_text: str | None = None


class LensProfile(Entity):
    focal_length_mm: FocalLength
    category: LensCategory
    injected_text: str = Field(..., min_length=1)


class RecommendedLensByFraming(BaseModel):
    """Focal length a look recommends for each framing. All four are required."""

    face_emotion: FocalLength
    medium: FocalLength
    full_body: FocalLength
    wide_scene: FocalLength

    def for_framing(self, framing: Framing) -> FocalLength:
        return getattr(self, framing.value)


class LookFamily(Entity):
    """Lighting, colour grade and finish preset."""

    injected_text: str = Field(..., min_length=1)
    when_to_use: str = Field(..., min_length=1)
    produces_summary: list[str] = Field(default_factory=list)
    example_use_case: str | None = None
    optics_bias_notes: str | None = None
    recommended_lens_by_framing: RecommendedLensByFraming


class MicroTexturePack(Entity):
    items: list[str] = Field(default_factory=list)


class MicroDetailPack(Entity):
    items: list[str] = Field(default_factory=list)


ENTITY_MODELS: dict[EntityKind, type[Entity]] = {
    EntityKind.CHARACTERS: CharacterProfile,
    EntityKind.WARDROBES: WardrobeProfile,
    EntityKind.LENSES: LensProfile,
    EntityKind.LOOKS: LookFamily,
    EntityKind.MICRO_TEXTURES: MicroTexturePack,
    EntityKind.MICRO_DETAILS: MicroDetailPack,
}


# --- Prompt requests ---


class CastMember(BaseModel):
    """A character paired with the wardrobe it wears in this prompt."""

    character_id: str = Field(..., min_length=1)
    wardrobe_id: str = ""


class PromptDraft(BaseModel):
    """A prompt request as it is being edited; any field may still be missing."""

    aspect_ratio: AspectRatio | None = None
    output_mode: OutputMode | None = None
    scene_heart: str | None = None
    cast: list[CastMember] = Field(default_factory=list)
    framing: Framing | None = None
    lens_mode: LensMode | None = None
    lens_profile_id: str | None = None
    look_family_id: str | None = None
    environment_anchors: list[str] = Field(default_factory=list)
    mechanic_lock: str | None = None
    focus_target: str | None = None
    selected_micro_textures: list[str] = Field(default_factory=list)
    selected_micro_details: list[str] = Field(default_factory=list)

    def to_request(self) -> PromptRequest:
        """Build the compilation unit. Raises pydantic.ValidationError if a required field is missing."""
        return PromptRequest.model_validate(self.model_dump(exclude_none=True))


class PromptRequest(PromptDraft):
    """A complete prompt request, ready for the compiler."""

    aspect_ratio: AspectRatio
    output_mode: OutputMode = OutputMode.COMPACT
    scene_heart: str
    cast: list[CastMember] = Field(..., min_length=1)
    framing: Framing = Framing.MEDIUM
    lens_mode: LensMode = LensMode.AUTO
    look_family_id: str
    environment_anchors: list[str]
    mechanic_lock: str
    focus_target: str

    def to_request(self) -> PromptRequest:
        return self


# --- Project container ---


class PromptHistoryEntry(BaseModel):
    id: str = Field(default_factory=lambda: new_prefixed_id("hist"))
    prompt_request: PromptDraft = Field(default_factory=PromptDraft)
    saved_at: datetime = Field(default_factory=utcnow)
    note: str | None = None


class ProjectPrompt(BaseModel):
    id: str = Field(default_factory=lambda: new_prefixed_id("prompt"))
    title: str
    prompt_request: PromptDraft = Field(default_factory=PromptDraft)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    history: list[PromptHistoryEntry] = Field(default_factory=list)


class Project(BaseModel):
    """The unit of persistence: every entity and prompt of one project."""

    id: str = Field(default_factory=lambda: new_prefixed_id("proj"))
    name: str = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    characters: list[CharacterProfile] = Field(default_factory=list)
    wardrobes: list[WardrobeProfile] = Field(default_factory=list)
    lenses: list[LensProfile] = Field(default_factory=list)
    looks: list[LookFamily] = Field(default_factory=list)
    micro_textures: list[MicroTexturePack] = Field(default_factory=list)
    micro_details: list[MicroDetailPack] = Field(default_factory=list)
    prompts: list[ProjectPrompt] = Field(default_factory=list)

    def collection(self, kind: EntityKind) -> list:
        return getattr(self, kind.value)

    def find_prompt(self, prompt_id: str) -> ProjectPrompt | None:
        for prompt in self.prompts:
            if prompt.id == prompt_id:
                return prompt
        return None

    def touch(self) -> None:
        self.updated_at = max(utcnow(), self.created_at)


class ProjectSummary(BaseModel):
    """Row shown in project listings."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    prompt_count: int = 0
    character_count: int = 0
    wardrobe_count: int = 0

    @classmethod
    def from_project(cls, project: Project) -> ProjectSummary:
        return cls(
            id=project.id,
            name=project.name,
            created_at=project.created_at,
            updated_at=project.updated_at,
            prompt_count=len(project.prompts),
            character_count=len(project.characters),
            wardrobe_count=len(project.wardrobes),
        )
