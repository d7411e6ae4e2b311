"""Entity Library: a read-only, id-indexed snapshot of a project's building blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from prompt_shop.db.models import (
    CharacterProfile,
    FocalLength,
    LensProfile,
    LookFamily,
    MicroDetailPack,
    MicroTexturePack,
    Project,
    WardrobeProfile,
)


def _index(entities: list[Any]) -> dict[str, Any]:
    # First entity wins when ids collide, matching a linear scan.
    index: dict[str, Any] = {}
    for entity in entities:
        index.setdefault(entity.id, entity)
    return index


@dataclass(frozen=True)
class EntityLibrary:
    """Entity lists in library order plus lookup indexes keyed by id.

    Lookups return None for unknown ids; callers decide whether a missing
    entity is an error.
    """

    characters: list[CharacterProfile] = field(default_factory=list)
    wardrobes: list[WardrobeProfile] = field(default_factory=list)
    lenses: list[LensProfile] = field(default_factory=list)
    looks: list[LookFamily] = field(default_factory=list)
    micro_textures: list[MicroTexturePack] = field(default_factory=list)
    micro_details: list[MicroDetailPack] = field(default_factory=list)
    _by_id: dict[str, dict[str, Any]] = field(default_factory=dict, init=False, repr=False, compare=False)
    _by_focal_length: dict[FocalLength, LensProfile] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for name in ("characters", "wardrobes", "lenses", "looks", "micro_textures", "micro_details"):
            self._by_id[name] = _index(getattr(self, name))
        for lens in self.lenses:
            self._by_focal_length.setdefault(lens.focal_length_mm, lens)

    @classmethod
    def from_project(cls, project: Project) -> EntityLibrary:
        return cls(
            characters=list(project.characters),
            wardrobes=list(project.wardrobes),
            lenses=list(project.lenses),
            looks=list(project.looks),
            micro_textures=list(project.micro_textures),
            micro_details=list(project.micro_details),
        )

    def get_character(self, entity_id: str | None) -> CharacterProfile | None:
        return self._by_id["characters"].get(entity_id) if entity_id else None

    def get_wardrobe(self, entity_id: str | None) -> WardrobeProfile | None:
        return self._by_id["wardrobes"].get(entity_id) if entity_id else None

    def get_lens(self, entity_id: str | None) -> LensProfile | None:
        return self._by_id["lenses"].get(entity_id) if entity_id else None

    def get_look(self, entity_id: str | None) -> LookFamily | None:
        return self._by_id["looks"].get(entity_id) if entity_id else None

    def get_micro_texture(self, entity_id: str | None) -> MicroTexturePack | None:
        return self._by_id["micro_textures"].get(entity_id) if entity_id else None

    def get_micro_detail(self, entity_id: str | None) -> MicroDetailPack | None:
        return self._by_id["micro_details"].get(entity_id) if entity_id else None

    def first_lens_at(self, focal_length: FocalLength) -> LensProfile | None:
        """First lens in library order with the given focal length."""
        return self._by_focal_length.get(focal_length)
