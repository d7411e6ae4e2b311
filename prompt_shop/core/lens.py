"""Lens Resolver: picks the lens profile a prompt is compiled with.

Resolution order:
- manual: the chosen lens, when it still exists
- auto: the look's recommended focal length for the framing
- fallback: the first 50mm lens in the library
- last resort: the first lens in the library
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from prompt_shop.core.library import EntityLibrary
from prompt_shop.db.models import FocalLength, Framing, LensMode, LensProfile, LookFamily, PromptDraft

AUTO_MAPPING_MISSING = "Lens auto-mapping missing; defaulted to 50mm"
NO_SUITABLE_LENS = "No suitable lens found; using first available"


class LensSource(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class EmptyLensLibraryError(ValueError):
    """Raised when there is no lens at all to resolve to."""


@dataclass(frozen=True)
class ResolvedLens:
    profile: LensProfile
    source: LensSource
    warning: str | None = None

    @property
    def focal_length_mm(self) -> int:
        return int(self.profile.focal_length_mm)

    def to_dict(self) -> dict:
        return {
            "profile": self.profile.model_dump(mode="json"),
            "source": self.source.value,
            "warning": self.warning,
        }


def resolve_library_lens(request: PromptDraft, library: EntityLibrary) -> ResolvedLens:
    """Resolve the lens for a request against an indexed library.

    Raises EmptyLensLibraryError if the library has no lenses.
    """
    if not library.lenses:
        raise EmptyLensLibraryError("Lens library is empty; cannot resolve a lens")

    if request.lens_mode == LensMode.MANUAL:
        chosen = library.get_lens(request.lens_profile_id)
        if chosen is not None:
            return ResolvedLens(chosen, LensSource.MANUAL)

    look = library.get_look(request.look_family_id)
    if look is not None:
        framing = request.framing or Framing.MEDIUM
        recommended = library.first_lens_at(look.recommended_lens_by_framing.for_framing(framing))
        if recommended is not None:
            return ResolvedLens(recommended, LensSource.AUTO)

    fallback = library.first_lens_at(FocalLength.MM_50)
    if fallback is not None:
        return ResolvedLens(fallback, LensSource.AUTO, AUTO_MAPPING_MISSING)

    return ResolvedLens(library.lenses[0], LensSource.AUTO, NO_SUITABLE_LENS)


def resolve_lens(
    request: PromptDraft,
    looks: list[LookFamily],
    lenses: list[LensProfile],
) -> ResolvedLens:
    """Resolve the lens for a request. Raises EmptyLensLibraryError if ``lenses`` is empty."""
    return resolve_library_lens(request, EntityLibrary(looks=list(looks), lenses=list(lenses)))
