"""Prompt Compiler: renders a validated prompt request into final prompt text.

Two renderers share the same inputs: ``compact`` for day-to-day use and
``expanded`` for a sectioned, long-form prompt. Both end with a one-line seed
summary used to label generations.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from prompt_shop.core.defaults import CROP_RULES, FRAMING_COMPOSITIONS
from prompt_shop.core.lens import LensSource, ResolvedLens, resolve_library_lens
from prompt_shop.core.library import EntityLibrary
from prompt_shop.db.models import LensProfile, OutputMode, PromptRequest, WardrobeProfile

logger = structlog.get_logger()


# Everything the compiler may reference, indexed by id.
CompilerContext = EntityLibrary


@dataclass(frozen=True)
class CompiledPrompt:
    text: str
    resolved_lens: ResolvedLens
    seed_summary: str

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "resolved_lens": self.resolved_lens.to_dict(),
            "seed_summary": self.seed_summary,
        }


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _anchors(request: PromptRequest) -> list[str]:
    return [anchor for anchor in request.environment_anchors if anchor.strip()]


def _selected_items(lookup: Callable[[str], Any], selected_ids: list[str]) -> list[str]:
    """Items of the selected packs, packs in selection order, unknown ids skipped."""
    items: list[str] = []
    seen: set[str] = set()
    for pack_id in selected_ids:
        if pack_id in seen:
            continue
        seen.add(pack_id)
        pack = lookup(pack_id)
        if pack is not None:
            items.extend(pack.items)
    return items


def _wardrobe_text(wardrobe: WardrobeProfile) -> str:
    if wardrobe.bans_text:
        return f"{wardrobe.outfit_text} [BANS: {wardrobe.bans_text}]"
    return wardrobe.outfit_text


def _source_label(resolved: ResolvedLens) -> str:
    return "(Auto via Look Default)" if resolved.source == LensSource.AUTO else "(Manual)"


def build_seed_summary(request: PromptRequest, context: CompilerContext, lens: LensProfile) -> str:
    """One-line label: ``[aspect] names | framing | focal | look``."""
    look = context.get_look(request.look_family_id)
    names = []
    for member in request.cast:
        character = context.get_character(member.character_id)
        if character is not None:
            names.append(character.ui_name)
    look_name = look.ui_name if look else "Unknown Look"
    return (
        f"[{request.aspect_ratio.value}] {', '.join(names)} | {request.framing.label} | "
        f"{int(lens.focal_length_mm)}mm | {look_name}"
    )


def compile_compact(request: PromptRequest, context: CompilerContext) -> CompiledPrompt:
    resolved = resolve_library_lens(request, context)
    look = context.get_look(request.look_family_id)
    sections: list[str] = [f"SCENE HEART:\n{request.scene_heart}"]

    cast_lines: list[str] = []
    for number, member in enumerate(request.cast, 1):
        character = context.get_character(member.character_id)
        wardrobe = context.get_wardrobe(member.wardrobe_id)
        if character is not None:
            cast_lines.append(f"- Character {number} (identity): {character.injected_text}")
        if wardrobe is not None:
            cast_lines.append(f"- Character {number} (wardrobe): {_wardrobe_text(wardrobe)}")
    sections.append("CAST + WARDROBE (paired locks):\n" + "\n".join(cast_lines))

    sections.append(f"MECHANIC LOCK:\n{request.mechanic_lock}")
    sections.append(f"FOCUS TARGET:\n{request.focus_target}")
    sections.append(f"ENVIRONMENT ANCHORS:\n{_bullets(_anchors(request))}")
    sections.append(f"COMPOSITION/STAGING:\n{FRAMING_COMPOSITIONS[request.framing]}")
    sections.append(
        f"CAMERA/OPTICS {_source_label(resolved)}: {resolved.focal_length_mm}mm\n"
        f"{resolved.profile.injected_text}"
    )

    if look is not None:
        sections.append(f"LOOK ({look.ui_name}):\n{look.injected_text}")

    textures = _selected_items(context.get_micro_texture, request.selected_micro_textures)
    if textures:
        sections.append(f"MICRO-TEXTURES:\n{_bullets(textures)}")
    details = _selected_items(context.get_micro_detail, request.selected_micro_details)
    if details:
        sections.append(f"MICRO-DETAILS:\n{_bullets(details)}")

    output_specs = f"OUTPUT SPECS:\nAspect Ratio: {request.aspect_ratio.value}"
    if request.framing in CROP_RULES:
        output_specs += f"\nCrop Rule: {CROP_RULES[request.framing]}"
    sections.append(output_specs)

    seed_summary = build_seed_summary(request, context, resolved.profile)
    sections.append(f"SEED SUMMARY:\n{seed_summary}")

    return CompiledPrompt(text="\n\n".join(sections), resolved_lens=resolved, seed_summary=seed_summary)


def compile_expanded(request: PromptRequest, context: CompilerContext) -> CompiledPrompt:
    resolved = resolve_library_lens(request, context)
    look = context.get_look(request.look_family_id)
    sections: list[str] = [f"== WHO/WHAT/WHERE ==\n{request.scene_heart}"]

    textures = _selected_items(context.get_micro_texture, request.selected_micro_textures)
    if textures:
        sections.append(f"== MATERIALS & MICRO-TEXTURES ==\n{_bullets(textures)}")
    details = _selected_items(context.get_micro_detail, request.selected_micro_details)
    if details:
        sections.append(f"== MICRO-DETAILS ==\n{_bullets(details)}")

    sections.append(
        f"== COMPOSITION / STAGING ==\n{FRAMING_COMPOSITIONS[request.framing]}\n\n"
        f"Environment Anchors:\n{_bullets(_anchors(request))}"
    )
    sections.append(
        f"== CAMERA & OPTICS == {_source_label(resolved)}\n"
        f"Focal Length: {resolved.focal_length_mm}mm\n{resolved.profile.injected_text}"
    )

    if look is not None:
        sections.append(f"== LIGHTING ==\n{look.injected_text}")
        sections.append(
            f"== ART DIRECTION / STYLE ==\nLook: {look.ui_name}\n"
            f"Produces: {'; '.join(look.produces_summary)}"
        )
    # Colour grade lives inside the look text; this section only names the look.
    sections.append(f"== COLOR GRADE ==\nApplied via Look: {look.ui_name if look else 'None selected'}")

    lock_lines: list[str] = []
    for number, member in enumerate(request.cast, 1):
        character = context.get_character(member.character_id)
        wardrobe = context.get_wardrobe(member.wardrobe_id)
        if character is not None:
            lock_lines.append(f"Character {number} Identity Lock: {character.injected_text}")
        if wardrobe is not None:
            lock_lines.append(f"Character {number} Wardrobe Lock: {_wardrobe_text(wardrobe)}")
        if number < len(request.cast):
            lock_lines.append("")
    sections.append("== CHARACTER LOCKS ==\n" + "\n".join(lock_lines))

    sections.append(f"== MECHANIC LOCK ==\n{request.mechanic_lock}")
    sections.append(f"== FOCUS TARGET ==\n{request.focus_target}")

    quality = f"== OUTPUT QUALITY SPECS ==\nAspect Ratio: {request.aspect_ratio.value}\nFraming: {request.framing.label}"
    if request.framing in CROP_RULES:
        quality += f"\nCrop Rule: {CROP_RULES[request.framing]}"
    sections.append(quality)

    seed_summary = build_seed_summary(request, context, resolved.profile)
    sections.append(f"== SEED SUMMARY ==\n{seed_summary}")

    return CompiledPrompt(text="\n\n".join(sections), resolved_lens=resolved, seed_summary=seed_summary)


def compile_prompt(request: PromptRequest, context: CompilerContext) -> CompiledPrompt:
    """Compile a request with the renderer its output mode selects.

    The request is expected to have passed the validator's hard checks. Raises
    EmptyLensLibraryError when the context has no lenses.
    """
    if request.output_mode == OutputMode.EXPANDED:
        compiled = compile_expanded(request, context)
    else:
        compiled = compile_compact(request, context)

    if compiled.resolved_lens.warning:
        logger.warning(
            "compile.lens_fallback",
            warning=compiled.resolved_lens.warning,
            lens_id=compiled.resolved_lens.profile.id,
        )
    logger.info(
        "compile.rendered",
        mode=request.output_mode.value,
        framing=request.framing.value,
        focal_length_mm=compiled.resolved_lens.focal_length_mm,
        lens_source=compiled.resolved_lens.source.value,
        length=len(compiled.text),
    )
    return compiled
