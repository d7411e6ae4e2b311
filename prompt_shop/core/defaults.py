"""Built-in library content: looks, lenses, micro packs and framing compositions.

New projects receive a copy of these with fresh ids; stored projects missing a
collection are backfilled from here.
"""

from __future__ import annotations

from datetime import datetime, timezone

from prompt_shop.db.models import (
    FocalLength,
    Framing,
    LensCategory,
    LensProfile,
    LookFamily,
    MicroDetailPack,
    MicroTexturePack,
    RecommendedLensByFraming,
    new_entity_id,
    utcnow,
)

_SEEDED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)

FRAMING_COMPOSITIONS: dict[Framing, str] = {
    Framing.FACE_EMOTION: (
        "Tight face/emotion close-up; eyes are the sharp focus; keep facial expression "
        "fully visible; simplified background; avoid awkward cropping of chin/forehead"
    ),
    Framing.MEDIUM: (
        "Waist-up framing; hands visible if relevant; clear silhouette; "
        "environment present but secondary"
    ),
    Framing.FULL_BODY: (
        "Full-body head-to-toe; hands and feet visible; NO CROPPING; clear silhouette; "
        "anchors visible"
    ),
    Framing.WIDE_SCENE: (
        "Wide scene; full bodies plus environment; anchors clearly visible; readable action; "
        "foreground/midground/background separation"
    ),
}

CROP_RULES: dict[Framing, str] = {
    Framing.FULL_BODY: "NO CROPPING - hands and feet must be fully visible",
    Framing.FACE_EMOTION: "Avoid awkward cropping of chin/forehead",
}


def _lens_map(face: int, medium: int, full: int, wide: int) -> RecommendedLensByFraming:
    return RecommendedLensByFraming(
        face_emotion=FocalLength(face),
        medium=FocalLength(medium),
        full_body=FocalLength(full),
        wide_scene=FocalLength(wide),
    )


DEFAULT_LOOKS: list[LookFamily] = [
    LookFamily(
        id="00000000-0000-0000-0000-000000000001",
        ui_name="Cozy Chiaroscuro Interior",
        injected_text=(
            "Warm interior lighting with dramatic chiaroscuro contrast. Deep shadows carve the "
            "space while golden light pools on key surfaces. Rich amber tones in highlights, cool "
            "slate in shadows. Cinematic grain, subtle vignette, painterly finish with maintained "
            "detail in midtones."
        ),
        when_to_use="Dramatic mood with shadows, intimate interior scenes",
        produces_summary=[
            "Deep shadows with golden highlights",
            "Warm amber-to-cool shadow gradient",
            "Cinematic grain texture",
            "Painterly finish",
        ],
        example_use_case="Character reading by firelight, cozy cabin scene",
        recommended_lens_by_framing=_lens_map(85, 50, 35, 24),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LookFamily(
        id="00000000-0000-0000-0000-000000000002",
        ui_name="Golden Hour Rimlight",
        injected_text=(
            "Backlit golden hour lighting with pronounced rim light separation. Warm orange-gold "
            "light wraps around subjects creating luminous edges. Fill is soft and cool by "
            "comparison. Color grade leans warm with lifted shadows. Soft glow on highlights, "
            "clean finish with subtle lens flare potential."
        ),
        when_to_use="Warm glow with rim separation, outdoor golden hour feel",
        produces_summary=[
            "Backlit rim light separation",
            "Warm orange-gold wrap",
            "Lifted cool shadows",
            "Soft highlight glow",
        ],
        example_use_case="Sunset portrait, outdoor adventure moment",
        recommended_lens_by_framing=_lens_map(85, 50, 35, 24),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LookFamily(
        id="00000000-0000-0000-0000-000000000003",
        ui_name="Mixed Warm + Cool Practical",
        injected_text=(
            "Mixed practical lighting with warm tungsten key and cool ambient fill. Realistic "
            "interior feel with visible light sources motivating the scheme. Balanced color grade "
            "preserving both warm and cool zones. Clean digital finish with controlled highlights "
            "and rich shadow detail."
        ),
        when_to_use="Lit by practicals/screens, realistic interior lighting",
        produces_summary=[
            "Warm tungsten + cool ambient mix",
            "Motivated practical light sources",
            "Balanced warm/cool zones",
            "Rich shadow detail",
        ],
        example_use_case="Character working at desk with lamp, modern interior",
        recommended_lens_by_framing=_lens_map(85, 50, 35, 35),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LookFamily(
        id="00000000-0000-0000-0000-000000000004",
        ui_name="Studio Seamless",
        injected_text=(
            "Clean studio lighting on seamless backdrop. Soft key with fill for even "
            "illumination. Neutral color grade for accurate color reproduction. Crisp focus "
            "throughout, minimal grain, product-photography clarity. White or light gray seamless "
            "background with subtle gradient."
        ),
        when_to_use="Clean product/clarity-first, studio portrait style",
        produces_summary=[
            "Even studio illumination",
            "Neutral accurate colors",
            "Product-photography clarity",
            "Seamless backdrop",
        ],
        example_use_case="Character showcase, product-style portrait, catalog look",
        recommended_lens_by_framing=_lens_map(85, 85, 50, 35),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LookFamily(
        id="00000000-0000-0000-0000-000000000005",
        ui_name="Black Background Hero",
        injected_text=(
            "Dramatic single-subject lighting against pure black void. Strong directional key "
            "creating bold highlight-to-shadow ratio. Subject isolated completely from "
            "environment. High contrast grade with crushed blacks and punchy highlights. Clean "
            "finish, sharp detail on subject, total background separation."
        ),
        when_to_use="Isolation on black, dramatic hero shot",
        produces_summary=[
            "Pure black void background",
            "Bold directional key",
            "Total subject isolation",
            "High contrast crushed blacks",
        ],
        example_use_case="Hero character reveal, dramatic portrait, isolated figure",
        optics_bias_notes="135mm optional for extra isolation",
        recommended_lens_by_framing=_lens_map(85, 85, 50, 35),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
]

DEFAULT_LENSES: list[LensProfile] = [
    LensProfile(
        id="00000000-0000-0000-0001-000000000001",
        ui_name="24mm Wide",
        focal_length_mm=FocalLength.MM_24,
        category=LensCategory.WIDE,
        injected_text=(
            "24mm wide-angle lens perspective. Expansive field of view capturing environment "
            "context. Noticeable perspective distortion toward edges. Deep depth of field keeping "
            "foreground through background sharp. Dramatic sense of space and scale."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LensProfile(
        id="00000000-0000-0000-0001-000000000002",
        ui_name="35mm Standard Wide",
        focal_length_mm=FocalLength.MM_35,
        category=LensCategory.WIDE,
        injected_text=(
            "35mm standard wide lens perspective. Natural field of view similar to human "
            "peripheral vision. Minimal distortion while maintaining environmental context. "
            "Moderate depth of field, versatile for both portraits and scenes."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LensProfile(
        id="00000000-0000-0000-0001-000000000003",
        ui_name="50mm Normal",
        focal_length_mm=FocalLength.MM_50,
        category=LensCategory.NORMAL,
        injected_text=(
            "50mm normal lens perspective. Classic field of view matching natural human vision. "
            "Minimal geometric distortion, honest rendering of proportions. Moderate background "
            "separation at wider apertures. Balanced, neutral perspective."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LensProfile(
        id="00000000-0000-0000-0001-000000000004",
        ui_name="85mm Portrait",
        focal_length_mm=FocalLength.MM_85,
        category=LensCategory.TELE,
        injected_text=(
            "85mm portrait telephoto perspective. Flattering compression for faces and figures. "
            "Pronounced background separation with creamy bokeh. Isolates subject from "
            "environment. Classic portrait focal length."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LensProfile(
        id="00000000-0000-0000-0001-000000000005",
        ui_name="135mm Telephoto",
        focal_length_mm=FocalLength.MM_135,
        category=LensCategory.TELE,
        injected_text=(
            "135mm telephoto perspective. Strong compression flattening planes. Maximum subject "
            "isolation with heavily blurred backgrounds. Intimate feel despite apparent distance. "
            "Dramatic separation from environment."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
    LensProfile(
        id="00000000-0000-0000-0001-000000000006",
        ui_name="100mm Macro",
        focal_length_mm=FocalLength.MM_100,
        category=LensCategory.MACRO,
        injected_text=(
            "100mm macro lens perspective. Extreme close-up capability revealing fine detail. "
            "Razor-thin depth of field isolating specific elements. Telephoto compression with "
            "macro magnification. Reveals textures invisible to naked eye."
        ),
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    ),
]

_TEXTURE_PACKS = {
    "Fur & Feather": [
        "individual fur strands with natural variation",
        "soft downy undercoat visible beneath guard hairs",
        "feather barbules catching light",
        "whisker texture with subtle translucency",
        "scale-to-fur transition zones",
    ],
    "Fabric & Cloth": [
        "visible weave pattern in fabric",
        "thread-level detail in stitching",
        "fabric pile direction and nap",
        "subtle fabric sheen variation",
        "worn edges and soft fraying",
    ],
    "Wood & Organic": [
        "wood grain with growth ring variation",
        "bark texture with natural fissures",
        "leaf vein patterns",
        "moss and lichen micro-detail",
        "weathered wood silver patina",
    ],
    "Metal & Hard Surface": [
        "brushed metal directional scratches",
        "patina and oxidation variation",
        "micro-scratches on polished surfaces",
        "cast metal surface porosity",
        "chrome reflection distortion",
    ],
    "Skin & Leather": [
        "leather grain with natural variation",
        "skin pore detail and fine lines",
        "scale texture with iridescence",
        "weathered leather cracking",
        "reptilian scale overlap patterns",
    ],
}

_DETAIL_PACKS = {
    "Atmospheric Effects": [
        "visible dust motes floating in light beams",
        "subtle steam or breath vapor",
        "atmospheric haze in distance",
        "light rays through windows",
        "particle scatter in backlight",
    ],
    "Wear & Age": [
        "scuff marks on floors and walls",
        "paint chips revealing layers beneath",
        "rust blooms on metal fixtures",
        "worn smooth edges from use",
        "accumulated dust in corners",
    ],
    "Environmental Clutter": [
        "small objects casting appropriate shadows",
        "background items partially visible",
        "appropriate debris and detritus",
        "incidental props supporting scene",
        "realistic clutter density",
    ],
    "Light Interactions": [
        "subsurface scattering in ears/thin materials",
        "caustic light patterns through glass",
        "reflected color bounce between surfaces",
        "rim light catching fine hairs/fibers",
        "specular highlights on wet surfaces",
    ],
    "Signs of Life": [
        "fingerprints on smooth surfaces",
        "condensation on cold objects",
        "crumbs and food remnants",
        "disturbed dust patterns",
        "recently moved object imprints",
    ],
}

DEFAULT_MICRO_TEXTURES: list[MicroTexturePack] = [
    MicroTexturePack(
        id=f"00000000-0000-0000-0002-{idx:012d}",
        ui_name=name,
        items=items,
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    )
    for idx, (name, items) in enumerate(_TEXTURE_PACKS.items(), 1)
]

DEFAULT_MICRO_DETAILS: list[MicroDetailPack] = [
    MicroDetailPack(
        id=f"00000000-0000-0000-0003-{idx:012d}",
        ui_name=name,
        items=items,
        created_at=_SEEDED_AT,
        updated_at=_SEEDED_AT,
    )
    for idx, (name, items) in enumerate(_DETAIL_PACKS.items(), 1)
]


def _fresh_copies(entities: list) -> list:
    now = utcnow()
    return [
        entity.model_copy(update={"id": new_entity_id(), "created_at": now, "updated_at": now}, deep=True)
        for entity in entities
    ]


def seeded_collections() -> dict[str, list]:
    """Default looks, lenses and micro packs with fresh ids, keyed by Project attribute."""
    return {
        "lenses": _fresh_copies(DEFAULT_LENSES),
        "looks": _fresh_copies(DEFAULT_LOOKS),
        "micro_textures": _fresh_copies(DEFAULT_MICRO_TEXTURES),
        "micro_details": _fresh_copies(DEFAULT_MICRO_DETAILS),
    }
