"""Fixed instruction prompts and the preset style catalogue."""

from dataclasses import dataclass
from typing import Optional

BASE_CONSTRAINTS = """
ABSOLUTE NON-NEGOTIABLE CONSTRAINTS (MUST NOT CHANGE):
- Keep the EXACT SAME image dimensions, framing, and resolution.
- Keep the EXACT SAME camera angle, lens perspective, and vantage point.
- Keep the EXACT SAME architecture, wall positions, openings, ceiling height, and structural layout.
- Do NOT add or remove doors or windows, change room boundaries, or alter structural elements.
- The result must look like the same room photographed from the same spot, only redesigned.

FUNCTIONAL INTEGRITY:
- A kitchen remains a kitchen; a bedroom remains a bedroom; a living room remains a living room.
- Do NOT convert the room type or add features that change how the room is used.

QUALITY BAR:
- The redesign must look materially expensive and architecturally coherent.
- No obvious AI artifacts, painterly textures, or unrealistic reflections.
- Do NOT add people, text, logos, watermarks, or signage.
- Return only the transformed image.
"""

MODERNIZE_PROMPT = f"""
You are performing a top-tier luxury redesign of this real estate photo, as if the
project had been re-executed by a world-class interior designer and architect who
work exclusively on ultra-luxury residences.

PRIMARY MISSION: Transform the space into the highest tier of modern luxury design
while preserving the room's exact structure and photography conditions. The result
must look significantly nicer, more refined and more professionally designed than
the original, without looking artificial or generically staged.
{BASE_CONSTRAINTS}
DESIGN DIRECTION:
- Materials: natural stone with restrained veining, wide-plank oak, plaster, brushed bronze.
- Lighting: layered and warm (2700K-3000K), concealed coves, sculptural statement fixtures.
- Furniture: bespoke, low-profile, generously scaled; no clutter and no mass-market pieces.
- Finish: immaculate photographic realism, like a feature in a luxury architecture magazine.
"""


@dataclass(frozen=True)
class StylePreset:
    key: str
    name: str
    subtitle: str
    direction: str

    @property
    def prompt(self) -> str:
        return (
            f"You are redesigning this space in the {self.name} style: {self.subtitle.lower()}.\n"
            f"{BASE_CONSTRAINTS}\n"
            f"DESIGN DIRECTION — {self.name.upper()}:\n{self.direction}"
        )


STYLE_PRESETS: list[StylePreset] = [
    StylePreset(
        key="avant-garde",
        name="Avant-Garde",
        subtitle="Bold geometry meets artistic vision",
        direction=(
            "- Sculptural, museum-quality composition; organic curves against sharp angles.\n"
            "- Polished concrete, blackened steel, cast bronze, backlit onyx, smoked glass.\n"
            "- Light as material: concealed LED lines and dramatic washes."
        ),
    ),
    StylePreset(
        key="timeless-estate",
        name="Timeless Estate",
        subtitle="Old-world elegance, reimagined",
        direction=(
            "- Classical proportions, paneled walls, crown mouldings, herringbone floors.\n"
            "- Marble, walnut, aged brass, silk and velvet upholstery.\n"
            "- Warm layered lighting from chandeliers, sconces and table lamps."
        ),
    ),
    StylePreset(
        key="pure-form",
        name="Pure Form",
        subtitle="The art of essential space",
        direction=(
            "- Minimalism with purpose: every object earns its place.\n"
            "- Limewash plaster, pale oak, honed limestone, linen.\n"
            "- Soft diffuse daylight, hidden storage, no visible clutter."
        ),
    ),
    StylePreset(
        key="resort-living",
        name="Resort Living",
        subtitle="Permanent vacation, elevated",
        direction=(
            "- Indoor-outdoor flow, relaxed luxury, tactile natural textures.\n"
            "- Teak, rattan, travertine, woven fibres, sand and sea-glass tones.\n"
            "- Lush planting and warm late-afternoon light."
        ),
    ),
    StylePreset(
        key="urban-penthouse",
        name="Urban Penthouse",
        subtitle="City living at its apex",
        direction=(
            "- Sleek, high-contrast, architectural; tailored furniture.\n"
            "- Dark stone, smoked oak, lacquer, leather, polished nickel.\n"
            "- Evening mood lighting with accent spots on art."
        ),
    ),
    StylePreset(
        key="coastal-modern",
        name="Coastal Modern",
        subtitle="Where land meets luxury",
        direction=(
            "- Airy and bright with crisp whites and muted blues.\n"
            "- White oak, performance linen, weathered stone, brushed steel.\n"
            "- Abundant natural light and breezy, uncluttered layouts."
        ),
    ),
    StylePreset(
        key="executive-modern",
        name="Executive Modern",
        subtitle="Command presence, refined taste",
        direction=(
            "- Efficient, polished, residential warmth with professional precision.\n"
            "- Walnut millwork, matte black hardware, leather, acoustic panels.\n"
            "- Crisp 3000K-3500K task and ambient lighting; immaculate cable management."
        ),
    ),
]

_STYLES_BY_KEY = {s.key: s for s in STYLE_PRESETS}


def get_style(key: str | None) -> Optional[StylePreset]:
    if not key:
        return None
    return _STYLES_BY_KEY.get(key)


def build_prompt(style: StylePreset | None = None, custom: str | None = None) -> str:
    """Base (or style) prompt, plus the user's own instructions if any."""
    prompt = style.prompt if style else MODERNIZE_PROMPT
    if custom:
        return f"{prompt}\n\nADDITIONAL USER INSTRUCTIONS: {custom}"
    return prompt
