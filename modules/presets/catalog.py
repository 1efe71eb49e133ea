"""Style presets and aspect ratios offered by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True, slots=True)
class StylePreset:
    """Style modifier appended to the user prompt."""

    label: str
    value: str


@dataclass(frozen=True, slots=True)
class AspectRatio:
    """Aspect ratio code accepted by the generation service."""

    label: str
    value: str


STYLE_PRESETS: Tuple[StylePreset, ...] = (
    StylePreset("Photorealistic", "photorealistic, 8k, detailed, professional photography"),
    StylePreset("Oil Painting", "oil painting, classic, textured, masterpiece"),
    StylePreset("Cyberpunk", "cyberpunk, futuristic, neon lights, dystopian"),
    StylePreset("Watercolor", "watercolor, vibrant, soft, blended"),
    StylePreset("3D Render", "3d render, octane render, high detail, cinematic"),
    StylePreset("Anime", "anime style, vibrant, detailed background"),
    StylePreset("Minimalist", "minimalist, clean lines, simple"),
    StylePreset("Fantasy Art", "fantasy art, epic, magical, detailed"),
)

ASPECT_RATIOS: Tuple[AspectRatio, ...] = (
    AspectRatio("1:1", "1:1"),
    AspectRatio("16:9", "16:9"),
    AspectRatio("9:16", "9:16"),
    AspectRatio("4:3", "4:3"),
    AspectRatio("3:4", "3:4"),
)

DEFAULT_STYLE = STYLE_PRESETS[0].value
DEFAULT_ASPECT_RATIO = ASPECT_RATIOS[0].value


def style_choices() -> List[Tuple[str, str]]:
    """Return ``(label, value)`` pairs for a dropdown."""
    return [(preset.label, preset.value) for preset in STYLE_PRESETS]


def aspect_ratio_choices() -> List[Tuple[str, str]]:
    return [(ratio.label, ratio.value) for ratio in ASPECT_RATIOS]


def is_style(value: str) -> bool:
    return any(preset.value == value for preset in STYLE_PRESETS)


def is_aspect_ratio(value: str) -> bool:
    return any(ratio.value == value for ratio in ASPECT_RATIOS)


def style_label(value: str) -> str:
    """Return the display label for a style modifier."""
    for preset in STYLE_PRESETS:
        if preset.value == value:
            return preset.label
    raise KeyError(f"Style preset '{value}' not found")
