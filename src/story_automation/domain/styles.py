"""Content formats, durations and the art-style catalog used to build image prompts."""

from enum import Enum
from typing import Dict, List


class ContentFormat(str, Enum):
    SHORT = "YouTube Short (Vertical 9:16)"
    LONG = "Long Form (Horizontal 16:9)"
    SERIES = "Series Episode"


DURATION_OPTIONS = [
    "Short (< 60 Seconds)",
    "Medium (1 - 3 Minutes)",
    "Long (3 - 5 Minutes)",
    "Extended (5 - 10 Minutes)",
]

ART_STYLES: List[Dict[str, str]] = [
    {
        "id": "dark-cartoon-v1",
        "name": "Dark Cartoon v1",
        "category": "popular",
        "prompt": "dark cartoon style, bold black outlines, dramatic high contrast shadows, creepy unsettling atmosphere, stylized simplified characters, dark muted color palette, horror cartoon aesthetic, flat shading",
    },
    {
        "id": "dark-cartoon-v2",
        "name": "Dark Cartoon v2",
        "category": "popular",
        "prompt": "enhanced dark cartoon, refined clean linework, atmospheric moody lighting, deep shadows with subtle gradients, detailed character features, moody desaturated colors, eerie ambiance, smooth shading",
    },
    {
        "id": "creepy-normal-cartoon-v1",
        "name": "Creepy Normal Cartoon v1",
        "category": "cartoon",
        "prompt": "creepy cartoon style, bright vibrant colors, varied color palette, unsettling atmosphere, simple cartoon characters, clear outlines, slightly off-putting expressions, flat cel shading",
    },
    {
        "id": "dark-comic",
        "name": "Dark Comic",
        "category": "realistic",
        "prompt": "dark gritty comic book style, rich deep shadows, high contrast dramatic lighting, noir atmosphere, heavy black inks, textured gritty details, moody limited color palette, graphic novel realism",
    },
    {
        "id": "cinematic",
        "name": "Cinematic",
        "category": "realistic",
        "prompt": "cinematic film quality, realistic depth of field, professional movie lighting, dramatic composition, shallow focus background blur, film grain texture, color graded like cinema, photorealistic but stylized",
    },
    {
        "id": "18th-century-historical",
        "name": "18th Century Historical",
        "category": "historical",
        "prompt": "18th century classical painting, oil painting texture, historical period accurate, rich detailed brushwork, warm classical colors, traditional portrait composition, museum quality art",
    },
    {
        "id": "studio-ghibli",
        "name": "Studio Ghibli",
        "category": "studio",
        "prompt": "studio ghibli anime style, soft watercolor backgrounds, hand-painted details, whimsical peaceful atmosphere, gentle pastel colors, detailed natural elements, dreamy quality, japanese animation aesthetic",
    },
    {
        "id": "cute-anime",
        "name": "Cute Anime",
        "category": "anime",
        "prompt": "cute kawaii anime style, large expressive eyes, soft pastel colors, chibi proportions, manga-inspired line art, adorable character design, gentle shading, japanese animation aesthetic",
    },
]

DEFAULT_STYLE_ID = ART_STYLES[0]["id"]


def get_style(style_id: str) -> Dict[str, str]:
    """Look up a style by id; unknown ids fall back to the first catalog entry."""
    for style in ART_STYLES:
        if style["id"] == style_id:
            return style
    return ART_STYLES[0]
