from enum import Enum
from typing import List


class StudioPreset(str, Enum):
    editorial = "editorial"
    streetwear = "streetwear"
    lifestyle = "lifestyle"
    minimalist = "minimalist"


# Label shown on the preset buttons of the front end
PRESET_LABELS = {
    StudioPreset.editorial: "Editorial",
    StudioPreset.streetwear: "Street",
    StudioPreset.lifestyle: "Lifestyle",
    StudioPreset.minimalist: "Clean",
}

PRESET_PROMPTS = {
    StudioPreset.editorial: "High-fashion editorial style. Minimalist high-contrast studio lighting, sharp focus on the product, sophisticated female model posing with poise. Elegant background, neutral tones, 8k professional photography.",
    StudioPreset.streetwear: "Urban lifestyle streetwear style. Candid modeling pose on a clean city street with soft natural lighting. Realistic textures, modern vibe, female model in a natural fashion-forward stance.",
    StudioPreset.lifestyle: "Warm lifestyle setting. Soft, airy natural lighting, indoor modern boutique or clean home environment. Approachable and friendly modeling pose, emphasizing real-world product usage.",
    StudioPreset.minimalist: "Pure product modeling. Cleanest possible studio environment, soft diffused lighting, no distractions. Female model used as a natural frame for the product details.",
}

# Order matters: it is the order requests are sent and images are shown.
ANGLES: List[str] = [
    "Front full view",
    "Back view",
    "45-degree side profile",
    "Close-up detail shot",
    "Low-angle heroic shot",
    "High-angle overview",
    "Dynamic motion shot",
    "Three-quarter view",
    "Atmospheric depth shot",
    "Symmetry-focused composition",
]


def style_directive(preset: StudioPreset) -> str:
    return PRESET_PROMPTS[StudioPreset(preset)]


def photographer_prompt(style: str, angle: str) -> str:
    """Wrap a style directive and an angle into the product shot brief."""
    return f"""ACT AS A PROFESSIONAL E-COMMERCE PHOTOGRAPHER.
    TASK: Create a world-class modeling shot using the attached product reference.

    ANGLE/VIEW: {angle}
    STYLE DIRECTIVES: {style}

    REQUIREMENTS:
    - Match the product design, colors, and textures with 100% accuracy.
    - The model must be a female in a professional, non-sexual, natural pose.
    - Use high-end cinematic lighting (Key, Fill, and Rim lights).
    - Ensure the product is the focal point with a shallow depth of field.
    - The result must look like a real photograph from a luxury brand's catalog.

    NO text, NO logos, NO watermarks. Just the pure professional image."""


def refine_prompt(edit: str) -> str:
    return f"""Refine this professional image: {edit}.
    Maintain the high-end studio quality, lighting, and product integrity.
    Ensure the edit is seamless and realistic."""
