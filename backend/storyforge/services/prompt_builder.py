"""Prompt assembly for asset and scene renders."""

from __future__ import annotations

from dataclasses import dataclass

AMAZON_PROMPT_LIMIT = 1024
DEFAULT_PROMPT_LIMIT = 10000


@dataclass
class AssetRef:
    """What a scene render needs to know about one assigned asset."""

    name: str
    type: str
    visual_prompt: str = ""
    thumbnail_url: str | None = None


def prompt_limit(model_id: str) -> int:
    """Nova Canvas / Titan reject prompts over 1024 characters."""
    return AMAZON_PROMPT_LIMIT if model_id.startswith("amazon.") else DEFAULT_PROMPT_LIMIT


def truncate_prompt(prompt: str, limit: int) -> str:
    if len(prompt) <= limit:
        return prompt
    return prompt[: limit - 3] + "..."


def build_scene_prompt(
    *,
    assets: list[AssetRef],
    description: str = "",
    mood: str = "",
    camera_angle: str = "",
    lighting: str = "",
    visual_style: str = "",
    limit: int = DEFAULT_PROMPT_LIMIT,
) -> str:
    """Compose the text prompt for a scene frame.

    Style, scene description and cinematography come first, then one short
    label per asset so the model can tie reference images to names.
    """
    parts = [
        f"{visual_style} style cinematic storyboard frame" if visual_style else "cinematic storyboard frame",
        description or "",
        f"{mood} mood" if mood else "",
        camera_angle or "",
        f"{lighting} lighting" if lighting else "",
        "highly detailed, sharp focus",
    ]
    parts = [p for p in parts if p]

    for asset in assets:
        parts.append(f"set in {asset.name}" if asset.type == "environment" else asset.name)

    return truncate_prompt(", ".join(parts), limit)
