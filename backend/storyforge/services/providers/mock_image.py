"""Offline placeholder provider — draws the prompt onto a flat PNG."""

from __future__ import annotations

import io
import textwrap

from PIL import Image, ImageDraw, ImageFont


def _latin1(text: str) -> str:
    # the built-in bitmap font only covers latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


def render_placeholder(prompt: str, width: int, height: int, seed: int, label: str = "") -> bytes:
    """Solid-colour PNG carrying the seed and a wrapped excerpt of the prompt."""
    # Seed-derived tint so variants are visually distinct
    tint = (seed % 97, (seed // 97) % 89, (seed // 8633) % 83)
    img = Image.new("RGB", (width, height), color=(35 + tint[0] // 2, 35 + tint[1] // 2, 60 + tint[2] // 2))
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    y = 20
    if label:
        draw.text((20, y), _latin1(label), fill=(255, 255, 255), font=font)
        y += 20
    draw.text((20, y), f"seed {seed}", fill=(200, 200, 230), font=font)
    y += 24
    for line in textwrap.wrap(prompt[:600], width=max(20, width // 8))[:20]:
        draw.text((20, y), _latin1(line), fill=(180, 180, 220), font=font)
        y += 14
    draw.text((20, height - 24), "[MOCK IMAGE - StoryForge]", fill=(100, 100, 140), font=font)

    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()


async def generate_image(*, prompt: str, seed: int, width: int, height: int, label: str = "") -> bytes:
    return render_placeholder(prompt, width, height, seed, label)
