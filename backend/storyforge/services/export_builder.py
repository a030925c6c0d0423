"""Storyboard export builders — PDF pages, PNG sequences and JSON bundles.

Builders are pure: they take already-loaded frames and records and return
the file bytes. The export task decides where the result is stored.
"""

from __future__ import annotations

import io
import json
import logging
import textwrap
import zipfile
from dataclasses import dataclass
from typing import Any

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

PAGE_WIDTH = 1024
CAPTION_HEIGHT = 160
MISSING_FRAME_SIZE = (1024, 576)


@dataclass
class RenderedFrame:
    """One rendered scene, ready to be placed into an export."""

    scene_number: int
    title: str
    description: str
    image: bytes | None


def export_filename(project_id: str, export_type: str, epoch_ms: int) -> str:
    ext = "pdf" if export_type == "pdf" else "zip"
    return f"{project_id}_{export_type}_{epoch_ms}.{ext}"


def _load_frame(frame: RenderedFrame) -> Image.Image:
    if frame.image:
        try:
            return Image.open(io.BytesIO(frame.image)).convert("RGB")
        except OSError as e:
            logger.warning("Scene %d image unreadable, using blank frame: %s", frame.scene_number, e)
    return Image.new("RGB", MISSING_FRAME_SIZE, color=(40, 40, 48))


def _render_page(frame: RenderedFrame) -> Image.Image:
    """Scale the frame to page width and add a caption band underneath."""
    img = _load_frame(frame)
    height = round(img.height * PAGE_WIDTH / img.width)
    img = img.resize((PAGE_WIDTH, height))

    page = Image.new("RGB", (PAGE_WIDTH, height + CAPTION_HEIGHT), color=(255, 255, 255))
    page.paste(img, (0, 0))

    draw = ImageDraw.Draw(page)
    font = ImageFont.load_default()
    y = height + 16
    heading = f"Scene {frame.scene_number}: {frame.title}" if frame.title else f"Scene {frame.scene_number}"
    draw.text((24, y), heading.encode("latin-1", "replace").decode("latin-1"), fill=(20, 20, 20), font=font)
    y += 22
    for line in textwrap.wrap(frame.description, width=140)[:8]:
        draw.text((24, y), line.encode("latin-1", "replace").decode("latin-1"), fill=(70, 70, 70), font=font)
        y += 14
    return page


def build_pdf(frames: list[RenderedFrame]) -> bytes:
    """One page per frame, in the order given."""
    if not frames:
        raise ValueError("No frames to export")

    pages = [_render_page(frame) for frame in frames]
    buf = io.BytesIO()
    pages[0].save(buf, "PDF", save_all=True, append_images=pages[1:], resolution=100.0)
    return buf.getvalue()


def build_image_sequence(frames: list[RenderedFrame]) -> bytes:
    """Zip of ``scene_NNN.png`` files; frames without an image are skipped.

    Raises ValueError when no frame has an image.
    """
    written = 0
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for frame in frames:
            if not frame.image:
                logger.warning("Scene %d has no image file, skipped in sequence", frame.scene_number)
                continue
            zf.writestr(f"scene_{frame.scene_number:03d}.png", frame.image)
            written += 1
    if not written:
        raise ValueError("No rendered scene images found to export")
    return buf.getvalue()


def build_metadata_bundle(
    project: dict[str, Any],
    scenes: list[dict[str, Any]],
    assets: list[dict[str, Any]],
) -> bytes:
    """Zip of ``project.json``, ``scenes.json`` and ``assets.json``."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, payload in (
            ("project.json", project),
            ("scenes.json", scenes),
            ("assets.json", assets),
        ):
            zf.writestr(name, json.dumps(payload, ensure_ascii=False, indent=2, default=str))
    return buf.getvalue()
