"""Tests for the export file builders."""

import io
import json
import zipfile

import pytest
from PIL import Image

from storyforge.services.export_builder import (
    RenderedFrame,
    build_image_sequence,
    build_metadata_bundle,
    build_pdf,
    export_filename,
)


def _png(color=(200, 40, 40), size=(64, 36)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, "PNG")
    return buf.getvalue()


def test_export_filename_extension():
    assert export_filename("PRJ_1", "pdf", 1700000000000) == "PRJ_1_pdf_1700000000000.pdf"
    assert export_filename("PRJ_1", "image_sequence", 5) == "PRJ_1_image_sequence_5.zip"
    assert export_filename("PRJ_1", "metadata_bundle", 5) == "PRJ_1_metadata_bundle_5.zip"


def test_pdf_has_one_page_per_frame():
    frames = [
        RenderedFrame(1, "Docks", "Mira waits.", _png()),
        RenderedFrame(2, "Rooftop", "The chase.", None),
    ]
    data = build_pdf(frames)
    assert data.startswith(b"%PDF")
    assert b"/Count 2" in data


def test_pdf_requires_frames():
    with pytest.raises(ValueError):
        build_pdf([])


def test_image_sequence_names_and_skips_missing():
    frames = [
        RenderedFrame(1, "", "", _png()),
        RenderedFrame(2, "", "", None),
        RenderedFrame(12, "", "", _png((0, 0, 255))),
    ]
    with zipfile.ZipFile(io.BytesIO(build_image_sequence(frames))) as zf:
        assert zf.namelist() == ["scene_001.png", "scene_012.png"]


def test_metadata_bundle_contents():
    data = build_metadata_bundle(
        {"id": "PRJ_1", "name": "Neon Harbor"},
        [{"id": "SCN_1", "assets": [{"asset_id": "AST_1", "role": "primary"}]}],
        [{"id": "AST_1", "name": "Mira"}],
    )
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert sorted(zf.namelist()) == ["assets.json", "project.json", "scenes.json"]
        assert json.loads(zf.read("project.json"))["name"] == "Neon Harbor"
        assert json.loads(zf.read("scenes.json"))[0]["assets"][0]["asset_id"] == "AST_1"


def test_image_sequence_requires_an_image():
    frames = [RenderedFrame(1, "", "", None), RenderedFrame(2, "", "", None)]
    with pytest.raises(ValueError):
        build_image_sequence(frames)
