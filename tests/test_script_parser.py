"""Tests for script-to-scene segmentation."""

from storyforge.services.script_parser import SceneBlock, parse_script


def test_numbered_markers_with_headings():
    content = (
        "SCENE 1: The Docks\n"
        "Mira waits by the water.\n"
        "\n"
        "SCENE 2: Rooftop\n"
        "The chase begins.\n"
    )
    assert parse_script(content) == [
        SceneBlock(title="Scene 1: The Docks", description="Mira waits by the water."),
        SceneBlock(title="Scene 2: Rooftop", description="The chase begins."),
    ]


def test_numbered_marker_without_heading():
    blocks = parse_script("Scene 3\nRain on the glass.")
    assert blocks == [SceneBlock(title="Scene 3", description="Rain on the glass.")]


def test_markdown_heading_markers_are_case_insensitive():
    content = "## scene 1 - Night\nStreetlights flicker.\n### SCENE 2.\nDawn breaks."
    blocks = parse_script(content)
    assert [b.title for b in blocks] == ["Scene 1: Night", "Scene 2"]
    assert [b.description for b in blocks] == ["Streetlights flicker.", "Dawn breaks."]


def test_sluglines_keep_the_full_heading():
    content = (
        "INT. KITCHEN - NIGHT\n"
        "Steam rises from a pot.\n"
        "ext. alley - day\n"
        "A cat knocks over a bin.\n"
    )
    blocks = parse_script(content)
    assert [b.title for b in blocks] == ["INT. KITCHEN - NIGHT", "EXT. alley - day"]
    assert blocks[1].description == "A cat knocks over a bin."


def test_separators_use_trailing_text_or_position():
    content = "--- Arrival\nThe ship docks.\n---\nCrowds gather.\n"
    blocks = parse_script(content)
    assert blocks == [
        SceneBlock(title="Arrival", description="The ship docks."),
        SceneBlock(title="Scene 2", description="Crowds gather."),
    ]


def test_preamble_before_first_marker_is_ignored():
    content = "NEON HARBOR\nA draft by nobody.\n\nSCENE 1\nMira wakes up."
    assert parse_script(content) == [SceneBlock(title="Scene 1", description="Mira wakes up.")]


def test_marker_without_body_uses_its_text_as_description():
    content = "SCENE 1: Mira sprints across the pier\nSCENE 2: Harbor\nBoats rock in the swell."
    blocks = parse_script(content)
    assert blocks[0] == SceneBlock(title="Scene 1", description="Mira sprints across the pier")
    assert blocks[1] == SceneBlock(title="Scene 2: Harbor", description="Boats rock in the swell.")


def test_empty_marker_blocks_are_dropped():
    blocks = parse_script("SCENE 1\nSCENE 2\nOnly this one has a body.")
    assert blocks == [SceneBlock(title="Scene 2", description="Only this one has a body.")]


def test_falls_back_to_paragraphs_without_markers():
    content = "Mira stands on the pier.\n\n  \nThe storm rolls in.\n\nLightning."
    blocks = parse_script(content)
    assert [b.title for b in blocks] == ["Scene 1", "Scene 2", "Scene 3"]
    assert blocks[1].description == "The storm rolls in."


def test_windows_line_endings():
    blocks = parse_script("SCENE 1\r\nFirst.\r\nSCENE 2\r\nSecond.\r\n")
    assert [b.description for b in blocks] == ["First.", "Second."]


def test_blank_content_yields_nothing():
    assert parse_script("   \n\n ") == []
