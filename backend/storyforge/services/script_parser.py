"""Script-to-scene segmentation.

Splits screenplay-ish text into scene blocks on recognised markers
(``SCENE 3:``, ``## Scene 3``, ``INT.``/``EXT.`` sluglines, ``---``
separators). Text with no usable marker falls back to one scene per
blank-line-delimited paragraph.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_MARKER_RE = re.compile(
    r"""
    ^[ \t]*
    (?:
        (?:\#{1,6}[ \t]*)?scene[ \t]+(?P<number>\d+)[ \t]*[:\-.]?   # SCENE 1: / ## Scene 1
      | (?P<slug>INT\.|EXT\.)                                     # sluglines
      | (?P<rule>-{3,})                                           # --- separator
    )
    [ \t]*(?P<rest>[^\n]*)$
    """,
    re.IGNORECASE | re.MULTILINE | re.VERBOSE,
)

_PARAGRAPH_RE = re.compile(r"\n\s*\n")


@dataclass
class SceneBlock:
    title: str
    description: str


def parse_script(content: str) -> list[SceneBlock]:
    """Split script text into ordered scene blocks.

    Content before the first marker is ignored. A marker whose block has no
    body keeps the text after the marker as its description, or is dropped
    when there is none. If nothing survives, paragraphs become scenes.
    """
    text = content.replace("\r\n", "\n")
    matches = list(_MARKER_RE.finditer(text))
    blocks: list[SceneBlock] = []

    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[match.end():end].strip()
        rest = match.group("rest").strip()

        if match.group("slug"):
            title = f"{match.group('slug').upper()} {rest}".strip()
            description = body or rest
        else:
            description = body or rest
            if not description:
                continue
            if match.group("number"):
                number = int(match.group("number"))
                title = f"Scene {number}: {rest}" if rest and body else f"Scene {number}"
            else:
                title = rest if rest and body else f"Scene {len(blocks) + 1}"

        if description:
            blocks.append(SceneBlock(title=title, description=description))

    if blocks:
        return blocks

    paragraphs = [p.strip() for p in _PARAGRAPH_RE.split(text) if p.strip()]
    return [
        SceneBlock(title=f"Scene {i + 1}", description=paragraph)
        for i, paragraph in enumerate(paragraphs)
    ]
