"""
Text Pipeline — Story File Reader

Story files are plain UTF-8 text: the first non-blank line is the title,
every following non-blank line belongs to the body that gets segmented.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from app.text_pipeline.segmenter import segment

_TRAILING_TERMINATORS = re.compile(r"[।॥.!?]+\s*$")


@dataclass
class StoryText:
    """A story split into its title line and body text."""
    title: str
    body:  str


def parse_story(content: str) -> StoryText | None:
    """
    Split raw file content into title + body.

    Returns None when the content has no non-blank line.
    """
    lines = [ln.strip() for ln in content.replace("\r\n", "\n").split("\n")]
    lines = [ln for ln in lines if ln]
    if not lines:
        return None
    return StoryText(title=lines[0], body="\n".join(lines[1:]))


def read_story_file(path: str | Path) -> StoryText | None:
    """Read and parse a story file. Raises FileNotFoundError if missing."""
    path = Path(path)
    return parse_story(path.read_text(encoding="utf-8"))


def story_sentences(story: StoryText) -> list[str]:
    """Sentences of the story body, title excluded."""
    return segment(story.body)


def title_from_sentence(sentence: str) -> str:
    """Drop trailing dandas / ASCII terminators so a sentence reads as a title."""
    return _TRAILING_TERMINATORS.sub("", sentence).strip()
