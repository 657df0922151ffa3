"""
Speech Collector — Text Pipeline
=================================
Public API surface for app.text_pipeline.

Exports
-------
segment             — story body → ordered list of sentences
read_story_file     — story file → StoryText(title, body)
parse_story         — raw content → StoryText(title, body)
title_from_sentence — sentence → title without trailing terminators
StoryText           — title / body pair
"""

from app.text_pipeline.segmenter import segment
from app.text_pipeline.story_reader import (
    StoryText,
    parse_story,
    read_story_file,
    title_from_sentence,
)

__all__ = [
    "segment",
    "read_story_file",
    "parse_story",
    "title_from_sentence",
    "StoryText",
]
