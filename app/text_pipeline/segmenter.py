"""
Speech Collector — Sentence Segmenter
Module : app/text_pipeline/segmenter.py

Turns a story body (Devanagari mixed with ASCII / Unicode punctuation and
quotation marks) into the ordered list of sentences that users record one
at a time.

Four pure stages:

  Stage 1 — normalize_line_breaks   line breaks → "। "
  Stage 2 — scan_boundaries         quote-aware terminator scan
  Stage 3 — merge_stray_fragments   reattach punctuation-only fragments
  Stage 4 — sanitize                trim, unwrap, collapse, drop letterless

Usage
-----
from app.text_pipeline.segmenter import segment

sentences = segment(body)     # ["पहिले वाक्य।", "दुसरे वाक्य", ...]
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from loguru import logger

from app.text_pipeline.quotes import QUOTE_CHARS, closes, opening_style

DANDA = "।"
DOUBLE_DANDA = "॥"

SENTENCE_TERMINATORS = frozenset({DANDA, DOUBLE_DANDA, ".", "!", "?"})

# Devanagari-block punctuation and digits: U+0964, U+0965, U+0966–U+096F, U+0970
_DEVANAGARI_NON_LETTERS = frozenset("।॥०१२३४५६७८९॰")

_LINE_BREAKS = re.compile(r"\n+")
_WHITESPACE = re.compile(r"\s+")
# a danda right after another terminator (closing quotes and spaces allowed between)
_REDUNDANT_DANDA = re.compile(r"(?<=[.!?।॥])([\s\"'”’)\]]*)।+")

# stripped from sentence ends after whitespace is collapsed to single spaces
_LEADING_WRAP = " \"'“”‘’«»([{"
_TRAILING_WRAP = " \"'“”‘’«»)]}.,;:!?…-–—"


# ── Letter class ──────────────────────────────────────────────────────────

def is_letter(ch: str) -> bool:
    """Unicode letter, or any Devanagari-block code point except dandas/digits."""
    if ch.isalpha():
        return True
    return "\u0900" <= ch <= "\u097f" and ch not in _DEVANAGARI_NON_LETTERS


def has_letter(text: str) -> bool:
    return any(is_letter(ch) for ch in text)


# ══════════════════════════════════════════════════════════════════════════
# Stage 1 — Normalizer
# ══════════════════════════════════════════════════════════════════════════

def normalize_line_breaks(text: str) -> str:
    """
    Collapse CRLF to LF, then replace every run of line feeds with a danda
    and a space so a line-per-sentence layout terminates like punctuation.
    """
    text = text.replace("\r\n", "\n")
    return _LINE_BREAKS.sub(DANDA + " ", text)


# ══════════════════════════════════════════════════════════════════════════
# Stage 2 — Boundary scanner
# ══════════════════════════════════════════════════════════════════════════

def _flush(buffer: list[str], fragments: list[str]) -> None:
    fragment = "".join(buffer).strip()
    if fragment:
        fragments.append(fragment)
    buffer.clear()


def scan_boundaries(text: str) -> list[str]:
    """
    Split normalized text into raw fragments.

    A terminator ends a fragment only when no quotation is open and it is
    the last character or is followed by whitespace. Quote characters toggle
    the quotation state: outside a quotation an opener opens one; inside,
    only an accepted closer for the recorded opener closes it. An unmatched
    opener suppresses boundaries until the end-of-input flush.

    Fragments are returned trimmed and non-empty; punctuation-only
    fragments are kept for the merge stage.
    """
    fragments: list[str] = []
    buffer: list[str] = []
    inside_quote = False
    opening_quote: Optional[str] = None
    last_index = len(text) - 1

    for i, ch in enumerate(text):
        buffer.append(ch)

        if ch in QUOTE_CHARS:
            if not inside_quote:
                if opening_style(ch) is not None:
                    inside_quote = True
                    opening_quote = ch
            elif closes(opening_quote, ch):
                inside_quote = False
                opening_quote = None
            continue

        if ch in SENTENCE_TERMINATORS and not inside_quote:
            if i == last_index or text[i + 1].isspace():
                _flush(buffer, fragments)

    _flush(buffer, fragments)
    return fragments


# ══════════════════════════════════════════════════════════════════════════
# Stage 3 — Punctuation merger
# ══════════════════════════════════════════════════════════════════════════

def merge_stray_fragments(fragments: Iterable[str]) -> list[str]:
    """
    Reattach fragments without any letter to a neighbour.

    A stray fragment is appended to the previous accepted sentence when one
    exists, otherwise prepended to the next fragment. A stray fragment with
    no neighbour at all is kept as-is.
    """
    sentences: list[list[str]] = []
    leading: list[str] = []   # strays seen before the first sentence

    for fragment in fragments:
        if not fragment:
            continue
        if has_letter(fragment):
            sentences.append(leading + [fragment])
            leading = []
        elif sentences:
            sentences[-1].append(fragment)
        else:
            leading.append(fragment)

    if leading:
        sentences.append(leading)
    return [" ".join(parts) for parts in sentences]


# ══════════════════════════════════════════════════════════════════════════
# Stage 4 — Sanitizer
# ══════════════════════════════════════════════════════════════════════════

def clean_sentence(text: str) -> str:
    """Drop redundant dandas, collapse whitespace, strip wrapping punctuation."""
    text = _REDUNDANT_DANDA.sub(r"\1", text)
    text = _WHITESPACE.sub(" ", text)
    return text.lstrip(_LEADING_WRAP).rstrip(_TRAILING_WRAP)


def sanitize(fragments: Iterable[str]) -> list[str]:
    """Clean every fragment and drop those left without a letter."""
    cleaned = (clean_sentence(f) for f in fragments)
    return [s for s in cleaned if s and has_letter(s)]


# ══════════════════════════════════════════════════════════════════════════
# Public entry point
# ══════════════════════════════════════════════════════════════════════════

def segment(text: str) -> list[str]:
    """
    Segment a story body into ordered, speakable sentences.

    Never raises for string input. Text without any letter yields an empty
    list, which callers treat as "nothing to import".
    """
    if not text:
        return []

    normalized = normalize_line_breaks(text)
    fragments = scan_boundaries(normalized)
    merged = merge_stray_fragments(fragments)
    sentences = sanitize(merged)

    logger.debug(
        f"[Segmenter] {len(text)} chars → {len(fragments)} fragments "
        f"→ {len(sentences)} sentences"
    )
    return sentences
