"""
Text Pipeline — Quotation Mark Classification

Closed lookup of the quotation styles the boundary scanner understands.
Each style names the character that opens it and the set of characters
allowed to close it:

  ASCII double   "   closed by  "
  ASCII single   '   closed by  '
  Curly double   “   closed by  ”  or  "
  Curly single   ‘   closed by  ’  or  '

Right curly quotes (” ’) never open a quotation.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class QuoteStyle(str, Enum):
    ascii_double = "ascii_double"
    ascii_single = "ascii_single"
    curly_double = "curly_double"
    curly_single = "curly_single"


# opener character → style
OPENERS: dict[str, QuoteStyle] = {
    '"': QuoteStyle.ascii_double,
    "'": QuoteStyle.ascii_single,
    "“": QuoteStyle.curly_double,   # U+201C
    "‘": QuoteStyle.curly_single,   # U+2018
}

# style → characters that may close it
CLOSERS: dict[QuoteStyle, frozenset[str]] = {
    QuoteStyle.ascii_double: frozenset({'"'}),
    QuoteStyle.ascii_single: frozenset({"'"}),
    QuoteStyle.curly_double: frozenset({"”", '"'}),   # U+201D or ASCII
    QuoteStyle.curly_single: frozenset({"’", "'"}),   # U+2019 or ASCII
}

QUOTE_CHARS: frozenset[str] = frozenset(OPENERS) | frozenset().union(*CLOSERS.values())


def opening_style(ch: str) -> Optional[QuoteStyle]:
    """Style opened by *ch*, or None if *ch* cannot open a quotation."""
    return OPENERS.get(ch)


def closes(opener: str, ch: str) -> bool:
    """True when *ch* is an accepted closer for a quotation opened by *opener*."""
    style = OPENERS.get(opener)
    if style is None:
        return False
    return ch in CLOSERS[style]
