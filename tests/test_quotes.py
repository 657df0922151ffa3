import pytest

from app.text_pipeline.quotes import (
    CLOSERS,
    OPENERS,
    QUOTE_CHARS,
    QuoteStyle,
    closes,
    opening_style,
)


def test_every_style_has_one_opener_and_closers():
    assert set(OPENERS.values()) == set(QuoteStyle)
    assert set(CLOSERS) == set(QuoteStyle)


@pytest.mark.parametrize(
    "ch, style",
    [
        ('"', QuoteStyle.ascii_double),
        ("'", QuoteStyle.ascii_single),
        ("“", QuoteStyle.curly_double),
        ("‘", QuoteStyle.curly_single),
    ],
)
def test_openers(ch, style):
    assert opening_style(ch) is style


@pytest.mark.parametrize("ch", ["”", "’", "«", "a", "।"])
def test_non_openers(ch):
    assert opening_style(ch) is None


@pytest.mark.parametrize(
    "opener, closer, expected",
    [
        ('"', '"', True),
        ("'", "'", True),
        ("“", "”", True),
        ("‘", "’", True),
        ("“", '"', True),
        ("‘", "'", True),
        ('"', "”", False),
        ("'", '"', False),
        ("“", "’", False),
        ("‘", "”", False),
        ("”", "”", False),
    ],
)
def test_closers(opener, closer, expected):
    assert closes(opener, closer) is expected


def test_quote_chars_cover_openers_and_closers():
    assert QUOTE_CHARS == {'"', "'", "“", "”", "‘", "’"}
