from lyric_engine.lrc.model import LyricLine, LyricWord
from lyric_engine.strip.brackets import (
    DASH_STYLE,
    BracketStyle,
    replace_brackets,
    replace_in_text,
    resolve_bracket_style,
)


def _word_line(*words: str) -> LyricLine:
    ws = tuple(LyricWord(w, i * 100, i * 100 + 100) for i, w in enumerate(words))
    return LyricLine(words=ws, start_time=0, end_time=len(words) * 100)


def test_resolve_presets():
    assert resolve_bracket_style() == DASH_STYLE
    assert resolve_bracket_style("angleBrackets") == BracketStyle("〔", "〕", True)
    assert resolve_bracket_style("cornerBrackets") == BracketStyle("「", "」", True)
    assert resolve_bracket_style("custom", "<>") == BracketStyle("<", ">", True)
    assert resolve_bracket_style("custom", " ~ ") == BracketStyle(" ~ ", " ", False)
    assert resolve_bracket_style("custom", "--") == BracketStyle(" -- ", " ", False)


def test_text_dash_mode():
    assert replace_in_text("Hello(world)", DASH_STYLE) == "Hello - world"
    assert replace_in_text("(Music)", DASH_STYLE) == "Music"
    assert replace_in_text("a(b)c", DASH_STYLE) == "a - b c"
    assert replace_in_text("", DASH_STYLE) == ""


def test_text_enclosure_mode():
    style = resolve_bracket_style("cornerBrackets")
    assert replace_in_text("Hello（world）", style) == "Hello「world」"
    assert replace_in_text("(Music)", style) == "「Music」"


def test_word_level_line():
    (out,) = replace_brackets([_word_line("Hello", "(wor", "ld)")])
    assert out.text == "Hello - world"
    assert [w.start_time for w in out.words] == [0, 100, 200]


def test_fully_bracketed_word_line():
    (out,) = replace_brackets([_word_line("(Mu", "sic)")])
    assert out.text == "Music"


def test_secondary_fields_and_no_mutation():
    line = LyricLine.single("a(b)", 0, 100)
    line = LyricLine(
        words=line.words,
        start_time=0,
        end_time=100,
        translated_lyric="(Live)",
        roman_lyric="x(y)",
    )
    (out,) = replace_brackets([line], resolve_bracket_style("angleBrackets"))
    assert out.text == "a〔b〕"
    assert out.translated_lyric == "〔Live〕"
    assert out.roman_lyric == "x〔y〕"
    assert line.text == "a(b)"
