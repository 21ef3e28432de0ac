import pytest

from lyric_engine.errors import UnsupportedEncodingError
from lyric_engine.lrc.model import LyricLine
from lyric_engine.processor import (
    ExportOptions,
    build_ass,
    build_verbatim,
    looks_like_qrc,
    merge_tracks,
    process_basic,
)

LRC = "[00:01.00]one\n[00:05.00]two\n"
TRANS = "[00:01.10]uno\n[00:05.00]dos\n"
ROMA = "[00:01.00]wan\n"
QRC = '<Lyric_1 LyricType="1" LyricContent="[1000,1000]o(1000,500)ne(1500,500)&#10;[5000,1000]two(5000,1000)"/>'


def test_encoding_is_validated():
    assert ExportOptions(encoding="GBK").encoding == "GBK"
    with pytest.raises(UnsupportedEncodingError):
        ExportOptions(encoding="shift_jis")


def test_merge_tracks():
    lines = merge_tracks(LRC, TRANS, ROMA)
    assert [(ln.text, ln.translated_lyric, ln.roman_lyric) for ln in lines] == [
        ("one", "uno", "wan"),
        ("two", "dos", ""),
    ]


def test_process_basic_merges_requested_tracks():
    out = process_basic(LRC, TRANS, ROMA, ExportOptions(include_translation=True, include_romanization=False))
    assert out == "[00:01.000]one\n[00:01.000]uno\n[00:05.000]two\n[00:05.000]dos"


def test_process_basic_passthrough():
    assert process_basic(LRC, None, None) == LRC
    assert process_basic(LRC, TRANS, None, ExportOptions(include_translation=False)) == LRC
    assert process_basic("not lyrics", TRANS) == "not lyrics"


def test_build_verbatim():
    result = build_verbatim(QRC, TRANS, None, ExportOptions(encoding="utf-16"))
    assert result is not None
    assert result.ext == "ttml"
    assert result.encoding == "utf-16"
    assert result.content.startswith('<?xml version="1.0" encoding="utf-16"?>')
    assert "x-translation" in result.content
    assert result.content.count("<p ") == 2


def test_build_verbatim_nothing_parses():
    assert build_verbatim("") is None
    assert build_verbatim("garbage") is None


def test_build_ass_from_sources():
    result = build_ass(LRC, "Song", "Artist", translation=TRANS)
    assert result is not None
    assert result.ext == "ass"
    assert r"one\Nuno" in result.content

    from_qrc = build_ass(QRC, "Song", "Artist")
    assert from_qrc is not None
    assert from_qrc.content.count("Dialogue:") == 2

    from_lines = build_ass([LyricLine.single("x", 0, 1000)], "S", "A")
    assert from_lines is not None and "Dialogue: 0,0:00:00.00,0:00:01.00" in from_lines.content

    assert build_ass("", "S", "A") is None


def test_looks_like_qrc():
    assert looks_like_qrc(QRC)
    assert looks_like_qrc("junk<QrcInfos>")
    assert not looks_like_qrc(LRC)
