from lyric_engine.lrc.align import ALIGN_TOLERANCE_MS, align_lines
from lyric_engine.lrc.model import AlignTarget, LyricLine


def _lines(*entries: tuple[int, str]) -> list[LyricLine]:
    return [LyricLine.single(text, t, t + 1000) for t, text in entries]


def test_two_pointer_matching_within_tolerance():
    primary = _lines((0, "a"), (5000, "b"), (10_000, "c"))
    secondary = _lines((100, "A"), (5200, "B"), (20_000, "Z"))
    out = align_lines(primary, secondary, AlignTarget.TRANSLATION)
    assert [ln.translated_lyric for ln in out] == ["A", "B", ""]
    assert all(ln.roman_lyric == "" for ln in out)


def test_tolerance_boundary():
    primary = _lines((1000, "a"), (5000, "b"))
    secondary = _lines((1000 + ALIGN_TOLERANCE_MS, "in"), (5000 - ALIGN_TOLERANCE_MS - 1, "out"))
    out = align_lines(primary, secondary, AlignTarget.ROMANIZATION)
    assert [ln.roman_lyric for ln in out] == ["in", ""]


def test_skips_extra_lines_on_either_side():
    primary = _lines((0, "a"), (2000, "b"), (4000, "c"))
    secondary = _lines((-3000, "early"), (2100, "B"), (3000, "stray"), (4050, "C"))
    out = align_lines(primary, secondary, AlignTarget.TRANSLATION)
    assert [ln.translated_lyric for ln in out] == ["", "B", "C"]


def test_secondary_words_are_joined():
    primary = _lines((0, "a"))
    secondary = [
        LyricLine(
            words=tuple(LyricLine.single(w, 0, 10).words[0] for w in ("ni ", "hao")),
            start_time=0,
            end_time=10,
        )
    ]
    assert align_lines(primary, secondary, AlignTarget.ROMANIZATION)[0].roman_lyric == "ni hao"


def test_primary_is_not_mutated():
    primary = _lines((0, "a"), (1000, "b"))
    snapshot = list(primary)
    out = align_lines(primary, _lines((0, "A")), AlignTarget.TRANSLATION)
    assert primary == snapshot
    assert out is not primary
    assert primary[0].translated_lyric == ""


def test_empty_inputs():
    primary = _lines((0, "a"))
    assert align_lines(primary, [], AlignTarget.TRANSLATION) == primary
    assert align_lines([], primary, AlignTarget.TRANSLATION) == []
