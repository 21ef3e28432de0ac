from lyric_engine.lrc.model import LyricLine
from lyric_engine.sync.tracker import LOOKAHEAD_MS, LineTracker, resolve_active_index, running_max_end


def _lines(*spans: tuple[int, int]) -> list[LyricLine]:
    return [LyricLine.single(str(i), s, e) for i, (s, e) in enumerate(spans)]


WORD_LINES = _lines((0, 2000), (2000, 4000), (4000, 6000))


def test_empty():
    assert resolve_active_index(1000, []) == -1


def test_non_overlapping_word_lines():
    assert resolve_active_index(2500, WORD_LINES, 0, 3) == 1
    assert resolve_active_index(0, WORD_LINES) == 0
    # lookahead: 1700 + 300 reaches the second line
    assert resolve_active_index(1700, WORD_LINES) == 1


def test_before_first_and_after_last():
    assert resolve_active_index(-1000, WORD_LINES) == -1
    assert resolve_active_index(10_000, WORD_LINES) == 2
    assert resolve_active_index(6000 - LOOKAHEAD_MS, WORD_LINES) == 2


def test_offset_is_applied():
    assert resolve_active_index(0, WORD_LINES, offset_ms=2000) == 1
    assert resolve_active_index(2500, WORD_LINES, offset_ms=-2000) == 0


def test_gap_keeps_previous_line():
    lines = _lines((0, 1000), (5000, 6000), (8000, 9000))
    assert resolve_active_index(3000, lines) == 0


def test_overlapping_duet_lines():
    lines = _lines((0, 10_000), (1000, 10_000), (2000, 10_000), (3000, 10_000), (20_000, 21_000))
    # four lines active at 5s; keep the three most recent, return the earliest of them
    assert resolve_active_index(5000, lines, max_keep=3) == 1
    assert resolve_active_index(5000, lines, max_keep=2) == 2
    assert resolve_active_index(5000, lines, max_keep=1) == 2
    assert resolve_active_index(5000, lines, max_keep=10) == 0


def test_two_overlapping():
    lines = _lines((0, 3000), (1000, 4000), (5000, 6000))
    assert resolve_active_index(1500, lines) == 0
    assert resolve_active_index(3500, lines) == 1


def test_plain_lines_without_end_times():
    lines = [LyricLine.single(t, s, 0) for t, s in (("a", 1000), ("b", 3000), ("c", 5000))]
    assert resolve_active_index(0, lines) == -1
    assert resolve_active_index(800, lines) == 0
    assert resolve_active_index(3200, lines) == 1
    assert resolve_active_index(100_000, lines) == 2


def test_tracker_changed_only_on_change():
    tr = LineTracker.from_lines(_lines((0, 1000), (1000, 2000), (2000, 3000)))
    assert tr.changed_index(0) == 0
    assert tr.changed_index(10) is None
    assert tr.changed_index(600) is None
    assert tr.changed_index(700) == 1
    assert tr.changed_index(1500) is None
    assert tr.changed_index(2500) == 2


def test_long_background_line_far_behind_stays_active():
    # one background line under twenty short ones
    lines = _lines((0, 100_000), *((1000 + i * 1000, 1500 + i * 1000) for i in range(20)))
    assert resolve_active_index(19_400, lines) == 0
    assert resolve_active_index(19_400, lines, max_end=running_max_end(lines)) == 0
    assert LineTracker.from_lines(lines).current_index(19_400) == 0


def test_running_max_end():
    lines = _lines((0, 5000), (1000, 2000), (3000, 9000))
    assert running_max_end(lines) == (5000, 5000, 9000)
    assert running_max_end([]) == ()


def test_max_end_stops_walk_without_changing_result():
    lines = _lines((0, 1000), (1000, 2000), (2000, 3000), (2500, 4000), (5000, 6000))
    max_end = running_max_end(lines)
    for now in (-500, 0, 900, 2300, 2800, 4500, 5200, 7000):
        assert resolve_active_index(now, lines, max_end=max_end) == resolve_active_index(now, lines)
