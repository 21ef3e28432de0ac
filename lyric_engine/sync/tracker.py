from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from itertools import accumulate
from typing import Sequence

from lyric_engine.lrc.model import LyricLine

# highlight slightly ahead of the clock to hide perceived lag
LOOKAHEAD_MS = 300


def _start(line: LyricLine) -> int:
    return line.start_time


def running_max_end(lines: Sequence[LyricLine]) -> tuple[int, ...]:
    """`result[i]` is the latest end time among `lines[0..i]`."""
    return tuple(accumulate((ln.end_time for ln in lines), max))


def resolve_active_index(
    current_ms: int,
    lines: Sequence[LyricLine],
    offset_ms: int = 0,
    max_keep: int = 3,
    max_end: Sequence[int] | None = None,
) -> int:
    """
    Index of the line to highlight at `current_ms`, or -1.

    Every earlier line still sounding (duets / background vocals) is considered,
    however far back it started. Pass `max_end` from `running_max_end(lines)` to
    stop the backward walk as soon as nothing earlier can still be active; the
    call is then O(log n + k), k being the number of lines walked.
    With several overlapping lines active, at most `max_keep` (>= 2) of the most
    recently started ones are considered and the earliest of those is returned.
    """
    if not lines:
        return -1
    play_seek = current_ms + offset_ms + LOOKAHEAD_MS

    last = len(lines) - 1
    if lines[last].end_time and play_seek >= lines[last].end_time:
        return last

    # first line starting after the play head
    boundary = bisect_right(lines, play_seek, key=_start)

    if not lines[0].end_time:
        # plain line-timed lyrics: no end times to honor
        return boundary - 1

    if boundary == 0:
        return -1

    # most recently started first
    active: list[int] = []
    for i in range(boundary - 1, -1, -1):
        if max_end is not None and max_end[i] <= play_seek:
            break
        if lines[i].start_time <= play_seek < lines[i].end_time:
            active.append(i)
    if not active:
        # in a gap: keep the previous line
        return boundary - 1
    if len(active) == 1:
        return active[0]

    keep = min(len(active), max(max_keep, 2))
    return active[keep - 1]


@dataclass(slots=True)
class LineTracker:
    """
    Frame-loop helper: resolves the active line and reports only changes.
    """

    lines: tuple[LyricLine, ...]
    offset_ms: int = 0
    max_keep: int = 3
    last_idx: int = -1
    max_end: tuple[int, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.max_end = running_max_end(self.lines)

    @classmethod
    def from_lines(cls, lines: Sequence[LyricLine], offset_ms: int = 0, max_keep: int = 3) -> "LineTracker":
        return cls(lines=tuple(lines), offset_ms=offset_ms, max_keep=max_keep)

    def current_index(self, now_ms: int) -> int:
        return resolve_active_index(now_ms, self.lines, self.offset_ms, self.max_keep, self.max_end)

    def changed_index(self, now_ms: int) -> int | None:
        i = self.current_index(now_ms)
        if i != self.last_idx:
            self.last_idx = i
            return i
        return None
