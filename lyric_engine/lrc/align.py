from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from .model import AlignTarget, LyricLine

ALIGN_TOLERANCE_MS = 300


def align_lines(
    primary: Sequence[LyricLine],
    secondary: Sequence[LyricLine],
    target: AlignTarget,
    tolerance_ms: int = ALIGN_TOLERANCE_MS,
) -> list[LyricLine]:
    """
    Attach a secondary track (translation / romanization) onto `primary`.

    Two-pointer sweep over both time-sorted sequences, O(n + m).
    Lines whose starts differ by at most `tolerance_ms` are paired; anything
    else is skipped on the earlier side. This is a greedy nearest-neighbour
    merge, not an edit-distance alignment: drift larger than the tolerance or
    missing lines can mis-pair. Unmatched primary lines keep an empty field.
    `primary` is never modified; a new list is returned.
    """
    result = list(primary)
    if not result or not secondary:
        return result

    field = target.value
    i = j = 0
    while i < len(result) and j < len(secondary):
        diff = result[i].start_time - secondary[j].start_time
        if abs(diff) <= tolerance_ms:
            result[i] = replace(result[i], **{field: secondary[j].text})
            i += 1
            j += 1
        elif diff < 0:
            i += 1
        else:
            j += 1
    return result
