from __future__ import annotations

import re

from .model import LrcFormat

META_TAG_RE = re.compile(r"^\[[a-z]+:", re.IGNORECASE)  # [ti:..] [ar:..] [offset:..]
LINE_TAG_RE = re.compile(r"\[(\d{2}):(\d{2})\.(\d+)\]")  # [mm:ss.xx]
INLINE_TAG_RE = re.compile(r"<(\d{2}):(\d{2})\.(\d+)>")  # <mm:ss.xx>


def is_meta_line(line: str) -> bool:
    return bool(META_TAG_RE.match(line))


def has_inline_tag(line: str) -> bool:
    return INLINE_TAG_RE.search(line) is not None


def count_line_tags(line: str) -> int:
    return len(LINE_TAG_RE.findall(line))


def detect_format(text: str) -> LrcFormat:
    """
    Heuristic: the first informative line decides.
    Files made only of meta tags / blank lines fall back to LINE.
    """
    for raw in text.splitlines():
        line = raw.strip()
        if not line or is_meta_line(line):
            continue
        if has_inline_tag(line):
            return LrcFormat.ENHANCED
        if count_line_tags(line) > 1:
            return LrcFormat.WORD_BY_WORD
    return LrcFormat.LINE
