from __future__ import annotations

import json
from typing import Sequence

from lyric_engine.lrc.model import LyricDocument, LyricLine
from lyric_engine.lrc.timecodec import split_ms, total_minutes


def format_lrc_time(ms: int) -> str:
    # [mm:ss.fff], minutes keep growing past the hour
    _, _, s, ms2 = split_ms(ms)
    return f"{total_minutes(ms):02d}:{s:02d}.{ms2:03d}"


def export_lrc(
    lines: Sequence[LyricLine],
    include_translation: bool = True,
    include_romanization: bool = True,
) -> str:
    """
    One line per main text; translation and romanization follow on their own
    lines with the same timestamp, which is how `parse_lrc` groups them back.
    """
    out: list[str] = []
    for line in lines:
        stamp = f"[{format_lrc_time(line.start_time)}]"
        out.append(stamp + line.text)
        if include_translation and line.translated_lyric:
            out.append(stamp + line.translated_lyric)
        if include_romanization and line.roman_lyric:
            out.append(stamp + line.roman_lyric)
    return "\n".join(out)


def export_json(doc: LyricDocument) -> str:
    return json.dumps(
        {
            "format": doc.format.value,
            "offset_ms": doc.offset_ms,
            "tags": doc.tags or {},
            "lines": [
                {
                    "start_ms": ln.start_time,
                    "end_ms": ln.end_time,
                    "text": ln.text,
                    "translation": ln.translated_lyric,
                    "romanization": ln.roman_lyric,
                    "words": [{"word": w.word, "start_ms": w.start_time, "end_ms": w.end_time} for w in ln.words],
                }
                for ln in doc.lines
            ],
        },
        ensure_ascii=False,
        indent=2,
    )
