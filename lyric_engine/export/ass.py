from __future__ import annotations

from typing import Sequence

from lyric_engine.lrc.model import LyricLine
from lyric_engine.lrc.timecodec import split_ms

_HEADER = """[Script Info]
Title: {title} - {artist}
ScriptType: v4.00+
WrapStyle: 0
ScaledBorderAndShadow: yes
YCbCr Matrix: TV.601
PlayResX: 1920
PlayResY: 1080

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,60,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,0,0,1,2,0,2,10,10,10,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""


def format_ass_time(ms: int) -> str:
    # H:MM:SS.cc, centiseconds are truncated
    h, m, s, ms2 = split_ms(ms)
    return f"{h}:{m:02d}:{s:02d}.{ms2 // 10:02d}"


_BREAK = r"\N"


def _ass_text(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n", _BREAK)


def export_ass(
    lines: Sequence[LyricLine],
    title: str = "Unknown Title",
    artist: str = "Unknown Artist",
    include_translation: bool = True,
    include_romanization: bool = False,
) -> str:
    events: list[str] = []
    for line in lines:
        text = line.text.strip()
        if not text:
            continue
        parts = [_ass_text(text)]
        if include_translation and line.translated_lyric:
            parts.append(_ass_text(line.translated_lyric))
        if include_romanization and line.roman_lyric:
            parts.append(_ass_text(line.roman_lyric))
        events.append(
            f"Dialogue: 0,{format_ass_time(line.start_time)},{format_ass_time(line.end_time)},"
            f"Default,,0,0,0,,{_BREAK.join(parts)}"
        )
    return _HEADER.format(title=title, artist=artist) + "\n".join(events)
