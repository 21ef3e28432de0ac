"""
Download-time lyric processing: merge secondary tracks and render files.

Works on raw strings only; fetching the lyrics and writing (and transcoding)
the files is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

from lyric_engine.errors import UnsupportedEncodingError
from lyric_engine.export.ass import export_ass
from lyric_engine.export.lrc import export_lrc
from lyric_engine.export.ttml import export_ttml
from lyric_engine.lrc.align import align_lines
from lyric_engine.lrc.model import AlignTarget, LyricLine
from lyric_engine.lrc.parse import parse_smart
from lyric_engine.qrc.parse import QrcParser

logger = logging.getLogger(__name__)

SUPPORTED_ENCODINGS = ("utf-8", "gbk", "utf-16", "iso-8859-1")


@dataclass(frozen=True, slots=True)
class ExportOptions:
    include_translation: bool = True
    include_romanization: bool = False
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.encoding.lower() not in SUPPORTED_ENCODINGS:
            raise UnsupportedEncodingError(
                f"Unsupported encoding {self.encoding!r}, expected one of: {', '.join(SUPPORTED_ENCODINGS)}"
            )


@dataclass(frozen=True, slots=True)
class ExportResult:
    content: str
    ext: str
    encoding: str


def looks_like_qrc(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith("<") or "<QrcInfos>" in text


def _merge(
    lines: list[LyricLine],
    translation: str | None,
    romanization: str | None,
) -> list[LyricLine]:
    if translation:
        trans = parse_smart(translation).lines
        if trans:
            lines = align_lines(lines, trans, AlignTarget.TRANSLATION)
    if romanization:
        roma = parse_smart(romanization).lines
        if roma:
            lines = align_lines(lines, roma, AlignTarget.ROMANIZATION)
    return lines


def merge_tracks(
    lrc: str,
    translation: str | None = None,
    romanization: str | None = None,
) -> list[LyricLine]:
    return _merge(list(parse_smart(lrc).lines), translation, romanization)


def process_basic(
    lrc: str,
    translation: str | None = None,
    romanization: str | None = None,
    options: ExportOptions = ExportOptions(),
) -> str:
    """
    LRC file content; translation / romanization are merged in as extra
    same-timestamp lines when requested and available.
    """
    translation = translation if options.include_translation else None
    romanization = romanization if options.include_romanization else None
    if not (translation or romanization):
        return lrc

    lines = merge_tracks(lrc, translation, romanization)
    if not lines:
        logger.debug("Primary lyric did not parse, keeping raw LRC")
        return lrc
    return export_lrc(lines)


def build_verbatim(
    qrc: str,
    translation: str | None = None,
    romanization: str | None = None,
    options: ExportOptions = ExportOptions(),
    parser: QrcParser | None = None,
) -> ExportResult | None:
    """Word-timed TTML from a QRC payload, or None when nothing parses."""
    if not qrc:
        return None
    parser = parser or QrcParser()
    lines = parser.parse(
        qrc,
        translation if options.include_translation else None,
        romanization if options.include_romanization else None,
    )
    if not lines:
        return None
    content = export_ttml(lines, encoding=options.encoding)
    return ExportResult(content=content, ext="ttml", encoding=options.encoding)


def build_ass(
    source: str | Sequence[LyricLine],
    title: str,
    artist: str,
    translation: str | None = None,
    romanization: str | None = None,
    options: ExportOptions = ExportOptions(),
) -> ExportResult | None:
    """
    ASS subtitles from parsed lines, a QRC payload or any LRC-family text.
    """
    if isinstance(source, str):
        lines = QrcParser().parse_content(source) if looks_like_qrc(source) else list(parse_smart(source).lines)
    else:
        lines = list(source)
    if not lines:
        return None

    lines = _merge(
        lines,
        translation if options.include_translation else None,
        romanization if options.include_romanization else None,
    )
    content = export_ass(
        lines,
        title=title,
        artist=artist,
        include_translation=options.include_translation,
        include_romanization=options.include_romanization,
    )
    return ExportResult(content=content, ext="ass", encoding=options.encoding)
