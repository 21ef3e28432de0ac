from __future__ import annotations

import logging
import re

from lyric_engine.lrc.align import align_lines
from lyric_engine.lrc.detect import META_TAG_RE
from lyric_engine.lrc.model import AlignTarget, LyricLine, LyricWord
from lyric_engine.lrc.parse import parse_lrc

from .extract import ContentExtractor, default_extractor

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^\[(\d+),(\d+)\](.*)$")  # [start,duration]text
_WORD_RE = re.compile(r"([^(]*)\((\d+),(\d+)\)")  # word(start,duration)
# XML attribute normalization may have turned the newlines into spaces
_LINE_SPLIT_RE = re.compile(r"\r?\n|(?=\[\d+,\d+\])")

# vendor-injected lines in translation tracks
TRANSLATION_BLOCKLIST = ("//", "作品的著作权")


def _is_blocked_translation(line: LyricLine) -> bool:
    text = line.text
    return any(marker in text for marker in TRANSLATION_BLOCKLIST)


class QrcParser:
    def __init__(self, extractor: ContentExtractor | None = None):
        self.extractor = extractor or default_extractor()

    def parse_content(self, raw: str) -> list[LyricLine]:
        content = self.extractor.extract(raw) or raw
        out: list[LyricLine] = []
        for chunk in _LINE_SPLIT_RE.split(content):
            line = chunk.strip()
            if not line or META_TAG_RE.match(line):
                continue
            m = _LINE_RE.match(line)
            if not m:
                continue
            start = int(m.group(1))
            duration = int(m.group(2))
            words = tuple(
                LyricWord(word=w.group(1), start_time=int(w.group(2)), end_time=int(w.group(2)) + int(w.group(3)))
                for w in _WORD_RE.finditer(m.group(3))
                if w.group(1)
            )
            if words:
                out.append(LyricLine(words=words, start_time=start, end_time=start + duration))
        return out

    def parse(
        self,
        qrc: str,
        translation: str | None = None,
        romanization: str | None = None,
    ) -> list[LyricLine]:
        """
        Parse a QRC payload and optionally merge a translation (plain LRC)
        and a romanization (QRC) track onto it.
        """
        lines = self.parse_content(qrc)

        if translation:
            trans_lines = [ln for ln in parse_lrc(translation) if not _is_blocked_translation(ln)]
            if trans_lines:
                lines = align_lines(lines, trans_lines, AlignTarget.TRANSLATION)

        if romanization:
            roma_lines = [
                LyricLine.single(ln.text, ln.start_time, ln.end_time)
                for ln in self.parse_content(romanization)
            ]
            if roma_lines:
                lines = align_lines(lines, roma_lines, AlignTarget.ROMANIZATION)

        logger.debug("Parsed QRC: %d lines", len(lines))
        return lines


def parse_qrc(qrc: str, translation: str | None = None, romanization: str | None = None) -> list[LyricLine]:
    return QrcParser().parse(qrc, translation, romanization)
