from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LrcFormat(str, Enum):
    LINE = "line"
    WORD_BY_WORD = "word-by-word"
    ENHANCED = "enhanced"
    QRC = "qrc"


def is_word_level(fmt: LrcFormat) -> bool:
    return fmt in (LrcFormat.WORD_BY_WORD, LrcFormat.ENHANCED)


class AlignTarget(str, Enum):
    """Which secondary field of a line an aligned track is written into."""

    TRANSLATION = "translated_lyric"
    ROMANIZATION = "roman_lyric"


@dataclass(frozen=True, slots=True)
class LyricWord:
    word: str
    start_time: int
    end_time: int
    roman_word: str = ""


@dataclass(frozen=True, slots=True)
class LyricLine:
    words: tuple[LyricWord, ...]
    start_time: int
    end_time: int = 0
    translated_lyric: str = ""
    roman_lyric: str = ""
    is_bg: bool = False
    is_duet: bool = False

    @property
    def text(self) -> str:
        return "".join(w.word for w in self.words)

    @classmethod
    def single(cls, text: str, start_time: int, end_time: int) -> "LyricLine":
        # plain LRC carries no per-word timing: the whole text is one word
        word = LyricWord(word=text, start_time=start_time, end_time=end_time)
        return cls(words=(word,), start_time=start_time, end_time=end_time)


@dataclass(frozen=True, slots=True)
class LyricDocument:
    format: LrcFormat
    lines: tuple[LyricLine, ...]
    tags: dict[str, str] | None = None
    offset_ms: int = 0

    def __len__(self) -> int:
        return len(self.lines)
