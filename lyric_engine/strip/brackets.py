from __future__ import annotations

from dataclasses import dataclass, replace
import re
from typing import Sequence

from lyric_engine.lrc.model import LyricLine

FULL_BRACKET_RE = re.compile(r"^\s*[(（][^()（）]*[)）]\s*$")  # "(Music)"
LEFT_BRACKET_RE = re.compile(r"[(（]")
RIGHT_BRACKET_RE = re.compile(r"[)）]")
TRAILING_RIGHT_RE = re.compile(r"[)）](?=\s*$)")
REPEATED_DASH_RE = re.compile(r"(?:\s*-\s*){2,}")
LEADING_LEFT_RE = re.compile(r"^\s*[(（]")
TRAILING_DASH_RE = re.compile(r"-\s*$")
LEADING_DASH_RE = re.compile(r"^\s*-")
LEADING_DASH_SPACED_RE = re.compile(r"^\s*-\s+")
LEADING_DASH_ANY_RE = re.compile(r"^\s*-\s*")
_SPACES_RE = re.compile(r"\s+")

PRESETS = ("dash", "angleBrackets", "cornerBrackets", "custom")


@dataclass(frozen=True, slots=True)
class BracketStyle:
    start: str
    end: str
    enclosure: bool

    @property
    def dashed(self) -> bool:
        return not self.enclosure and "-" in self.start


DASH_STYLE = BracketStyle(start=" - ", end=" ", enclosure=False)


def resolve_bracket_style(preset: str = "dash", custom: str = "-") -> BracketStyle:
    if preset == "angleBrackets":
        return BracketStyle("〔", "〕", True)
    if preset == "cornerBrackets":
        return BracketStyle("「", "」", True)
    if preset == "custom":
        trimmed = (custom or "-").strip()
        # two different characters and no dash: an opening/closing pair like "<>"
        if len(trimmed) == 2 and trimmed[0] != trimmed[1] and "-" not in trimmed:
            return BracketStyle(trimmed[0], trimmed[1], True)
        return BracketStyle(_SPACES_RE.sub(" ", f" {trimmed} "), " ", False)
    return DASH_STYLE


def replace_in_text(text: str, style: BracketStyle) -> str:
    """Translation / romanization strings."""
    if not text:
        return text
    if not style.enclosure and FULL_BRACKET_RE.match(text):
        return TRAILING_RIGHT_RE.sub("", LEADING_LEFT_RE.sub("", text)).strip()

    out = LEFT_BRACKET_RE.sub(style.start, text)
    if style.enclosure:
        return RIGHT_BRACKET_RE.sub(style.end, out)
    out = RIGHT_BRACKET_RE.sub(style.end, TRAILING_RIGHT_RE.sub("", out))
    if style.dashed:
        out = REPEATED_DASH_RE.sub(" - ", out)
    return out


def _strip_outer_brackets(words: list[str]) -> list[str]:
    for i, w in enumerate(words):
        if LEFT_BRACKET_RE.search(w):
            words[i] = LEFT_BRACKET_RE.sub("", w)
            break
    for i in range(len(words) - 1, -1, -1):
        w = words[i]
        last = max(w.rfind(")"), w.rfind("）"))
        if last != -1:
            words[i] = w[:last] + w[last + 1 :]
            break
    return words


def _replace_right(word: str, style: BracketStyle, at_line_end: bool) -> str:
    def sub(m: re.Match[str]) -> str:
        # a bracket closing the whole line is dropped
        if m.end() == len(word) and at_line_end:
            return ""
        return style.end

    return RIGHT_BRACKET_RE.sub(sub, word)


def _collapse_dashes(words: list[str]) -> list[str]:
    for i in range(len(words)):
        words[i] = REPEATED_DASH_RE.sub(" - ", words[i])
        if i == 0:
            continue
        if TRAILING_DASH_RE.search(words[i - 1]) and LEADING_DASH_RE.search(words[i]):
            words[i - 1] = TRAILING_DASH_RE.sub("", words[i - 1])
            if not LEADING_DASH_SPACED_RE.search(words[i]):
                words[i] = " - " + LEADING_DASH_ANY_RE.sub("", words[i])
    return words


def _replace_in_words(line: LyricLine, style: BracketStyle) -> list[str]:
    texts = [w.word for w in line.words]
    if not style.enclosure and FULL_BRACKET_RE.match(line.text):
        return _strip_outer_brackets(texts)

    last = len(texts) - 1
    out: list[str] = []
    for i, t in enumerate(texts):
        t = LEFT_BRACKET_RE.sub(style.start, t)
        if style.enclosure:
            t = RIGHT_BRACKET_RE.sub(style.end, t)
        else:
            t = _replace_right(t, style, at_line_end=i == last)
        out.append(t)

    if style.dashed:
        out = _collapse_dashes(out)
    return out


def replace_brackets(lines: Sequence[LyricLine], style: BracketStyle = DASH_STYLE) -> list[LyricLine]:
    """
    Replace parentheses in lyric text with the configured style, returning new lines.

    "Hello (world)" -> "Hello - world" with the default dash style.
    """
    out: list[LyricLine] = []
    for line in lines:
        texts = _replace_in_words(line, style)
        words = tuple(replace(w, word=t) for w, t in zip(line.words, texts))
        out.append(
            replace(
                line,
                words=words,
                translated_lyric=replace_in_text(line.translated_lyric, style),
                roman_lyric=replace_in_text(line.roman_lyric, style),
            )
        )
    return out
