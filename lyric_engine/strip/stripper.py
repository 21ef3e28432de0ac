"""
Remove credit blocks at the head and tail of a lyric, e.g.

    SongTitle - Artist
    作词：...
    作曲：...
    编曲：...
    real lyric line 1
    real lyric line 2

Each candidate line is classified as

- strict: keyword + separator, or a configured strict pattern
- soft:   has a colon / dash or matches a soft pattern; likely metadata
          without a rule, but may also be a singer label ("男：...")
- neither: real lyric; acts as a firewall, scanning stops there

Soft lines are only removed when a strict line follows them in the scan
direction, so a run of singer labels right before the body survives.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Iterable, Sequence

import regex

from lyric_engine.errors import InvalidPatternError
from lyric_engine.lrc.model import LyricLine

logger = logging.getLogger(__name__)

STRICT_MATCH_SEPARATORS = frozenset(":：,，.。!！-_(（[【{『「")

_BRACKET_PAIRS = (
    ("(", ")"),
    ("（", "）"),
    ("【", "】"),
    ("[", "]"),
    ("{", "}"),
    ("『", "』"),
    ("「", "」"),
)
_MAX_BRACKET_PASSES = 5
_WS_RE = regex.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ScanLimit:
    ratio: float
    min_lines: int
    max_lines: int

    def limit(self, total: int) -> int:
        proportional = math.ceil(total * self.ratio)
        return min(max(proportional, self.min_lines), self.max_lines, total)


DEFAULT_HEADER_LIMIT = ScanLimit(ratio=0.2, min_lines=20, max_lines=70)
DEFAULT_FOOTER_LIMIT = ScanLimit(ratio=0.2, min_lines=20, max_lines=50)


@dataclass(frozen=True, slots=True)
class TitleArtistHint:
    title: str
    artists: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class StripOptions:
    keywords: tuple[str, ...] = ()
    strict_patterns: tuple[str, ...] = ()
    soft_patterns: tuple[str, ...] = ()
    title_hint: TitleArtistHint | None = None

    @property
    def has_rules(self) -> bool:
        return bool(self.keywords or self.strict_patterns or self.soft_patterns)


@dataclass(slots=True)
class PatternCache:
    """
    Compiled user patterns, owned by the caller.

    Invalid patterns are remembered as misses so they are reported once.
    """

    _compiled: dict[str, regex.Pattern | None] = field(default_factory=dict)

    def compile_strict(self, pattern: str) -> regex.Pattern:
        try:
            return regex.compile(pattern, regex.IGNORECASE)
        except regex.error as e:
            raise InvalidPatternError(pattern, str(e)) from e

    def get(self, pattern: str) -> regex.Pattern | None:
        if pattern in self._compiled:
            return self._compiled[pattern]
        try:
            compiled: regex.Pattern | None = self.compile_strict(pattern)
        except InvalidPatternError as e:
            logger.warning("Skipping lyric strip pattern: %s", e)
            compiled = None
        self._compiled[pattern] = compiled
        return compiled

    def compile_all(self, patterns: Iterable[str]) -> list[regex.Pattern]:
        out: list[regex.Pattern] = []
        for p in patterns:
            if not p.strip():
                continue
            compiled = self.get(p)
            if compiled is not None:
                out.append(compiled)
        return out

    def __len__(self) -> int:
        return len(self._compiled)


def line_text(line: LyricLine) -> str:
    return line.text.strip()


def clean_text_for_check(text: str) -> str:
    """
    Peel wrapping brackets: "(作曲: X)" -> "作曲: X", "(Live) 作曲: X" -> "作曲: X".
    """
    processed = text.strip()
    for _ in range(_MAX_BRACKET_PASSES):
        changed = False
        for open_, close in _BRACKET_PAIRS:
            if not processed.startswith(open_):
                continue
            if processed.endswith(close):
                processed = processed[len(open_) : len(processed) - len(close)].strip()
                changed = True
                break
            close_idx = processed.find(close)
            if close_idx > -1:
                after = processed[close_idx + len(close) :].strip()
                if after:
                    processed = after
                    changed = True
                    break
        if not changed:
            break
    return processed


def _normalize(text: str) -> str:
    return _WS_RE.sub("", text.lower())


def is_strict_match(text: str, keywords: Sequence[str], patterns: Sequence[regex.Pattern]) -> bool:
    normalized = _normalize(clean_text_for_check(text))
    for kw in keywords:
        norm_kw = _normalize(kw)
        if not norm_kw or not normalized.startswith(norm_kw):
            continue
        remainder = normalized[len(norm_kw) :]
        if not remainder or remainder[0] in STRICT_MATCH_SEPARATORS:
            return True
    return any(p.search(text) for p in patterns)


def looks_like_metadata(text: str, soft_patterns: Sequence[regex.Pattern]) -> bool:
    cleaned = clean_text_for_check(text)
    # "-" also covers an opening "Title - Artist" line
    if ":" in cleaned or "：" in cleaned or "-" in cleaned:
        return True
    return any(p.search(text) for p in soft_patterns)


def matches_title_line(text: str, hint: TitleArtistHint | None) -> bool:
    if not hint or not hint.title or not hint.artists or not text:
        return False
    lower = text.lower()
    if hint.title.lower() not in lower:
        return False
    return any(a and a.lower() in lower for a in hint.artists)


class MetadataStripper:
    def __init__(
        self,
        options: StripOptions,
        cache: PatternCache | None = None,
        header_limit: ScanLimit = DEFAULT_HEADER_LIMIT,
        footer_limit: ScanLimit = DEFAULT_FOOTER_LIMIT,
    ):
        self.options = options
        self.cache = cache if cache is not None else PatternCache()
        self.header_limit = header_limit
        self.footer_limit = footer_limit
        self.keywords = tuple(options.keywords)
        self.strict = self.cache.compile_all(options.strict_patterns)
        self.soft = self.cache.compile_all(options.soft_patterns)

    def _classify(self, idx: int, text: str) -> tuple[bool, bool]:
        strict = is_strict_match(text, self.keywords, self.strict)
        soft = looks_like_metadata(text, self.soft)
        logger.debug(
            "strip line [%d] %r: %s", idx, text, "STRICT" if strict else "SOFT" if soft else "NONE"
        )
        return strict, soft

    def header_cutoff(self, lines: Sequence[LyricLine], start: int, limit: int) -> int:
        last_strict = start - 1
        for i in range(start, min(limit, len(lines))):
            text = line_text(lines[i])
            if not text:
                continue
            strict, soft = self._classify(i, text)
            if not strict and not soft:
                break
            if strict:
                last_strict = i
        return last_strict + 1

    def footer_cutoff(self, lines: Sequence[LyricLine], start: int, limit: int) -> int:
        total = len(lines)
        if start >= total:
            return start
        first_strict = total
        for i in range(total - 1, max(start, total - limit) - 1, -1):
            text = line_text(lines[i])
            if not text:
                continue
            strict, soft = self._classify(i, text)
            if not strict and not soft:
                break
            if strict:
                first_strict = i
        return first_strict

    def strip(self, lines: Sequence[LyricLine]) -> list[LyricLine]:
        if not lines:
            return []

        scan_start = 0
        if matches_title_line(line_text(lines[0]), self.options.title_hint):
            logger.debug("First line %r is the title/artist line", line_text(lines[0]))
            scan_start = 1

        if scan_start == 0 and not self.options.has_rules:
            return list(lines)

        total = len(lines)
        start = self.header_cutoff(lines, scan_start, self.header_limit.limit(total))
        end = self.footer_cutoff(lines, start, self.footer_limit.limit(total))

        if start == 0 and end == total:
            return list(lines)
        logger.debug("Stripped lyric metadata: %d -> %d lines", total, end - start)
        return list(lines[start:end])


def strip_metadata(
    lines: Sequence[LyricLine],
    options: StripOptions,
    cache: PatternCache | None = None,
) -> list[LyricLine]:
    return MetadataStripper(options, cache=cache).strip(lines)
