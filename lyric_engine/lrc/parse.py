from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import re
from typing import Iterable

from .detect import META_TAG_RE, detect_format
from .model import LrcFormat, LyricDocument, LyricLine, LyricWord
from .timecodec import parse_timestamp

logger = logging.getLogger(__name__)

# [m:s] / [mm:ss.xx] / [mm:ss:xx] / [mm:ss.xxx] / [mm:ss.xxxx]
_TS_RE = re.compile(r"\[(\d{1,2}):(\d{1,2})(?:[.:](\d{1,4}))?\]")
_OFFSET_RE = re.compile(r"^\[offset:\s*([+-]?\d+)\s*\]\s*$", re.IGNORECASE)
_TAG_RE = re.compile(r"^\[([a-zA-Z]{1,8}):(.*)\]\s*$")

_WORD_BY_WORD_RE = re.compile(r"\[(\d{2}):(\d{2})\.(\d+)\]([^\[\]]*)")  # [00:28.850]曲
_LINE_START_RE = re.compile(r"^\[(\d{2}):(\d{2})\.(\d+)\]")
_ENHANCED_WORD_RE = re.compile(r"<(\d{2}):(\d{2})\.(\d+)>([^<]*)")  # <01:37.624>怕

# Tail of the last plain-LRC line: no audio length is known here.
LAST_LINE_DURATION_MS = 10_000
# Duration of a word that no following tag bounds.
DEFAULT_WORD_DURATION_MS = 1_000


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    events_total: int
    lines_with_timestamps: int
    lines_ignored: int


@dataclass(frozen=True, slots=True)
class _Event:
    t_ms: int
    text: str


def _iter_lines(text: str) -> Iterable[str]:
    for raw in text.splitlines():
        line = raw.strip()
        if not line or META_TAG_RE.match(line):
            continue
        yield line


def parse_header(text: str) -> tuple[dict[str, str], int]:
    """
    Collect [ti:], [ar:], ... tags and [offset:+/-ms].
    Purely informational, never applied to line timings.
    """
    tags: dict[str, str] = {}
    offset_ms = 0
    for raw in text.splitlines():
        line = raw.strip()
        off = _OFFSET_RE.match(line)
        if off:
            offset_ms = int(off.group(1))
            continue
        tag = _TAG_RE.match(line)
        if tag and not _TS_RE.search(line):
            k = tag.group(1).strip().lower()
            v = tag.group(2).strip()
            if k and v:
                tags[k] = v
    return tags, offset_ms


def _collect_events(text: str) -> tuple[list[_Event], int, int]:
    events: list[_Event] = []
    lines_with_ts = 0
    ignored = 0
    for raw in text.splitlines():
        if not raw.strip():
            ignored += 1
            continue
        ts = list(_TS_RE.finditer(raw))
        if not ts:
            if not _TAG_RE.match(raw.strip()):
                ignored += 1
            continue
        lines_with_ts += 1
        payload = _TS_RE.sub("", raw).strip()
        for m in ts:
            events.append(_Event(parse_timestamp(m.group(1), m.group(2), m.group(3)), payload))
    # stable: events sharing a timestamp keep file order
    events.sort(key=lambda e: e.t_ms)
    return events, lines_with_ts, ignored


def _group_events(events: list[_Event]) -> list[LyricLine]:
    out: list[LyricLine] = []
    i = 0
    while i < len(events):
        t_ms = events[i].t_ms
        group: list[str] = []
        while i < len(events) and events[i].t_ms == t_ms:
            if events[i].text:
                group.append(events[i].text)
            i += 1
        if not group:
            continue

        end_ms = events[i].t_ms if i < len(events) else t_ms + LAST_LINE_DURATION_MS
        main = LyricLine.single(group[0], t_ms, end_ms)
        # same timestamp: 2nd is the translation, 3rd the romanization
        if len(group) > 1:
            main = replace(main, translated_lyric=group[1])
        if len(group) > 2:
            main = replace(main, roman_lyric=group[2])
        out.append(main)
        # anything beyond becomes its own line at the same time
        out.extend(LyricLine.single(extra, t_ms, end_ms) for extra in group[3:])
    return out


def parse_lrc(text: str) -> list[LyricLine]:
    """
    Plain line-timed LRC.

    Supported:
    - [mm:ss], [mm:ss.xx], [mm:ss:xx], [mm:ss.xxx], [mm:ss.xxxx]
    - multiple timestamps per line
    - several texts sharing one timestamp (main / translation / romanization / extra)
    """
    events, _, _ = _collect_events(text)
    return _group_events(events)


def _words_from_tokens(tokens: list[tuple[int, str]]) -> list[LyricWord]:
    # each tag closes the word before it; the last one gets a default tail
    words: list[LyricWord] = []
    for k, (start, word) in enumerate(tokens):
        if not word:
            continue
        end = tokens[k + 1][0] if k + 1 < len(tokens) else start + DEFAULT_WORD_DURATION_MS
        words.append(LyricWord(word=word, start_time=start, end_time=max(end, start)))
    return words


def _append_clamped(result: list[LyricLine], line: LyricLine) -> None:
    """Clamp the previous line's tail so it does not run into `line`."""
    if result:
        prev = result[-1]
        last = prev.words[-1]
        if line.start_time > last.start_time:
            end = min(last.end_time, line.start_time)
            result[-1] = replace(
                prev,
                words=prev.words[:-1] + (replace(last, end_time=end),),
                end_time=end,
            )
    result.append(line)


def _line_from_words(words: list[LyricWord]) -> LyricLine:
    return LyricLine(words=tuple(words), start_time=words[0].start_time, end_time=words[-1].end_time)


def parse_word_by_word(text: str) -> list[LyricLine]:
    """[00:28.850]曲[00:32.455]：[00:36.060]钱"""
    result: list[LyricLine] = []
    for line in _iter_lines(text):
        tokens: list[tuple[int, str]] = []
        for m in _WORD_BY_WORD_RE.finditer(line):
            word = m.group(4)
            if not word and not tokens:
                # leading empty tags carry no word
                continue
            tokens.append((parse_timestamp(m.group(1), m.group(2), m.group(3)), word))
        words = _words_from_tokens(tokens)
        if words:
            _append_clamped(result, _line_from_words(words))
    return result


def parse_enhanced(text: str) -> list[LyricLine]:
    """[01:37.305]<01:37.624>怕<01:37.943>你 (ESLyric)"""
    result: list[LyricLine] = []
    for line in _iter_lines(text):
        head = _LINE_START_RE.match(line)
        if not head:
            continue
        line_start = parse_timestamp(head.group(1), head.group(2), head.group(3))
        body = line[head.end() :]

        matches = list(_ENHANCED_WORD_RE.finditer(body))
        if matches:
            tokens: list[tuple[int, str]] = []
            lead = body[: matches[0].start()]
            if lead.strip():
                tokens.append((line_start, lead))
            for m in matches:
                tokens.append((parse_timestamp(m.group(1), m.group(2), m.group(3)), m.group(4)))
            words = _words_from_tokens(tokens)
        else:
            plain = body.strip()
            words = (
                [LyricWord(word=plain, start_time=line_start, end_time=line_start + DEFAULT_WORD_DURATION_MS)]
                if plain
                else []
            )
        if words:
            _append_clamped(result, _line_from_words(words))
    return result


def parse_smart(text: str) -> LyricDocument:
    fmt = detect_format(text)
    if fmt is LrcFormat.WORD_BY_WORD:
        lines = parse_word_by_word(text)
    elif fmt is LrcFormat.ENHANCED:
        lines = parse_enhanced(text)
    else:
        lines = parse_lrc(text)
    tags, offset_ms = parse_header(text)
    logger.debug("Detected lyric format %s, %d lines", fmt.value, len(lines))
    return LyricDocument(format=fmt, lines=tuple(lines), tags=tags, offset_ms=offset_ms)


def parse_lrc_with_stats(text: str) -> tuple[LyricDocument, LrcParseStats]:
    # thin wrapper for CLI diagnostics
    doc = parse_smart(text)
    events, lines_with_ts, ignored = _collect_events(text)
    stats = LrcParseStats(
        lines_total=len(text.splitlines()),
        events_total=len(events),
        lines_with_timestamps=lines_with_ts,
        lines_ignored=ignored,
    )
    return doc, stats
