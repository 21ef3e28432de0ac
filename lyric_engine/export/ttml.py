from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from lyric_engine.lrc.model import LyricLine, LyricWord
from lyric_engine.lrc.timecodec import split_ms

TTML_NS = "http://www.w3.org/ns/ttml"
TTM_NS = "http://www.w3.org/ns/ttml#metadata"
AMLL_NS = "http://www.example.com/ns/amll"

_ESCAPES = (
    ("&", "&amp;"),  # first
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def xml_escape(text: str) -> str:
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def format_ttml_time(ms: int) -> str:
    # HH:MM:SS.mmm
    h, m, s, ms2 = split_ms(ms)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms2:03d}"


@dataclass(slots=True)
class _Node:
    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["_Node | str"] = field(default_factory=list)

    def add(self, child: "_Node | str") -> "_Node":
        self.children.append(child)
        return self

    def render(self, indent: int = 0) -> str:
        pad = " " * indent
        attrs = "".join(f' {k}="{xml_escape(v)}"' for k, v in self.attrs.items())
        if not self.children:
            return f"{pad}<{self.name}{attrs} />"
        if all(isinstance(c, str) for c in self.children):
            text = "".join(xml_escape(c) for c in self.children)  # type: ignore[arg-type]
            return f"{pad}<{self.name}{attrs}>{text}</{self.name}>"
        inner = "\n".join(
            " " * (indent + 2) + xml_escape(c) if isinstance(c, str) else c.render(indent + 2)
            for c in self.children
        )
        return f"{pad}<{self.name}{attrs}>\n{inner}\n{pad}</{self.name}>"


def _renderable(word: LyricWord) -> bool:
    return bool(word.word) and word.end_time != word.start_time


def export_ttml(
    lines: Sequence[LyricLine],
    include_translation: bool = True,
    include_romanization: bool = True,
    title: str = "Lyrics",
    encoding: str = "utf-8",
) -> str:
    """
    Render word-timed lines as TTML.

    Empty or zero-length words are skipped, and a line left without words
    produces no <p>. `encoding` only goes into the XML declaration.
    """
    root = _Node("tt", {"xmlns": TTML_NS, "xmlns:ttm": TTM_NS, "xmlns:amll": AMLL_NS})
    root.add(_Node("head").add(_Node("metadata").add(_Node("ttm:title").add(title))))

    div = _Node("div")
    for line in lines:
        words = [w for w in line.words if _renderable(w)]
        if not words:
            continue
        p = _Node("p", {"begin": format_ttml_time(line.start_time), "end": format_ttml_time(line.end_time)})
        for w in words:
            p.add(_Node("span", {"begin": format_ttml_time(w.start_time), "end": format_ttml_time(w.end_time)}).add(w.word))
        if include_translation and line.translated_lyric:
            p.add(_Node("span", {"ttm:role": "x-translation"}).add(line.translated_lyric))
        if include_romanization and line.roman_lyric:
            p.add(_Node("span", {"ttm:role": "x-roman"}).add(line.roman_lyric))
        div.add(p)

    root.add(_Node("body").add(div))
    return f'<?xml version="1.0" encoding="{xml_escape(encoding)}"?>\n' + root.render()
