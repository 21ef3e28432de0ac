"""
Pull the `LyricContent` payload out of a QRC envelope.

QRC arrives as pseudo-XML, e.g.

    <QrcInfos><LyricInfo LyricCount="1">
    <Lyric_1 LyricType="1" LyricContent="[0,1200]Hel(0,600)lo(600,600)"/>
    </LyricInfo></QrcInfos>

and the attribute value is often not escaped properly, so a real XML parse
is tried first and a regex strategy takes over when it fails.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol
import xml.etree.ElementTree as ET

logger = logging.getLogger(__name__)

_ATTR = "LyricContent"
# up to the last quote before the tag closes, tolerates unescaped inner quotes
_GREEDY_RE = re.compile(r'LyricContent\s*=\s*"(.*)"\s*/?>', re.DOTALL)
_STRICT_RE = re.compile(r'LyricContent\s*=\s*"([^"]*)"')
# a greedy capture that swallowed another attribute
_OVERCAPTURE_RE = re.compile(r'\s+\w+\s*=\s*"')

_ENTITIES = (
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),  # last, so "&amp;lt;" stays "&lt;"
)


def decode_xml_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


class ContentExtractor(Protocol):
    def extract(self, raw: str) -> str: ...


class RegexContentExtractor:
    """Greedy match, then strict match, then the raw input as-is."""

    def extract(self, raw: str) -> str:
        if not raw:
            return ""

        greedy = _GREEDY_RE.search(raw)
        if greedy and not _OVERCAPTURE_RE.search(greedy.group(1)):
            return decode_xml_entities(greedy.group(1))

        strict = _STRICT_RE.search(raw)
        if strict and strict.group(1):
            return decode_xml_entities(strict.group(1))

        # no envelope: assume the input already is the content
        return decode_xml_entities(raw)


class DomContentExtractor:
    def __init__(self, fallback: ContentExtractor | None = None):
        self.fallback = fallback or RegexContentExtractor()

    def extract(self, raw: str) -> str:
        if not raw or not raw.strip():
            return ""
        try:
            root = ET.fromstring(raw.strip())
        except ET.ParseError as e:
            logger.debug("QRC envelope is not well-formed XML (%s), using fallback", e)
            return self.fallback.extract(raw)

        for elem in root.iter():
            content = elem.get(_ATTR)
            if content:
                return content
        return ""


def default_extractor() -> ContentExtractor:
    return DomContentExtractor(fallback=RegexContentExtractor())
