import pytest

from lyric_engine.qrc.extract import (
    DomContentExtractor,
    RegexContentExtractor,
    decode_xml_entities,
    default_extractor,
)
from lyric_engine.qrc.parse import QrcParser, parse_qrc

QRC_XML = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    "<QrcInfos>\n"
    '<QrcHeadInfo SaveTime="1" Version="100"/>\n'
    '<LyricInfo LyricCount="1">\n'
    '<Lyric_1 LyricType="1" LyricContent="[ti:Song]&#10;[0,1000]A(0,400)B(400,600)&#10;[1500,800]C(1500,800)&#10;"/>\n'
    "</LyricInfo>\n"
    "</QrcInfos>"
)


class RecordingExtractor:
    def __init__(self, result: str):
        self.result = result
        self.calls: list[str] = []

    def extract(self, raw: str) -> str:
        self.calls.append(raw)
        return self.result


def test_decode_entities_amp_last():
    assert decode_xml_entities("&quot;a&quot; &lt;b&gt; &apos;c&apos;") == "\"a\" <b> 'c'"
    assert decode_xml_entities("&amp;lt;") == "&lt;"


def test_dom_extractor_finds_nested_attribute():
    content = DomContentExtractor().extract(QRC_XML)
    assert content.startswith("[ti:Song]\n[0,1000]A(0,400)")


def test_dom_extractor_falls_back_on_broken_xml():
    fallback = RecordingExtractor("from fallback")
    broken = '<Lyric_1 LyricContent="[0,10]say "hi"(0,10)"/>'
    assert DomContentExtractor(fallback=fallback).extract(broken) == "from fallback"
    assert fallback.calls == [broken]


def test_regex_greedy_handles_unescaped_quotes():
    broken = '<Lyric_1 LyricType="1" LyricContent="[0,10]say "hi"(0,10)"/>'
    assert RegexContentExtractor().extract(broken) == '[0,10]say "hi"(0,10)'


def test_regex_overcapture_falls_back_to_strict():
    raw = '<Lyric_1 LyricContent="[0,10]a(0,10)" LyricType="1"/>'
    assert RegexContentExtractor().extract(raw) == "[0,10]a(0,10)"


def test_regex_without_envelope_passes_through():
    assert RegexContentExtractor().extract("[0,10]a(0,10)") == "[0,10]a(0,10)"
    assert RegexContentExtractor().extract("") == ""


def test_parse_content_lines_and_words():
    lines = QrcParser().parse_content(QRC_XML)
    assert len(lines) == 2
    first, second = lines
    assert (first.start_time, first.end_time) == (0, 1000)
    assert [(w.word, w.start_time, w.end_time) for w in first.words] == [("A", 0, 400), ("B", 400, 1000)]
    assert (second.start_time, second.end_time, second.text) == (1500, 2300, "C")


def test_parse_content_survives_newlines_normalized_to_spaces():
    raw = '<Lyric_1 LyricContent="[0,500]x(0,500) [600,400]y(600,400)"/>'
    lines = QrcParser().parse_content(raw)
    assert [ln.text for ln in lines] == ["x", "y"]


def test_injected_extractor_is_used():
    extractor = RecordingExtractor("[100,200]z(100,200)")
    lines = QrcParser(extractor=extractor).parse_content("ignored")
    assert extractor.calls == ["ignored"]
    assert lines[0].text == "z"


def test_merge_translation_and_romanization():
    raw = "[0,1000]你(0,500)好(500,500)\n[2000,1000]世(2000,500)界(2500,500)\n"
    trans = "[00:00.00]//\n[00:00.10]hello\n[00:02.05]world\n[00:05.00]TME享有本翻译作品的著作权\n"
    roma = "[0,1000]ni (0,500)hao(500,500)\n[2000,1000]shi (2000,500)jie(2500,500)\n"
    lines = parse_qrc(raw, trans, roma)
    assert [ln.translated_lyric for ln in lines] == ["hello", "world"]
    assert [ln.roman_lyric for ln in lines] == ["ni hao", "shi jie"]
    # primary word timing untouched
    assert [w.word for w in lines[0].words] == ["你", "好"]


def test_garbage_yields_empty():
    assert parse_qrc("not a qrc at all") == []
    assert parse_qrc("") == []


@pytest.mark.parametrize("raw", [QRC_XML, "[0,1000]A(0,400)B(400,600)"])
def test_default_extractor_handles_wrapped_and_bare(raw):
    assert "[0,1000]A(0,400)" in (default_extractor().extract(raw) or raw)
