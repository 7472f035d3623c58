import pytest

from compositor.errors import DanglingParagraphError, UnterminatedQuoteError
from compositor.normalizer import (
    Normalizer,
    iter_normalized,
    iter_normalized_numbered,
    normalize_lines,
    normalize_text,
)

HEADER = ["史记", "司马迁"]


def test_merges_broken_sentence():
    out = normalize_lines(HEADER + ["他说：", "你好。"])
    assert out == HEADER + ["他说：你好。"]


def test_drops_blank_lines():
    raw = ["", "史记", "  ", "司马迁", "　", "太史公曰。", "", "又曰。"]
    assert normalize_lines(raw) == HEADER + ["太史公曰。", "又曰。"]


def test_title_and_author_are_verbatim():
    out = normalize_lines(["史  记", "司  马”迁", "正文。"])
    assert out == ["史  记", "司  马”迁", "正文。"]


def test_collapses_unicode_whitespace_runs():
    out = normalize_lines(HEADER + ["a 　\t  b。"])
    assert out[-1] == "a b。"


def test_single_unicode_space_becomes_ascii_space():
    out = normalize_lines(HEADER + ["甲　乙。", "丙 丁。"])
    assert out[2:] == ["甲 乙。", "丙 丁。"]


def test_rewrites_ambiguous_quotes_alternating():
    out = normalize_lines(HEADER + ["”你好。”他说。"])
    assert out[-1] == "“你好。”他说。"


def test_quote_spanning_lines_is_joined():
    out = normalize_lines(HEADER + ["“你好。", "再见。”"])
    assert out[-1] == "“你好。再见。”"


def test_output_quotes_strictly_alternate():
    out = normalize_lines(HEADER + ["”甲”说：”乙。”", "“丙“。"])
    body = "".join(out[2:])
    quotes = [ch for ch in body if ch in "“”"]
    assert quotes == ["“", "”", "“", "”", "“", "”"]


def test_odd_quote_count_is_fatal():
    with pytest.raises(UnterminatedQuoteError) as excinfo:
        normalize_lines(HEADER + ["“你好。", "他说。"])
    assert excinfo.value.line_number == 4


def test_dangling_paragraph_at_end_is_fatal():
    with pytest.raises(DanglingParagraphError):
        normalize_lines(HEADER + ["完整的一句。", "没有结尾"])


def test_table_interrupting_sentence_is_fatal_and_flushes_partial():
    produced = []
    with pytest.raises(DanglingParagraphError) as excinfo:
        for line in iter_normalized(HEADER + ["未完", "---", "a|b", "---"]):
            produced.append(line)
    assert excinfo.value.line_number == 4
    assert excinfo.value.line == "---"
    assert produced == HEADER + ["未完"]


def test_section_marker_interrupting_quote_is_fatal():
    with pytest.raises(DanglingParagraphError):
        normalize_lines(HEADER + ["“说到一半。", "++第二章"])


def test_table_and_section_lines_are_verbatim():
    raw = HEADER + ["++第一章  开始", "---", "甲  |  ”乙", "丙 | 丁", "---", "正文。"]
    assert normalize_lines(raw) == raw


def test_normalize_is_idempotent_on_canonical_text():
    raw = HEADER + ["+卷一", "++本纪", "“你好。”他说。", "---", "a|b", "---", "结束！"]
    once = normalize_lines(raw)
    assert once == raw
    assert normalize_lines(once) == once


def test_accepts_numbered_lines():
    with pytest.raises(DanglingParagraphError) as excinfo:
        normalize_lines([(10, "史记"), (12, "司马迁"), (15, "半句")])
    assert excinfo.value.line_number == 15


def test_normalize_text_shortcut():
    text = "史记\n\n司马迁\n第一句\n继续。\n"
    assert normalize_text(text) == "史记\n司马迁\n第一句继续。"


def test_feed_returns_lines_only_when_sentence_ends():
    normalizer = Normalizer()
    assert normalizer.feed(1, "史记") == ["史记"]
    assert normalizer.feed(2, "司马迁") == ["司马迁"]
    assert normalizer.feed(3, "他问：") == []
    assert normalizer.partial() == "他问："
    assert normalizer.feed(4, "为何？") == ["他问：为何？"]
    assert normalizer.finish() == []


def test_numbered_output_keeps_source_line_numbers():
    raw = ["史记", "", "司马迁", "他说：", "", "你好。", "完。"]
    assert list(iter_normalized_numbered(raw)) == [
        (1, "史记"),
        (3, "司马迁"),
        (6, "他说：你好。"),
        (7, "完。"),
    ]
