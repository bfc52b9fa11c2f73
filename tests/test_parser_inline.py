"""Unit tests for the inline Markdown parser."""

from __future__ import annotations

import pytest

from parser_inline import append_inline, parse_inline
from models import Mark, Node


def _texts(nodes: list[Node]) -> list[tuple[str, list[str]]]:
    return [(n.text, [m.type for m in n.marks]) for n in nodes]


def test_bold_and_italic_spans() -> None:
    nodes = parse_inline("Text with **bold** and *italic*")

    assert _texts(nodes) == [
        ("Text with ", []),
        ("bold", ["bold"]),
        (" and ", []),
        ("italic", ["italic"]),
    ]


def test_strike_and_underscore_italic() -> None:
    nodes = parse_inline("~~gone~~ and _soft_")

    assert _texts(nodes) == [
        ("gone", ["strike"]),
        (" and ", []),
        ("soft", ["italic"]),
    ]


def test_code_span_is_not_parsed_further() -> None:
    nodes = parse_inline("run `**x**` now")

    assert _texts(nodes) == [("run ", []), ("**x**", ["code"]), (" now", [])]


def test_link_label_carries_nested_marks() -> None:
    nodes = parse_inline("[**Docs**](https://example.com)")

    assert len(nodes) == 1
    assert nodes[0].text == "Docs"
    link, bold = nodes[0].marks
    assert link.type == "link"
    assert link.attrs == {"href": "https://example.com", "target": "_blank"}
    assert bold.type == "bold"


def test_snake_case_stays_literal() -> None:
    assert _texts(parse_inline("call snake_case_name()")) == [("call snake_case_name()", [])]


def test_spaced_asterisks_stay_literal() -> None:
    assert _texts(parse_inline("2 * 3 * 4")) == [("2 * 3 * 4", [])]


def test_unclosed_delimiter_is_kept_verbatim() -> None:
    assert _texts(parse_inline("**unclosed")) == [("**unclosed", [])]


def test_empty_text_gives_no_nodes() -> None:
    assert parse_inline("") == []


def test_append_inline_merges_equal_marks_and_skips_empty() -> None:
    nodes: list[Node] = []
    bold = [Mark(type="bold")]

    append_inline(nodes, Node.text_node("a", bold))
    append_inline(nodes, Node.text_node("b", bold))
    append_inline(nodes, Node.text_node(""))
    append_inline(nodes, Node.text_node("c"))

    assert _texts(nodes) == [("ab", ["bold"]), ("c", [])]


def test_literal_text_reassembles_exactly() -> None:
    text = "Price: 5 * 3 = 15, a_b [not a link] ~ x > y # done"
    assert "".join(n.text for n in parse_inline(text)) == text


@pytest.mark.parametrize("text, expected", [
    ("`unclosed code", "`unclosed code"),
    ("``", "``"),
    ("[label](no close", "[label](no close"),
    ("[label] (spaced)", "[label] (spaced)"),
    ("~~no close", "~~no close"),
    ("**a*", "*a"),
    ("*a **b", "*a **b"),
    ("a ** b", "a ** b"),
    ("_x and snake_case", "_x and snake_case"),
    ("**bold** and `code", "bold and `code"),
    ("\\*not italic\\*", "*not italic*"),
    ("**a \\* b**", "a * b"),
    ("back\\slash", "back\\slash"),
])
def test_malformed_delimiters_keep_their_characters(text, expected) -> None:
    assert "".join(n.text for n in parse_inline(text)) == expected


def test_escaped_closer_does_not_end_a_span() -> None:
    nodes = parse_inline("*a\\*b*")
    assert _texts(nodes) == [("a*b", ["italic"])]
