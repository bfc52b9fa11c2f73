"""Unit tests for the editor tree pass-through parser."""

from __future__ import annotations

import json

import pytest

from parser_tree import TreeParser, looks_like_tree_node, validate_node


@pytest.fixture
def parser() -> TreeParser:
    return TreeParser()


@pytest.mark.parametrize("value, expected", [
    ({"type": "paragraph", "text": "x"}, False),
    ({"type": "paragraph", "content": []}, True),
    ({"type": "bulletList"}, True),
    ({"type": "text", "text": "x"}, True),
    ({"type": "list", "items": []}, False),
    ("paragraph", False),
])
def test_looks_like_tree_node(value, expected) -> None:
    assert looks_like_tree_node(value) is expected


def test_block_level_text_is_wrapped(parser: TreeParser) -> None:
    doc = parser.build_document({"type": "doc", "content": [{"type": "text", "text": "hi"}]})

    (para,) = doc.content
    assert para.type == "paragraph"
    assert para.content[0].text == "hi"


def test_doc_without_content_is_empty(parser: TreeParser) -> None:
    assert parser.build_document({"type": "doc"}).to_dict() == {"type": "doc", "content": []}


def test_malformed_node_degrades_to_json_paragraph(parser: TreeParser) -> None:
    bad = {"type": "paragraph", "text": 5}

    doc = parser.build_document({"type": "doc", "content": [bad, {"type": "horizontalRule"}]})

    assert [n.type for n in doc.content] == ["paragraph", "horizontalRule"]
    assert json.loads(doc.content[0].plain_text()) == bad


def test_empty_text_nodes_are_dropped() -> None:
    node = validate_node({"type": "paragraph", "content": [{"type": "text", "text": ""}]})
    assert node.content == []


def test_marks_and_attrs_are_preserved() -> None:
    value = {
        "type": "paragraph",
        "attrs": {"blockId": "block-x", "textAlign": "left"},
        "content": [{
            "type": "text",
            "text": "site",
            "marks": [{"type": "link", "attrs": {"href": "https://e.com", "target": "_blank"}}],
        }],
    }

    assert validate_node(value).to_dict() == value


def test_parse_keeps_existing_block_ids(parser: TreeParser) -> None:
    doc = parser.parse([{"type": "paragraph", "attrs": {"blockId": "block-keep"}}])
    assert doc.content[0].block_id == "block-keep"


def test_text_node_with_content_is_kept_as_text(parser: TreeParser, caplog) -> None:
    broken = {"type": "text", "content": [{"type": "text", "text": "nested"}]}

    doc = parser.build_document({"type": "doc", "content": [
        {"type": "paragraph", "content": [{"type": "text", "text": "keep "}, broken]},
    ]})

    (para,) = doc.content
    assert para.content[0].text == "keep "
    assert json.loads(para.content[1].plain_text()) == broken
    assert "text node with content" in caplog.text


def test_text_node_without_text_but_other_keys_degrades() -> None:
    node = validate_node({"type": "text", "value": "orphan"})
    assert node.type == "paragraph"
    assert "orphan" in node.plain_text()


def test_bare_text_node_is_dropped() -> None:
    assert validate_node({"type": "text", "marks": [{"type": "bold"}]}) is None
