"""Unit tests for top-level block summaries and splicing."""

from __future__ import annotations

import pytest

from document_operations import (
    get_document_structure,
    insert_blocks_at,
    remove_blocks_range,
    replace_blocks_range,
)
from models import Node, TreeContractError
from normalizer import normalize


@pytest.fixture
def doc() -> Node:
    return normalize([
        {"type": "heading", "level": 2, "text": "Intro"},
        {"type": "paragraph", "text": "First"},
        {"type": "paragraph", "text": "Second"},
        {"type": "divider"},
    ])


def _texts(node: Node) -> list[str]:
    return [child.plain_text() for child in node.content]


def test_structure_lists_top_level_blocks(doc: Node) -> None:
    structure = get_document_structure(doc)

    assert structure.total_blocks == 4
    assert structure.to_dict()["blocks"] == [
        {"index": 0, "type": "heading", "preview": "Intro", "attrs": {"level": 2}},
        {"index": 1, "type": "paragraph", "preview": "First"},
        {"index": 2, "type": "paragraph", "preview": "Second"},
        {"index": 3, "type": "divider", "preview": "---"},
    ]


def test_structure_placeholders_and_readable_types() -> None:
    structure = get_document_structure(normalize([
        {"type": "table", "rows": [[""], [""]]},
        {"type": "columns", "columns": ["", ""]},
        {"type": "accordion", "items": [{"title": "", "content": ""}]},
        {"type": "list", "items": ["a"]},
        {"type": "code", "text": "x = 1"},
    ]))

    assert [(b.type, b.preview) for b in structure.blocks] == [
        ("table", "[table: 2 rows]"),
        ("columns", "[2 columns]"),
        ("accordion", "[accordion: 1 items]"),
        ("list", "a"),
        ("code", "x = 1"),
    ]


def test_preview_is_truncated() -> None:
    (block,) = get_document_structure(normalize([{"type": "paragraph", "text": "x" * 300}])).blocks
    assert block.preview == "x" * 120


def test_structure_accepts_dictionary_documents(doc: Node) -> None:
    assert get_document_structure(doc.to_dict()).to_dict() == get_document_structure(doc).to_dict()


@pytest.mark.parametrize("value", [None, "text", {"type": "paragraph"}, {"type": "doc"}, 42])
def test_structure_of_non_documents_is_empty(value) -> None:
    assert get_document_structure(value).to_dict() == {"total_blocks": 0, "blocks": []}


def test_insert_at_position(doc: Node) -> None:
    result = insert_blocks_at(doc, 1, normalize([{"type": "paragraph", "text": "New"}]))

    assert _texts(result) == ["Intro", "New", "First", "Second", ""]
    assert len(doc.content) == 4


@pytest.mark.parametrize("position, index", [(-5, 0), (0, 0), (4, 4), (99, 4)])
def test_insert_position_is_clamped(doc: Node, position, index) -> None:
    new = Node.paragraph([Node.text_node("New")])
    result = insert_blocks_at(doc, position, [new])
    assert result.content[index] is new


def test_replace_range(doc: Node) -> None:
    result = replace_blocks_range(doc, 1, 3, [Node.paragraph([Node.text_node("Only")])])
    assert _texts(result) == ["Intro", "Only", ""]


def test_replace_range_is_clamped(doc: Node) -> None:
    result = replace_blocks_range(doc, 3, 99, [])
    assert _texts(result) == ["Intro", "First", "Second"]

    unchanged = replace_blocks_range(doc, 3, 1, [])
    assert _texts(unchanged) == _texts(doc)


def test_remove_range(doc: Node) -> None:
    result = remove_blocks_range(doc, 0, 2)

    assert _texts(result) == ["Second", ""]
    assert result.content[0] is doc.content[2]


def test_removing_everything_leaves_one_paragraph(doc: Node) -> None:
    result = remove_blocks_range(doc, -1, 10)
    assert [n.to_dict() for n in result.content] == [{"type": "paragraph"}]


def test_operations_require_a_doc_node() -> None:
    with pytest.raises(TreeContractError):
        insert_blocks_at({"type": "doc", "content": []}, 0, [])  # type: ignore[arg-type]
    with pytest.raises(TreeContractError):
        replace_blocks_range(Node.empty_doc(), 0, 0, [{"type": "paragraph"}])  # type: ignore[list-item]
