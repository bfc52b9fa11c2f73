"""Unit tests for block JSON lowering."""

from __future__ import annotations

import json
import logging

import pytest

from config import NormalizerSettings
from parser_blocks import BlockParser, build_accordion_item, build_columns, lower_block, lower_blocks


def test_heading_and_divider() -> None:
    nodes = lower_blocks([
        {"type": "heading", "level": 1, "text": "Title"},
        {"type": "divider"},
    ])

    assert [n.type for n in nodes] == ["heading", "horizontalRule"]
    assert nodes[0].attrs == {"level": 1}
    assert nodes[0].plain_text() == "Title"


@pytest.mark.parametrize("level, expected", [(9, 6), (0, 1), ("3", 3), ("abc", 1), (None, 1)])
def test_heading_level_is_clamped(level, expected) -> None:
    (node,) = lower_block({"type": "heading", "level": level, "text": "H"})
    assert node.attrs["level"] == expected


def test_paragraph_text_is_inline_parsed() -> None:
    (node,) = lower_block({"type": "paragraph", "text": "a **b**"})

    assert [(c.text, [m.type for m in c.marks]) for c in node.content] == [
        ("a ", []),
        ("b", ["bold"]),
    ]


def test_empty_paragraph_has_no_content() -> None:
    (node,) = lower_block({"type": "paragraph"})
    assert node.to_dict() == {"type": "paragraph"}


def test_table_rows_are_padded_to_header_width() -> None:
    (table,) = lower_block({"type": "table", "headers": ["A", "B", "C"], "rows": [["1", "2"]]})

    header, row = table.content
    assert [c.type for c in header.content] == ["tableHeader"] * 3
    assert [c.type for c in row.content] == ["tableCell"] * 3
    assert [c.plain_text() for c in row.content] == ["1", "2", ""]
    assert row.content[0].attrs == {"colspan": 1, "rowspan": 1}


def test_table_rows_are_truncated_to_header_width() -> None:
    (table,) = lower_block({"type": "table", "headers": ["A"], "rows": [["1", "2", "3"]]})
    assert [c.plain_text() for c in table.content[1].content] == ["1"]


def test_table_without_headers_uses_widest_row() -> None:
    (table,) = lower_block({"type": "table", "rows": [["a"], ["b", "c"]]})

    assert len(table.content) == 2
    assert all(len(row.content) == 2 for row in table.content)
    assert all(cell.type == "tableCell" for row in table.content for cell in row.content)


def test_list_and_checklist() -> None:
    bullet, check = lower_blocks([
        {"type": "list", "items": ["Point 1", "Point 2"]},
        {"type": "checklist", "items": [{"text": "Done", "checked": True}, {"text": "Todo"}]},
    ])

    assert bullet.type == "bulletList"
    assert [i.plain_text() for i in bullet.content] == ["Point 1", "Point 2"]
    assert check.type == "bulletList"
    assert [i.attrs["checked"] for i in check.content] == [True, False]


def test_ordered_list_keeps_start() -> None:
    (node,) = lower_block({"type": "ordered_list", "items": ["a"], "start": 3})
    assert node.type == "orderedList"
    assert node.attrs == {"start": 3}


def test_quote_code_and_image() -> None:
    quote, code, image = lower_blocks([
        {"type": "quote", "text": "wise *words*"},
        {"type": "code", "text": "x = **1**"},
        {"type": "image", "url": "https://e.com/a.png", "alt": "pic"},
    ])

    assert quote.type == "blockquote"
    assert quote.content[0].type == "paragraph"
    assert code.attrs == {"language": "plain"}
    assert code.content[0].text == "x = **1**"
    assert code.content[0].marks == []
    assert image.attrs == {"src": "https://e.com/a.png", "alt": "pic", "alignment": "center"}


def test_code_language_default_comes_from_settings() -> None:
    settings = NormalizerSettings(default_code_language="text")
    (node,) = lower_block({"type": "code", "text": "x"}, settings)
    assert node.attrs["language"] == "text"


def test_unknown_block_degrades_to_json_paragraph(caplog) -> None:
    block = {"type": "mystery", "x": 1}

    with caplog.at_level(logging.WARNING):
        (node,) = lower_block(block)

    assert node.type == "paragraph"
    assert json.loads(node.plain_text()) == block
    assert "mystery" in caplog.text


def test_non_object_block_degrades_to_text() -> None:
    (node,) = lower_block(42)
    assert node.type == "paragraph"
    assert node.plain_text() == "42"


def test_editor_node_among_blocks_passes_through() -> None:
    (node,) = lower_block({"type": "paragraph", "content": [{"type": "text", "text": "raw **x**"}]})
    assert node.content[0].text == "raw **x**"


def test_accordion_item_content_matches_block_lowering() -> None:
    content = [{"type": "heading", "level": 2, "text": "Inner"}, {"type": "list", "items": ["a"]}]

    item = build_accordion_item({"title": "Section", "content": content})

    assert item.type == "accordionItem"
    assert item.attrs == {"title": "Section"}
    assert item.content == lower_blocks(content)


def test_accordion_item_optional_attrs_only_when_present() -> None:
    item = build_accordion_item({"title": "**T**", "content": "Body", "icon": "star"})

    assert item.attrs == {"title": "**T**", "icon": "star"}
    assert item.plain_text() == "Body"


def test_accordion_without_items_has_one_empty_item() -> None:
    (group,) = lower_block({"type": "accordion"})

    assert group.type == "accordionGroup"
    (item,) = group.content
    assert item.attrs == {"title": ""}
    assert item.content[0].to_dict() == {"type": "paragraph"}


def test_columns_one_column_per_entry() -> None:
    node = build_columns(["Left", [{"type": "paragraph", "text": "Right"}]])

    assert node.type == "columns"
    assert [c.type for c in node.content] == ["column", "column"]
    assert [c.plain_text() for c in node.content] == ["Left", "Right"]
    assert build_columns([]).content == []


def test_block_parser_assigns_ids() -> None:
    doc = BlockParser().parse([{"type": "paragraph", "text": "x"}])

    assert doc.type == "doc"
    assert doc.content[0].block_id.startswith("block-")


@pytest.mark.parametrize("flag, expected", [
    (True, True), ("true", True), (" TRUE ", True),
    (False, False), ("false", False), ("no", False), (None, False), (1, False),
])
def test_checklist_flag_only_true_counts(flag, expected) -> None:
    (node,) = lower_block({"type": "checklist", "items": [{"text": "x", "checked": flag}]})
    assert node.content[0].attrs["checked"] is expected
