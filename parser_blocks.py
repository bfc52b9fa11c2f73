"""
Block JSON → document tree lowering.

Converts the simplified, flat "block JSON" format::

    [
      {"type": "heading", "level": 1, "text": "Title"},
      {"type": "paragraph", "text": "Text with **bold** and *italic*"},
      {"type": "list", "items": ["Point 1", "Point 2"]},
      {"type": "checklist", "items": [{"text": "Done", "checked": true}]},
      {"type": "table", "headers": ["Name", "Age"], "rows": [["Alice", "30"]]},
      {"type": "accordion", "items": [{"title": "Section", "content": "Text"}]},
      {"type": "columns", "columns": ["Left", [{"type": "paragraph", "text": "Right"}]]}
    ]

into editor nodes.  Leaf text goes through the inline Markdown parser;
accordion items and columns contain raw text or nested block lists and are
lowered recursively.

Blocks are never dropped: an unknown ``type`` becomes a paragraph holding
the block's JSON text.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from base_parser import BaseParser
from config import (
    ACCORDION_OPTIONAL_ATTRS,
    DEFAULT_SETTINGS,
    IMAGE_ALIGNMENT,
    BlockType,
    NodeType,
    NormalizerSettings,
    clamp_heading_level,
    json_text,
    text_of,
)
from models import Node
from parser_inline import parse_inline
from parser_tree import literal_paragraph, looks_like_tree_node, validate_block

logger = logging.getLogger(__name__)


# ── value helpers ─────────────────────────────────────────────────────────


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


def _inline_paragraph(text: Any) -> Node:
    return Node.paragraph(parse_inline(text_of(text)))


def _item_text(item: Any) -> str:
    if isinstance(item, dict):
        return text_of(item.get("text"))
    return text_of(item)


def _as_checked(value: Any) -> bool:
    """Read a checklist flag; only ``true`` (bool or string) counts as checked."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


# ── simple blocks ─────────────────────────────────────────────────────────


def _lower_heading(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return Node(
        type=NodeType.HEADING,
        attrs={"level": clamp_heading_level(block.get("level", 1))},
        content=parse_inline(text_of(block.get("text"))) or None,
    )


def _lower_paragraph(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return _inline_paragraph(block.get("text"))


def _list_node(list_type: NodeType, block: dict[str, Any], *, checklist: bool = False) -> Node:
    items: list[Node] = []
    for item in _as_list(block.get("items")):
        attrs: dict[str, Any] = {}
        if checklist:
            attrs["checked"] = _as_checked(item.get("checked") if isinstance(item, dict) else None)
        items.append(Node(
            type=NodeType.LIST_ITEM,
            attrs=attrs,
            content=[_inline_paragraph(_item_text(item))],
        ))
    return Node(type=list_type, content=items)


def _lower_list(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return _list_node(NodeType.BULLET_LIST, block)


def _lower_ordered_list(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    node = _list_node(NodeType.ORDERED_LIST, block)
    start = block.get("start")
    if isinstance(start, int) and not isinstance(start, bool) and start != 1:
        node.attrs["start"] = start
    return node


def _lower_checklist(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return _list_node(NodeType.BULLET_LIST, block, checklist=True)


def _lower_quote(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return Node(type=NodeType.BLOCKQUOTE, content=[_inline_paragraph(block.get("text"))])


def _lower_code(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    # Code is raw: no inline Markdown parsing
    code = text_of(block.get("text"))
    language = text_of(block.get("language")).strip() or settings.default_code_language
    return Node(
        type=NodeType.CODE_BLOCK,
        attrs={"language": language},
        content=[Node.text_node(code)] if code else None,
    )


def _lower_divider(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return Node(type=NodeType.HORIZONTAL_RULE)


def _lower_image(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return Node(
        type=NodeType.IMAGE,
        attrs={
            "src": text_of(block.get("url") or block.get("src") or block.get("text")),
            "alt": text_of(block.get("alt")),
            "alignment": IMAGE_ALIGNMENT,
        },
    )


# ── table ─────────────────────────────────────────────────────────────────


def _table_cell(cell_type: NodeType, value: Any) -> Node:
    return Node(
        type=cell_type,
        attrs={"colspan": 1, "rowspan": 1},
        content=[_inline_paragraph(value)],
    )


def _lower_table(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    """Lower a table block.

    The header row defines the column count; data rows are padded with
    empty cells or truncated to that width.  Without headers the widest
    row defines the width and no header row is emitted.
    """
    headers = _as_list(block.get("headers"))
    rows = [_as_list(row) for row in _as_list(block.get("rows"))]
    width = len(headers) if headers else max((len(row) for row in rows), default=0)

    table_rows: list[Node] = []
    if headers:
        table_rows.append(Node(
            type=NodeType.TABLE_ROW,
            content=[_table_cell(NodeType.TABLE_HEADER, h) for h in headers],
        ))

    for index, row in enumerate(rows):
        if len(row) != width:
            logger.debug(
                "Table row %d has %d cells, fitting to %d columns",
                index, len(row), width,
            )
        cells = (row + [""] * width)[:width]
        table_rows.append(Node(
            type=NodeType.TABLE_ROW,
            content=[_table_cell(NodeType.TABLE_CELL, c) for c in cells],
        ))

    return Node(type=NodeType.TABLE, content=table_rows)


# ══════════════════════════════════════════════════════════════════════════
# Composite blocks (accordions, columns)
# ══════════════════════════════════════════════════════════════════════════


def _composite_content(value: Any, settings: NormalizerSettings) -> list[Node]:
    """Lower the body of an accordion item or a column.

    A string becomes one inline-parsed paragraph, a list is lowered as a
    nested block document, a single mapping as one block.  The result is
    never empty (an empty paragraph stands in).
    """
    if isinstance(value, list):
        nodes = lower_blocks(value, settings)
    elif isinstance(value, dict):
        nodes = lower_block(value, settings)
    elif value is None or (isinstance(value, str) and not value.strip()):
        nodes = []
    else:
        nodes = [_inline_paragraph(value)]
    return nodes or [Node.paragraph()]


def build_accordion_item(
    item: Any,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
) -> Node:
    """Build one ``accordionItem`` node from a simplified definition.

    ``{"title": ..., "content": ..., "icon"?, "iconColor"?, "titleColor"?}``

    The title is stored verbatim in ``attrs.title`` (titles carry no
    styling).  Optional fields are copied only when present so that the
    renderer can apply its own defaults.  Used directly by accordion-editing
    handlers; ids are assigned later by the caller's normalization pass.
    """
    if not isinstance(item, dict):
        item = {"content": item}

    attrs: dict[str, Any] = {"title": text_of(item.get("title"))}
    for key in ACCORDION_OPTIONAL_ATTRS:
        if item.get(key) is not None:
            attrs[key] = item[key]

    return Node(
        type=NodeType.ACCORDION_ITEM,
        attrs=attrs,
        content=_composite_content(item.get("content"), settings),
    )


def build_columns(
    columns: Any,
    settings: NormalizerSettings = DEFAULT_SETTINGS,
) -> Node:
    """Build a ``columns`` node with exactly one ``column`` per entry."""
    return Node(
        type=NodeType.COLUMNS,
        content=[
            Node(type=NodeType.COLUMN, content=_composite_content(col, settings))
            for col in _as_list(columns)
        ],
    )


def _lower_accordion(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    # At least one item, as the group is meaningless without one
    items = _as_list(block.get("items")) or [{}]
    return Node(
        type=NodeType.ACCORDION_GROUP,
        content=[build_accordion_item(item, settings) for item in items],
    )


def _lower_columns(block: dict[str, Any], settings: NormalizerSettings) -> Node:
    return build_columns(block.get("columns"), settings)


# ══════════════════════════════════════════════════════════════════════════
# Dispatch
# ══════════════════════════════════════════════════════════════════════════

_LOWERERS: dict[str, Callable[[dict[str, Any], NormalizerSettings], Node]] = {
    BlockType.HEADING.value: _lower_heading,
    BlockType.PARAGRAPH.value: _lower_paragraph,
    BlockType.LIST.value: _lower_list,
    BlockType.ORDERED_LIST.value: _lower_ordered_list,
    BlockType.CHECKLIST.value: _lower_checklist,
    BlockType.QUOTE.value: _lower_quote,
    BlockType.CODE.value: _lower_code,
    BlockType.DIVIDER.value: _lower_divider,
    BlockType.TABLE.value: _lower_table,
    BlockType.IMAGE.value: _lower_image,
    BlockType.ACCORDION.value: _lower_accordion,
    BlockType.COLUMNS.value: _lower_columns,
}


def lower_block(block: Any, settings: NormalizerSettings = DEFAULT_SETTINGS) -> list[Node]:
    """Lower one input block to editor nodes (never an empty list).

    Editor-shaped nodes found among blocks are validated and passed through.
    Anything unrecognised degrades to a paragraph with its text/JSON form.
    """
    if isinstance(block, str):
        return [_inline_paragraph(block)]

    if not isinstance(block, dict):
        logger.warning("Non-object block %r rendered as text", block)
        return [literal_paragraph(text_of(block))]

    block_type = block.get("type")
    if looks_like_tree_node(block):
        return [validate_block(block)]

    handler = _LOWERERS.get(block_type) if isinstance(block_type, str) else None
    if handler is None:
        logger.warning("Unknown block type %r rendered as text", block_type)
        return [literal_paragraph(json_text(block))]

    return [handler(block, settings)]


def lower_blocks(blocks: Any, settings: NormalizerSettings = DEFAULT_SETTINGS) -> list[Node]:
    """Lower a sequence of input blocks, concatenating the results in order."""
    nodes: list[Node] = []
    for block in _as_list(blocks):
        if block is None:
            continue
        nodes.extend(lower_block(block, settings))
    return nodes


# ══════════════════════════════════════════════════════════════════════════
# BlockParser
# ══════════════════════════════════════════════════════════════════════════


class BlockParser(BaseParser):
    """Parse block JSON (a list of blocks or a single block) into a ``doc``."""

    def build_document(self, content: Any) -> Node:
        return Node(type=NodeType.DOC, content=lower_blocks(content, self.settings))
