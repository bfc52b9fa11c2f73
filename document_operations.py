"""
Top-level block operations on a normalized document.

A structure summary lists the blocks directly under ``doc`` with their
index, a readable type name and a short text preview.  The splice helpers
insert, replace or remove blocks by index so that callers can edit a stored
document block by block without handling the editor JSON themselves.

Ranges are half-open ``[start, end)`` and clamped to the document, so
out-of-range indices never fail.  The input document is never mutated; the
returned ``doc`` shares the untouched block nodes with it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from config import (
    PREVIEW_LENGTH,
    READABLE_BLOCK_TYPES,
    SUMMARY_ATTRS,
    NodeType,
)
from models import Node, TreeContractError
from parser_tree import TreeParser, is_tree_document

logger = logging.getLogger(__name__)


# ── structure summary ─────────────────────────────────────────────────────


@dataclass
class BlockInfo:
    """Summary of one top-level block."""

    index: int
    type: str
    preview: str
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"index": self.index, "type": self.type, "preview": self.preview}
        if self.attrs:
            d["attrs"] = dict(self.attrs)
        return d


@dataclass
class DocumentStructure:
    blocks: list[BlockInfo] = field(default_factory=list)

    @property
    def total_blocks(self) -> int:
        return len(self.blocks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_blocks": self.total_blocks,
            "blocks": [b.to_dict() for b in self.blocks],
        }


def readable_type(node_type: str) -> str:
    """Return the block-JSON name of an editor type (``bulletList`` → ``list``)."""
    return READABLE_BLOCK_TYPES.get(node_type, node_type)


def _placeholder(node: Node) -> str:
    count = len(node.content or [])
    t = node.type
    if t == NodeType.COLUMNS.value:
        return f"[{count} columns]"
    if t == NodeType.ACCORDION_GROUP.value:
        return f"[accordion: {count} items]"
    if t == NodeType.TABLE.value:
        return f"[table: {count} rows]"
    if t == NodeType.TASK_LIST.value:
        return f"[checklist: {count} items]"
    if t == NodeType.DATABASE_TABLE.value:
        return "[database table]"
    if t == NodeType.HORIZONTAL_RULE.value:
        return "---"
    return f"[{t}]"


def block_preview(node: Node) -> str:
    """First characters of the block's text, or a placeholder for textless blocks."""
    text = node.plain_text().strip()[:PREVIEW_LENGTH]
    return text or _placeholder(node)


def _as_document(content: Any) -> Node | None:
    if isinstance(content, Node):
        return content if content.type == NodeType.DOC.value else None
    if is_tree_document(content) and isinstance(content.get("content"), list):
        return TreeParser().build_document(content)
    return None


def get_document_structure(content: Any) -> DocumentStructure:
    """Summarize the top-level blocks of *content*.

    *content* may be a ``Node`` or its dictionary form.  Anything that is
    not a ``doc`` with a content list gives an empty summary.
    """
    doc = _as_document(content)
    if doc is None:
        return DocumentStructure()

    blocks: list[BlockInfo] = []
    for index, node in enumerate(doc.content or []):
        attrs = {key: node.attrs[key] for key in SUMMARY_ATTRS if node.attrs.get(key) is not None}
        blocks.append(BlockInfo(
            index=index,
            type=readable_type(node.type),
            preview=block_preview(node),
            attrs=attrs,
        ))
    return DocumentStructure(blocks=blocks)


# ── block splicing ────────────────────────────────────────────────────────


def _require_doc(doc: Any) -> Node:
    if not isinstance(doc, Node) or doc.type != NodeType.DOC.value:
        raise TreeContractError(
            f"block operations expect a doc Node, got {type(doc).__name__}"
        )
    return doc


def _block_list(blocks: Node | Iterable[Node]) -> list[Node]:
    """Accept a normalized ``doc`` (its children are used) or a sequence of nodes."""
    if isinstance(blocks, Node):
        if blocks.type == NodeType.DOC.value:
            return list(blocks.content or [])
        return [blocks]
    nodes = list(blocks)
    for node in nodes:
        if not isinstance(node, Node):
            raise TreeContractError(
                f"block operations expect Node blocks, got {type(node).__name__}"
            )
    return nodes


def _clamp_range(length: int, start: int, end: int) -> tuple[int, int]:
    safe_start = max(0, min(start, length))
    safe_end = max(safe_start, min(end, length))
    return safe_start, safe_end


def _with_content(doc: Node, content: list[Node]) -> Node:
    return Node(type=doc.type, attrs=dict(doc.attrs), content=content)


def insert_blocks_at(doc: Node, position: int, blocks: Node | Iterable[Node]) -> Node:
    """Insert *blocks* so that the first one ends up at index *position*.

    Position ``0`` inserts at the beginning, ``len(doc.content)`` (or any
    larger value) appends.
    """
    content = list(_require_doc(doc).content or [])
    new_blocks = _block_list(blocks)
    pos = max(0, min(position, len(content)))
    content[pos:pos] = new_blocks
    logger.debug("Inserted %d blocks at %d", len(new_blocks), pos)
    return _with_content(doc, content)


def replace_blocks_range(
    doc: Node,
    start: int,
    end: int,
    blocks: Node | Iterable[Node],
) -> Node:
    """Replace the blocks in ``[start, end)`` with *blocks*."""
    content = list(_require_doc(doc).content or [])
    new_blocks = _block_list(blocks)
    lo, hi = _clamp_range(len(content), start, end)
    content[lo:hi] = new_blocks
    logger.debug("Replaced blocks [%d, %d) with %d blocks", lo, hi, len(new_blocks))
    return _with_content(doc, content)


def remove_blocks_range(doc: Node, start: int, end: int) -> Node:
    """Remove the blocks in ``[start, end)``.

    A document emptied by the removal keeps one empty paragraph so that the
    editor still has a place for the cursor.
    """
    content = list(_require_doc(doc).content or [])
    lo, hi = _clamp_range(len(content), start, end)
    del content[lo:hi]
    logger.debug("Removed blocks [%d, %d)", lo, hi)
    return _with_content(doc, content or [Node.paragraph()])
