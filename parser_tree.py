"""
Pass-through parser for content that is already an editor document tree.

Accepts ``{"type": "doc", "content": [...]}`` (or a bare node / list of
nodes), checks the minimal shape rules and rebuilds it as ``Node`` objects.

Shape rules
-----------
* every node is a mapping with a non-empty string ``type``;
* only ``text`` nodes carry ``text`` (a non-empty string), and they never
  carry ``content``;
* ``content``, when present, is a list.

A node that breaks a rule is not fatal: it is replaced by a paragraph
holding its JSON text, and the rest of the document is kept.
"""

from __future__ import annotations

import logging
from typing import Any

from base_parser import BaseParser
from config import (
    TREE_NODE_KEYS,
    TREE_NODE_TYPES,
    TREE_ONLY_TYPES,
    NodeType,
    json_text,
)
from models import Mark, Node

logger = logging.getLogger(__name__)

# Keys a text node may carry and still count as empty when ``text`` is absent
_EMPTY_TEXT_KEYS = frozenset({"type", "marks", "attrs"})


# ── helpers ───────────────────────────────────────────────────────────────


def literal_paragraph(text: str) -> Node:
    """Paragraph holding *text* verbatim (no inline parsing)."""
    return Node.paragraph([Node.text_node(text)] if text else None)


def looks_like_tree_node(value: Any) -> bool:
    """Return True if *value* is shaped like an editor node.

    Types shared with the block format (``paragraph``, ``heading``,
    ``table`` …) only count as editor nodes when the mapping also carries
    an editor-only key (``content``, ``attrs`` or ``marks``).
    """
    if not isinstance(value, dict):
        return False
    node_type = value.get("type")
    if not isinstance(node_type, str):
        return False
    if node_type in TREE_ONLY_TYPES or node_type == NodeType.TEXT.value:
        return True
    return node_type in TREE_NODE_TYPES and any(k in value for k in TREE_NODE_KEYS)


def is_tree_document(value: Any) -> bool:
    return isinstance(value, dict) and value.get("type") == NodeType.DOC.value


def _degrade(value: Any, reason: str) -> Node:
    logger.warning("Malformed node (%s) rendered as text", reason)
    return literal_paragraph(json_text(value))


def _validate_marks(raw: Any) -> list[Mark]:
    """Keep the well-formed marks, silently dropping the rest."""
    if not isinstance(raw, list):
        return []
    marks: list[Mark] = []
    for mark in raw:
        if not isinstance(mark, dict) or not isinstance(mark.get("type"), str):
            continue
        attrs = mark.get("attrs")
        marks.append(Mark(type=mark["type"], attrs=dict(attrs) if isinstance(attrs, dict) else None))
    return marks


# ── validation ────────────────────────────────────────────────────────────


def validate_node(value: Any) -> Node | None:
    """Rebuild *value* as a ``Node``, coercing defects.

    Returns ``None`` only for nodes that carry nothing at all (``None`` or
    an empty text node).
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        return _degrade(value, "not an object")

    node_type = value.get("type")
    if not isinstance(node_type, str) or not node_type:
        return _degrade(value, "missing type")

    content = value.get("content")
    text = value.get("text")

    if content is not None and not isinstance(content, list):
        return _degrade(value, f"{node_type}: content is not a list")
    if text is not None and not isinstance(text, str):
        return _degrade(value, f"{node_type}: text is not a string")
    if content is not None and text is not None:
        return _degrade(value, f"{node_type}: both content and text")

    if node_type == NodeType.TEXT.value:
        if content is not None:
            return _degrade(value, "text node with content")
        if text is None and set(value) - _EMPTY_TEXT_KEYS:
            return _degrade(value, "text node without text")
        if not text:
            return None
        return Node.text_node(text, _validate_marks(value.get("marks")))

    if text is not None:
        return _degrade(value, f"{node_type}: text on a non-text node")

    attrs = value.get("attrs")
    if attrs is not None and not isinstance(attrs, dict):
        logger.debug("Dropping non-object attrs on %s node", node_type)
        attrs = None

    children: list[Node] | None = None
    if content is not None:
        children = []
        for child in content:
            node = validate_node(child)
            if node is not None:
                children.append(node)

    return Node(type=node_type, attrs=dict(attrs or {}), content=children)


def validate_block(value: Any) -> Node:
    """Validate a node sitting directly under ``doc``.

    Text nodes at block level are wrapped in a paragraph.
    """
    node = validate_node(value)
    if node is None:
        return Node.paragraph()
    if node.type == NodeType.TEXT.value:
        return Node.paragraph([node])
    return node


def validate_blocks(values: list[Any]) -> list[Node]:
    return [validate_block(v) for v in values if v is not None]


# ══════════════════════════════════════════════════════════════════════════
# TreeParser
# ══════════════════════════════════════════════════════════════════════════


class TreeParser(BaseParser):
    """Validate an editor tree (a ``doc``, a single node or a node list)."""

    def build_document(self, content: Any) -> Node:
        if isinstance(content, list):
            return Node(type=NodeType.DOC, content=validate_blocks(content))

        if not is_tree_document(content):
            return Node(type=NodeType.DOC, content=validate_blocks([content]))

        attrs = content.get("attrs")
        doc = Node(type=NodeType.DOC, attrs=dict(attrs) if isinstance(attrs, dict) else {})
        children = content.get("content")
        if children is None:
            doc.content = []
        elif isinstance(children, list):
            doc.content = validate_blocks(children)
        else:
            doc.content = [_degrade(children, "doc content is not a list")]
        return doc
