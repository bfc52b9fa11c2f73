"""
Data models for the editor document tree.

Contains the Mark and Node dataclasses and the block-id assignment pass.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from config import (
    BLOCK_ID_ELIGIBLE_TYPES,
    BLOCK_ID_PREFIX,
    NodeType,
)

logger = logging.getLogger(__name__)


class TreeContractError(TypeError):
    """Raised when a tree operation is called with something that is not a tree.

    This signals a programming error in the caller, never bad content.
    """


def _ensure_str_value(val: Any) -> str:
    """Return the plain string value of an enum member (or the string itself)."""
    if isinstance(val, Enum):
        return str(val.value)
    return str(val)


# ── Mark ──────────────────────────────────────────────────────────────────


@dataclass
class Mark:
    """An inline style applied to a text node (bold, link, …)."""

    type: str
    attrs: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        self.type = _ensure_str_value(self.type)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type}
        if self.attrs:
            d["attrs"] = dict(self.attrs)
        return d


# ── Node ──────────────────────────────────────────────────────────────────


@dataclass
class Node:
    """A single element in the editor document tree.

    ``content`` is ``None`` for leaf nodes (text, rules, images) and a list
    for containers.  A node never carries both ``content`` and ``text``.
    """

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)
    content: list[Node] | None = None
    text: str | None = None
    marks: list[Mark] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = _ensure_str_value(self.type)

    # ── construction helpers ──

    @classmethod
    def text_node(cls, text: str, marks: list[Mark] | None = None) -> Node:
        return cls(type=NodeType.TEXT, text=text, marks=list(marks or []))

    @classmethod
    def paragraph(cls, inline: list[Node] | None = None) -> Node:
        """Return a paragraph; an empty one has no ``content`` at all."""
        return cls(type=NodeType.PARAGRAPH, content=list(inline) if inline else None)

    @classmethod
    def empty_doc(cls) -> Node:
        return cls(type=NodeType.DOC, content=[])

    # ── queries ──

    @property
    def block_id(self) -> str | None:
        return self.attrs.get("blockId") or None

    def walk(self) -> Iterator[Node]:
        """Yield this node and all descendants in document (pre-)order."""
        yield self
        for child in self.content or []:
            yield from child.walk()

    def plain_text(self) -> str:
        """Concatenate the text of every text leaf below this node."""
        if self.text is not None:
            return self.text
        return "".join(child.plain_text() for child in self.content or [])

    # ── serialisation ──

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary in the editor's format.

        * Empty ``attrs`` and ``marks`` are omitted.
        * ``content`` is omitted for leaf nodes (``None``), kept when ``[]``.
        """
        d: dict[str, Any] = {"type": self.type}
        if self.attrs:
            d["attrs"] = dict(self.attrs)
        if self.content is not None:
            d["content"] = [c.to_dict() for c in self.content]
        if self.text is not None:
            d["text"] = self.text
        if self.marks:
            d["marks"] = [m.to_dict() for m in self.marks]
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        """Build a Node tree from an already well-formed dictionary.

        No validation happens here; untrusted input goes through
        ``parser_tree.TreeParser`` instead.
        """
        if not isinstance(data, dict):
            raise TreeContractError(
                f"Node.from_dict expects a mapping, got {type(data).__name__}"
            )
        content = data.get("content")
        return cls(
            type=data["type"],
            attrs=dict(data.get("attrs") or {}),
            content=[cls.from_dict(c) for c in content] if content is not None else None,
            text=data.get("text"),
            marks=[
                Mark(type=m["type"], attrs=dict(m["attrs"]) if m.get("attrs") else None)
                for m in data.get("marks") or []
            ],
        )


# ── Block-id helpers ──────────────────────────────────────────────────────


def generate_block_id(prefix: str = BLOCK_ID_PREFIX) -> str:
    """Return a fresh, globally unique block id (``block-<uuid4>``)."""
    return f"{prefix}{uuid.uuid4()}"


def assign_block_ids(node: Node, prefix: str = BLOCK_ID_PREFIX) -> Node:
    """Assign ``attrs.blockId`` to every eligible node **in-place**.

    Nodes are visited in document order.  A node gets an id only when
    ``blockId`` is absent or ``None``; any other value is never replaced,
    so running the pass twice leaves the tree unchanged the second time.

    Returns *node* for convenience.
    """
    if not isinstance(node, Node):
        raise TreeContractError(
            f"assign_block_ids expects a Node, got {type(node).__name__}"
        )

    assigned = 0
    for current in node.walk():
        if current.type not in BLOCK_ID_ELIGIBLE_TYPES:
            continue
        if current.attrs.get("blockId") is None:
            current.attrs["blockId"] = generate_block_id(prefix)
            assigned += 1

    logger.debug("Assigned %d block ids", assigned)
    return node
