"""
Document tree → Markdown renderer.

The inverse view of the normalizer, used when a document has to be shown
as text (e.g. to a model reading a document back).  Lossy by nature:
attributes without a Markdown equivalent (colors, block ids, alignment)
are dropped.
"""

from __future__ import annotations

from typing import Any

from config import MarkType, NodeType, clamp_heading_level
from models import Mark, Node

# Marks applied innermost first so that links wrap the styled label
_MARK_ORDER: dict[str, int] = {
    MarkType.CODE.value: 0,
    MarkType.STRIKE.value: 1,
    MarkType.ITALIC.value: 2,
    MarkType.BOLD.value: 3,
    MarkType.LINK.value: 4,
}

_LIST_TYPES = frozenset({
    NodeType.BULLET_LIST.value,
    NodeType.ORDERED_LIST.value,
    NodeType.TASK_LIST.value,
})

# Embedded data blocks rendered as a placeholder: type → (label, id attr)
_EMBED_LABELS: dict[str, tuple[str, str]] = {
    NodeType.DATABASE_TABLE.value: ("Database", "databaseId"),
    NodeType.SPREADSHEET.value: ("Spreadsheet", "spreadsheetId"),
    NodeType.MINDMAP.value: ("Mind Map", "mindmapId"),
}


def _int_attr(value: Any, default: int) -> int:
    """Read an integer attribute that may arrive as a string or garbage."""
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _embed_placeholder(node: Node) -> str:
    label, id_attr = _EMBED_LABELS[node.type]
    config = node.attrs.get("config")
    name = config.get("name") if isinstance(config, dict) else None
    # Mind maps carry no configured name
    if name and node.type != NodeType.MINDMAP.value:
        label = f"{label}: {name}"
    return f"> **[{label}]** (ID: `{node.attrs.get(id_attr, '')}`)"


def _task_mention(node: Node) -> str:
    attrs = node.attrs
    details = ", ".join(
        str(attrs[key]) for key in ("taskStatus", "taskPriority") if attrs.get(key)
    )
    label = f"#{attrs.get('taskNumber', '')} {attrs.get('taskTitle') or ''}".rstrip()
    if details:
        label = f"{label} ({details})"
    return f"**[{label}]**"


def _apply_marks(text: str, marks: list[Mark]) -> str:
    for mark in sorted(marks, key=lambda m: _MARK_ORDER.get(m.type, 99)):
        if mark.type == MarkType.CODE.value:
            text = f"`{text}`"
        elif mark.type == MarkType.STRIKE.value:
            text = f"~~{text}~~"
        elif mark.type == MarkType.ITALIC.value:
            text = f"*{text}*"
        elif mark.type == MarkType.BOLD.value:
            text = f"**{text}**"
        elif mark.type == MarkType.LINK.value:
            href = (mark.attrs or {}).get("href", "")
            text = f"[{text}]({href})"
    return text


class MarkdownRenderer:
    """Render a ``Node`` tree as Markdown text."""

    def render(self, node: Node) -> str:
        lines: list[str] = []
        if node.type == NodeType.DOC.value:
            self._render_blocks(node.content or [], lines)
        else:
            self._render_block(node, lines)
        return "\n".join(lines).strip()

    # ── inline ──

    def _inline(self, node: Node) -> str:
        parts: list[str] = []
        for child in node.content or []:
            if child.type == NodeType.TEXT.value:
                parts.append(_apply_marks(child.text or "", child.marks))
            elif child.type == NodeType.HARD_BREAK.value:
                parts.append("  \n")
            else:
                parts.append(self._inline(child))
        return "".join(parts).strip()

    def _cell_text(self, cell: Node) -> str:
        paragraphs = [self._inline(p) for p in cell.content or []]
        text = " ".join(p for p in paragraphs if p)
        return text.replace("|", "\\|").replace("\n", " ")

    # ── blocks ──

    def _render_blocks(self, nodes: list[Node], lines: list[str]) -> None:
        for node in nodes:
            self._render_block(node, lines)

    def _render_block(self, node: Node, lines: list[str]) -> None:
        t = node.type

        if t == NodeType.PARAGRAPH.value:
            lines.extend([self._inline(node), ""])
        elif t == NodeType.HEADING.value:
            level = clamp_heading_level(node.attrs.get("level", 1))
            lines.extend([f"{'#' * level} {self._inline(node)}", ""])
        elif t == NodeType.TEXT.value:
            lines.extend([_apply_marks(node.text or "", node.marks), ""])
        elif t == NodeType.HORIZONTAL_RULE.value:
            lines.extend(["---", ""])
        elif t in _LIST_TYPES:
            self._render_list(node, lines, 0)
            lines.append("")
        elif t == NodeType.BLOCKQUOTE.value:
            inner = MarkdownRenderer().render(Node(type=NodeType.DOC, content=node.content or []))
            lines.extend(f"> {line}" if line else ">" for line in inner.split("\n"))
            lines.append("")
        elif t == NodeType.CODE_BLOCK.value:
            language = node.attrs.get("language") or ""
            lines.extend([f"```{language}", node.plain_text(), "```", ""])
        elif t == NodeType.TABLE.value:
            self._render_table(node, lines)
        elif t == NodeType.IMAGE.value:
            lines.extend([f"![{node.attrs.get('alt', '')}]({node.attrs.get('src', '')})", ""])
        elif t == NodeType.ACCORDION_ITEM.value:
            title = node.attrs.get("title")
            if title:
                lines.extend([f"**{title}**", ""])
            self._render_blocks(node.content or [], lines)
        elif t == NodeType.ACCORDION_TITLE.value:
            lines.extend([f"**{self._inline(node)}**", ""])
        elif t == NodeType.COLUMNS.value:
            for index, column in enumerate(node.content or []):
                if index > 0:
                    lines.extend(["---", ""])
                self._render_blocks(column.content or [], lines)
        elif t in _EMBED_LABELS:
            lines.extend([_embed_placeholder(node), ""])
        elif t == NodeType.TASK_MENTION.value:
            lines.extend([_task_mention(node), ""])
        elif t == NodeType.TASK_SECTION.value:
            lines.extend(["> **[Task section linked to this document]**", ""])
        elif node.content:
            # accordionGroup, accordionContent, column and unknown containers
            self._render_blocks(node.content, lines)
        else:
            lines.extend([f"[Unknown block: {t}]", ""])

    def _render_list(self, node: Node, lines: list[str], depth: int) -> None:
        ordered = node.type == NodeType.ORDERED_LIST.value
        start = _int_attr(node.attrs.get("start"), 1)
        indent = "  " * depth

        for index, item in enumerate(node.content or []):
            bullet = f"{start + index}. " if ordered else "- "
            checked = item.attrs.get("checked")
            if isinstance(checked, bool) or item.type == NodeType.TASK_ITEM.value:
                bullet += "[x] " if checked else "[ ] "

            children = item.content or []
            if not children:
                lines.append(f"{indent}{bullet}".rstrip())
                continue

            for position, child in enumerate(children):
                if child.type == NodeType.PARAGRAPH.value:
                    prefix = f"{indent}{bullet}" if position == 0 else f"{indent}  "
                    lines.append(f"{prefix}{self._inline(child)}")
                elif child.type in _LIST_TYPES:
                    self._render_list(child, lines, depth + 1)
                else:
                    nested: list[str] = []
                    self._render_block(child, nested)
                    lines.extend(f"{indent}  {line}" if line else "" for line in nested)

    def _render_table(self, node: Node, lines: list[str]) -> None:
        rows = [
            [self._cell_text(cell) for cell in row.content or []]
            for row in node.content or []
            if row.type == NodeType.TABLE_ROW.value
        ]
        if not rows:
            return

        col_count = max(len(row) for row in rows)
        if col_count == 0:
            return
        widths = [3] * col_count
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        def format_row(cells: list[str]) -> str:
            padded = [(cells[i] if i < len(cells) else "").ljust(widths[i]) for i in range(col_count)]
            return f"| {' | '.join(padded)} |"

        lines.append(format_row(rows[0]))
        lines.append(f"| {' | '.join('-' * w for w in widths)} |")
        lines.extend(format_row(row) for row in rows[1:])
        lines.append("")


def render_markdown(node: Node | dict[str, Any]) -> str:
    """Render a ``Node`` (or its dictionary form) as Markdown."""
    if isinstance(node, dict):
        node = Node.from_dict(node)
    return MarkdownRenderer().render(node)
