"""
Markdown → document tree converter.

The Markdown text is rendered to HTML with ``markdown-it-py`` (CommonMark
plus GFM tables and strikethrough, raw HTML disabled) and the HTML is then
walked with BeautifulSoup to build editor nodes.

Handles: headings, paragraphs, bold, italic, strike, code, links, hard
breaks, images, bullet/ordered/task lists (nested), fenced and indented
code blocks, blockquotes, horizontal rules and tables.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag
from markdown_it import MarkdownIt

from base_parser import BaseParser
from config import (
    DEFAULT_SETTINGS,
    IMAGE_ALIGNMENT,
    LINK_TARGET,
    MarkType,
    NodeType,
    NormalizerSettings,
    text_of,
)
from models import Mark, Node
from parser_inline import append_inline

logger = logging.getLogger(__name__)


# ── Tag tables ────────────────────────────────────────────────────────────

RE_HEADING_TAG = re.compile(r"^h([1-6])$")

# Task list marker at the start of a list item: "[ ] " / "[x] "
RE_TASK_MARKER = re.compile(r"^\[([ xX])\]\s+")

INLINE_MARK_TAGS: dict[str, MarkType] = {
    "strong": MarkType.BOLD,
    "b": MarkType.BOLD,
    "em": MarkType.ITALIC,
    "i": MarkType.ITALIC,
    "s": MarkType.STRIKE,
    "del": MarkType.STRIKE,
    "strike": MarkType.STRIKE,
}

INLINE_TAGS: frozenset[str] = frozenset({
    *INLINE_MARK_TAGS, "a", "code", "br", "img", "span",
})


# ── helpers ───────────────────────────────────────────────────────────────


def _with_mark(marks: list[Mark], mark: Mark) -> list[Mark]:
    if any(m.type == mark.type for m in marks):
        return list(marks)
    return [*marks, mark]


def _trim_inline(nodes: list[Node]) -> list[Node]:
    """Strip outer whitespace of an inline run, dropping emptied nodes."""
    while nodes and nodes[0].type == NodeType.TEXT.value:
        nodes[0].text = (nodes[0].text or "").lstrip()
        if nodes[0].text:
            break
        nodes.pop(0)
    while nodes and nodes[-1].type == NodeType.TEXT.value:
        nodes[-1].text = (nodes[-1].text or "").rstrip()
        if nodes[-1].text:
            break
        nodes.pop()
    # A trailing hard break carries no meaning
    while nodes and nodes[-1].type == NodeType.HARD_BREAK.value:
        nodes.pop()
    return nodes


def _is_inline(el: Any) -> bool:
    return isinstance(el, NavigableString) or (isinstance(el, Tag) and el.name in INLINE_TAGS)


def _clean_text(text: str) -> str:
    """Replace lone surrogates, which the lxml tree builder cannot encode."""
    return text.encode("utf-8", "surrogatepass").decode("utf-8", "replace")


def _code_language(code: Tag) -> str | None:
    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for cls in classes:
        if cls.startswith("language-") and len(cls) > len("language-"):
            return cls[len("language-"):]
    return None


# ══════════════════════════════════════════════════════════════════════════
# MarkdownParser
# ══════════════════════════════════════════════════════════════════════════


class MarkdownParser(BaseParser):
    """Parse a Markdown string into a ``doc`` node."""

    def __init__(self, settings: NormalizerSettings = DEFAULT_SETTINGS) -> None:
        super().__init__(settings)
        self._md = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])

    # ── BaseParser interface ──────────────────────────────────────────────

    def build_document(self, content: Any) -> Node:
        html = self._md.render(_clean_text(text_of(content)))
        soup = BeautifulSoup(html, "lxml")
        body = soup.body
        nodes = self._convert_children(body) if body is not None else []
        logger.debug("Markdown converted to %d top-level nodes", len(nodes))
        return Node(type=NodeType.DOC, content=nodes)

    # ── block level ───────────────────────────────────────────────────────

    def _convert_children(self, parent: Tag) -> list[Node]:
        """Convert the children of a block container.

        Runs of inline content (tight list items put text directly in
        ``<li>``) become paragraphs.
        """
        nodes: list[Node] = []
        run: list[Any] = []
        for child in parent.children:
            if _is_inline(child):
                run.append(child)
                continue
            nodes.extend(self._convert_inline_run(run))
            run = []
            if isinstance(child, Tag):
                nodes.extend(self._convert_block(child))
        nodes.extend(self._convert_inline_run(run))
        return nodes

    def _convert_block(self, tag: Tag) -> list[Node]:
        name = tag.name

        m = RE_HEADING_TAG.match(name)
        if m:
            return [Node(
                type=NodeType.HEADING,
                attrs={"level": int(m.group(1))},
                content=_trim_inline(self._inline_nodes(tag.children, [])) or None,
            )]

        if name == "p":
            return self._convert_inline_run(list(tag.children)) or [Node.paragraph()]

        if name in ("ul", "ol"):
            return [self._convert_list(tag)]

        if name == "li":
            return [self._convert_list_item(tag)]

        if name == "blockquote":
            return [Node(
                type=NodeType.BLOCKQUOTE,
                content=self._convert_children(tag) or [Node.paragraph()],
            )]

        if name == "pre":
            return [self._convert_code(tag)]

        if name == "hr":
            return [Node(type=NodeType.HORIZONTAL_RULE)]

        if name == "table":
            return [self._convert_table(tag)]

        # Containers (thead, div, …): descend
        return self._convert_children(tag)

    def _convert_inline_run(self, run: list[Any]) -> list[Node]:
        """Turn a run of inline elements into paragraphs and images.

        Images are block nodes in the editor, so they split the run.
        """
        nodes: list[Node] = []
        segment: list[Any] = []

        def flush() -> None:
            inline = _trim_inline(self._inline_nodes(segment, []))
            if inline:
                nodes.append(Node.paragraph(inline))
            segment.clear()

        for el in run:
            if isinstance(el, Tag) and el.name == "img":
                flush()
                nodes.append(self._convert_image(el))
            else:
                segment.append(el)
        flush()
        return nodes

    def _convert_list(self, tag: Tag) -> Node:
        list_type = NodeType.ORDERED_LIST if tag.name == "ol" else NodeType.BULLET_LIST
        node = Node(
            type=list_type,
            content=[self._convert_list_item(li) for li in tag.find_all("li", recursive=False)],
        )
        start = tag.get("start")
        if list_type == NodeType.ORDERED_LIST and isinstance(start, str) and start.isdigit():
            if int(start) != 1:
                node.attrs["start"] = int(start)
        return node

    def _convert_list_item(self, li: Tag) -> Node:
        content = self._convert_children(li) or [Node.paragraph()]
        item = Node(type=NodeType.LIST_ITEM, content=content)

        # "- [x] done" → checked list item
        first = content[0]
        if first.type == NodeType.PARAGRAPH.value and first.content:
            lead = first.content[0]
            if lead.type == NodeType.TEXT.value and not lead.marks:
                m = RE_TASK_MARKER.match(lead.text or "")
                if m:
                    item.attrs["checked"] = m.group(1).lower() == "x"
                    lead.text = (lead.text or "")[m.end():]
                    if not lead.text:
                        first.content.pop(0)
                    if not first.content:
                        first.content = None
        return item

    def _convert_code(self, pre: Tag) -> Node:
        code = pre.find("code")
        source = code if isinstance(code, Tag) else pre
        language = _code_language(code) if isinstance(code, Tag) else None
        text = source.get_text()
        if text.endswith("\n"):
            text = text[:-1]
        return Node(
            type=NodeType.CODE_BLOCK,
            attrs={"language": language or self.settings.default_code_language},
            content=[Node.text_node(text)] if text else None,
        )

    def _convert_table(self, table: Tag) -> Node:
        rows: list[Node] = []
        for tr in table.find_all("tr"):
            cells: list[Node] = []
            for cell in tr.find_all(["th", "td"], recursive=False):
                cell_type = NodeType.TABLE_HEADER if cell.name == "th" else NodeType.TABLE_CELL
                inline = _trim_inline(self._inline_nodes(cell.children, []))
                cells.append(Node(
                    type=cell_type,
                    attrs={"colspan": 1, "rowspan": 1},
                    content=[Node.paragraph(inline)],
                ))
            rows.append(Node(type=NodeType.TABLE_ROW, content=cells))
        return Node(type=NodeType.TABLE, content=rows)

    @staticmethod
    def _convert_image(img: Tag) -> Node:
        return Node(
            type=NodeType.IMAGE,
            attrs={
                "src": img.get("src") or "",
                "alt": img.get("alt") or "",
                "alignment": IMAGE_ALIGNMENT,
            },
        )

    # ── inline level ──────────────────────────────────────────────────────

    def _inline_nodes(self, elements: Any, marks: list[Mark]) -> list[Node]:
        nodes: list[Node] = []
        for el in elements:
            if isinstance(el, NavigableString):
                # Soft line breaks read as spaces
                append_inline(nodes, Node.text_node(str(el).replace("\n", " "), marks))
                continue
            if not isinstance(el, Tag):
                continue

            name = el.name
            if name == "br":
                nodes.append(Node(type=NodeType.HARD_BREAK))
            elif name == "code":
                code_mark = Mark(type=MarkType.CODE)
                append_inline(nodes, Node.text_node(el.get_text(), _with_mark(marks, code_mark)))
            elif name == "a":
                link = Mark(
                    type=MarkType.LINK,
                    attrs={"href": el.get("href") or "", "target": LINK_TARGET},
                )
                for child in self._inline_nodes(el.children, _with_mark(marks, link)):
                    append_inline(nodes, child)
            elif name == "img":
                # Images inside links/emphasis keep their alt text
                append_inline(nodes, Node.text_node(el.get("alt") or "", marks))
            else:
                mark_type = INLINE_MARK_TAGS.get(name)
                inner = _with_mark(marks, Mark(type=mark_type)) if mark_type else marks
                for child in self._inline_nodes(el.children, inner):
                    append_inline(nodes, child)
        return nodes
