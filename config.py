"""
Configuration for the block-JSON content normalizer.

Contains the NodeType / MarkType / BlockType enums, the node-type sets used
for format detection and block-id assignment, default values, and the
immutable ``NormalizerSettings`` shared by every normalization call.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum


class NodeType(str, Enum):
    """Node types of the editor document tree.

    Values are the editor's own JSON type names so that the output can be
    loaded without any further mapping.
    """

    # --- Root ---
    DOC = "doc"

    # --- Text blocks ---
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"
    HORIZONTAL_RULE = "horizontalRule"

    # --- Lists ---
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TASK_LIST = "taskList"
    TASK_ITEM = "taskItem"

    # --- Tables ---
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"

    # --- Media / layout ---
    IMAGE = "image"
    COLUMNS = "columns"
    COLUMN = "column"
    ACCORDION_GROUP = "accordionGroup"
    ACCORDION_ITEM = "accordionItem"
    ACCORDION_TITLE = "accordionTitle"
    ACCORDION_CONTENT = "accordionContent"

    # --- Embedded (atomic) blocks, only ever passed through ---
    DATABASE_TABLE = "databaseTable"
    SPREADSHEET = "spreadsheet"
    MINDMAP = "mindmap"
    TASK_MENTION = "taskMention"
    TASK_SECTION = "taskSection"

    # --- Inline ---
    TEXT = "text"
    HARD_BREAK = "hardBreak"


class MarkType(str, Enum):
    """Inline style markers applied to text nodes."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKE = "strike"
    CODE = "code"
    LINK = "link"


class BlockType(str, Enum):
    """Block types of the simplified "block JSON" input format."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    CHECKLIST = "checklist"
    ORDERED_LIST = "ordered_list"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    TABLE = "table"
    IMAGE = "image"
    ACCORDION = "accordion"
    COLUMNS = "columns"


class ContentFormat(str, Enum):
    """Result of classifying an untyped content value."""

    EMPTY = "empty"
    BLOCKS = "blocks"
    TREE = "tree"
    TREE_NODES = "tree_nodes"
    TREE_NODE = "tree_node"
    BLOCK = "block"
    JSON_STRING = "json_string"
    MARKDOWN = "markdown"
    PLAIN_TEXT = "plain_text"


# ---------------------------------------------------------------------------
# Type sets used for format detection and block-id assignment
# ---------------------------------------------------------------------------

BLOCK_TYPES: frozenset[str] = frozenset(t.value for t in BlockType)

# Every node type accepted on the pass-through path
TREE_NODE_TYPES: frozenset[str] = frozenset(
    t.value for t in NodeType if t not in (NodeType.DOC, NodeType.TEXT)
)

# Node types that only exist in the editor vocabulary (never input blocks)
TREE_ONLY_TYPES: frozenset[str] = TREE_NODE_TYPES - BLOCK_TYPES

# Keys that only appear on editor nodes, never on input blocks
TREE_NODE_KEYS: frozenset[str] = frozenset({"content", "attrs", "marks"})

# Node types that receive an ``attrs.blockId``
BLOCK_ID_ELIGIBLE_TYPES: frozenset[str] = frozenset(t.value for t in (
    NodeType.PARAGRAPH,
    NodeType.HEADING,
    NodeType.BLOCKQUOTE,
    NodeType.CODE_BLOCK,
    NodeType.BULLET_LIST,
    NodeType.ORDERED_LIST,
    NodeType.TASK_LIST,
    NodeType.LIST_ITEM,
    NodeType.TASK_ITEM,
    NodeType.TABLE,
    NodeType.TABLE_ROW,
    NodeType.TABLE_CELL,
    NodeType.TABLE_HEADER,
    NodeType.HORIZONTAL_RULE,
    NodeType.IMAGE,
    NodeType.COLUMNS,
    NodeType.COLUMN,
    NodeType.DATABASE_TABLE,
    NodeType.TASK_SECTION,
    NodeType.ACCORDION_GROUP,
    NodeType.ACCORDION_ITEM,
    NodeType.ACCORDION_TITLE,
    NodeType.ACCORDION_CONTENT,
    NodeType.SPREADSHEET,
    NodeType.MINDMAP,
    NodeType.TASK_MENTION,
))

# Optional accordion item fields copied to ``attrs`` only when present
ACCORDION_OPTIONAL_ATTRS: tuple[str, ...] = ("icon", "iconColor", "titleColor")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CODE_LANGUAGE = "plain"
BLOCK_ID_PREFIX = "block-"
MAX_JSON_UNWRAP_DEPTH = 1
MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6
LINK_TARGET = "_blank"
IMAGE_ALIGNMENT = "center"

# A string is routed to the Markdown converter when it spans several lines
# or contains one of these constructs; otherwise it is a plain paragraph.
RE_MARKDOWN_SENTINEL = re.compile(
    r"[#*`_~>|]"               # heading, emphasis, code, quote, table marks
    r"|(?:^|\s)-"              # list bullet / rule / dash
    r"|\[[^\]]*\]\([^)]*\)"    # [label](url)
    r"|^\s*\d+\.\s",           # ordered list item
)


@dataclass(frozen=True)
class NormalizerSettings:
    """Process-wide normalizer configuration (immutable after creation)."""

    default_code_language: str = DEFAULT_CODE_LANGUAGE
    max_json_unwrap_depth: int = MAX_JSON_UNWRAP_DEPTH
    block_id_prefix: str = BLOCK_ID_PREFIX


DEFAULT_SETTINGS = NormalizerSettings()


def clamp_heading_level(value: object) -> int:
    """Coerce *value* to a heading level in ``[1, 6]``.

    Non-numeric values fall back to level 1.

    >>> clamp_heading_level(9)
    6
    >>> clamp_heading_level("2")
    2
    >>> clamp_heading_level(None)
    1
    """
    if isinstance(value, bool):
        return MIN_HEADING_LEVEL
    try:
        level = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return MIN_HEADING_LEVEL
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, level))


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def json_text(value: object) -> str:
    """Return the JSON text of *value* (non-serialisable parts via ``str``)."""
    return json.dumps(value, ensure_ascii=False, default=str)


def text_of(value: object) -> str:
    """Coerce a loosely typed text field to a string.

    >>> text_of(None)
    ''
    >>> text_of(True)
    'true'
    >>> text_of(42)
    '42'
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json_text(value)


# ---------------------------------------------------------------------------
# Document structure summaries
# ---------------------------------------------------------------------------

# Editor type names shown under their block-JSON name in structure summaries
READABLE_BLOCK_TYPES: dict[str, str] = {
    NodeType.BULLET_LIST.value: BlockType.LIST.value,
    NodeType.ORDERED_LIST.value: BlockType.ORDERED_LIST.value,
    NodeType.TASK_LIST.value: BlockType.CHECKLIST.value,
    NodeType.CODE_BLOCK.value: BlockType.CODE.value,
    NodeType.BLOCKQUOTE.value: BlockType.QUOTE.value,
    NodeType.HORIZONTAL_RULE.value: BlockType.DIVIDER.value,
    NodeType.DATABASE_TABLE.value: "database_table",
    NodeType.ACCORDION_GROUP.value: BlockType.ACCORDION.value,
}

PREVIEW_LENGTH = 120

# Attributes repeated in a structure summary entry when present
SUMMARY_ATTRS: tuple[str, ...] = ("level", "databaseId")
