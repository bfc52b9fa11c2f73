"""
Content normalizer: any value → editor document tree.

Detects which representation a content value uses and routes it to the
matching parser.  Classification order (first match wins):

1. ``None`` / empty string / empty list → empty ``doc``
2. list containing block-JSON blocks → ``BlockParser``
3. list of editor nodes → ``TreeParser``
4. ``{"type": "doc", ...}`` or a single editor node → ``TreeParser``
5. a single block-JSON block → ``BlockParser``
6. string holding JSON (``{…}``, ``[…]``, ``"…"``) → parsed, then classified
   again (one level only by default; a string that parses to another string
   is plain text)
7. string with Markdown constructs or several lines → ``MarkdownParser``
8. anything else → one plain-text paragraph (numbers and booleans via their
   JSON spelling, unknown objects via their JSON text)

Every pipeline ends with the block-id assignment pass, and nothing here
raises for malformed content.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from base_parser import BaseParser
from config import (
    BLOCK_TYPES,
    DEFAULT_SETTINGS,
    RE_MARKDOWN_SENTINEL,
    ContentFormat,
    NodeType,
    NormalizerSettings,
    json_text,
    text_of,
)
from models import Node
from parser_blocks import BlockParser
from parser_markdown import MarkdownParser
from parser_tree import TreeParser, is_tree_document, literal_paragraph, looks_like_tree_node

logger = logging.getLogger(__name__)

# First characters of a string that may hold a JSON document
_JSON_OPENERS = ("{", "[", '"')


class TextParser(BaseParser):
    """Wrap a plain string in a single paragraph (no Markdown parsing)."""

    def build_document(self, content: Any) -> Node:
        text = text_of(content)
        if not text.strip():
            return Node.empty_doc()
        return Node(type=NodeType.DOC, content=[literal_paragraph(text)])


def _is_block(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and value.get("type") in BLOCK_TYPES
        and not looks_like_tree_node(value)
    )


def _parse_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except ValueError:
        return False, None


class ContentNormalizer:
    """Classify content and dispatch it to the matching parser.

    Stateless apart from its immutable settings, so one instance can serve
    any number of concurrent calls.
    """

    def __init__(self, settings: NormalizerSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings
        block_parser = BlockParser(settings)
        tree_parser = TreeParser(settings)
        self._parsers: dict[ContentFormat, BaseParser] = {
            ContentFormat.BLOCKS: block_parser,
            ContentFormat.BLOCK: block_parser,
            ContentFormat.TREE: tree_parser,
            ContentFormat.TREE_NODES: tree_parser,
            ContentFormat.TREE_NODE: tree_parser,
            ContentFormat.MARKDOWN: MarkdownParser(settings),
            ContentFormat.PLAIN_TEXT: TextParser(settings),
        }

    @property
    def settings(self) -> NormalizerSettings:
        return self._settings

    # ── public API ──

    def classify(self, content: Any) -> ContentFormat:
        """Return the format *content* is recognised as (without unwrapping)."""
        return self._classify(content, self._settings.max_json_unwrap_depth)[0]

    def normalize(self, content: Any) -> Node:
        """Normalize *content* into a ``doc`` node with block ids assigned."""
        depth = self._settings.max_json_unwrap_depth
        fmt, value = self._classify(content, depth)

        while fmt == ContentFormat.JSON_STRING:
            depth -= 1
            fmt, value = self._classify(value, depth)

        if fmt == ContentFormat.EMPTY:
            return Node.empty_doc()

        logger.debug("Normalizing content as %s", fmt.value)
        return self._parsers[fmt].parse(value)

    # ── classification ──

    def _classify(self, content: Any, unwrap_depth: int) -> tuple[ContentFormat, Any]:
        """Return ``(format, payload)`` where *payload* is what the parser gets."""
        if content is None:
            return ContentFormat.EMPTY, None

        if isinstance(content, str):
            return self._classify_string(content, unwrap_depth)

        if isinstance(content, (list, tuple)):
            items = [item for item in content if item is not None]
            if not items:
                return ContentFormat.EMPTY, None
            if any(_is_block(item) for item in items):
                return ContentFormat.BLOCKS, items
            if any(looks_like_tree_node(item) for item in items):
                return ContentFormat.TREE_NODES, items
            # Unknown blocks degrade to text paragraphs inside BlockParser
            return ContentFormat.BLOCKS, items

        if isinstance(content, dict):
            if is_tree_document(content):
                return ContentFormat.TREE, content
            if looks_like_tree_node(content):
                return ContentFormat.TREE_NODE, content
            if _is_block(content):
                return ContentFormat.BLOCK, [content]
            logger.warning("Unrecognised object rendered as text")
            return ContentFormat.PLAIN_TEXT, json_text(content)

        return ContentFormat.PLAIN_TEXT, text_of(content)

    def _classify_string(self, content: str, unwrap_depth: int) -> tuple[ContentFormat, Any]:
        stripped = content.strip()
        if not stripped:
            return ContentFormat.EMPTY, None

        if unwrap_depth > 0 and stripped.startswith(_JSON_OPENERS):
            ok, parsed = _parse_json(stripped)
            if ok:
                if isinstance(parsed, str):
                    return ContentFormat.PLAIN_TEXT, parsed
                return ContentFormat.JSON_STRING, parsed
            logger.debug("String looks like JSON but does not parse; treating as text")

        if "\n" in stripped or RE_MARKDOWN_SENTINEL.search(stripped):
            return ContentFormat.MARKDOWN, stripped
        return ContentFormat.PLAIN_TEXT, stripped


# ── module-level convenience API ──────────────────────────────────────────

_DEFAULT_NORMALIZER = ContentNormalizer()


def normalize(content: Any) -> Node:
    """Normalize *content* with the default settings, returning a ``Node``."""
    return _DEFAULT_NORMALIZER.normalize(content)


def normalize_content(content: Any) -> dict[str, Any]:
    """Normalize *content* and return the editor-ready JSON dictionary."""
    return _DEFAULT_NORMALIZER.normalize(content).to_dict()


def classify(content: Any) -> ContentFormat:
    return _DEFAULT_NORMALIZER.classify(content)
