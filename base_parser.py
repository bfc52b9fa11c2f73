"""
Abstract base parser for the content normalizer.

Concrete subclasses (``BlockParser``, ``MarkdownParser``, ``TreeParser``)
implement the format-specific tree building while inheriting the common
block-id assignment.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from config import DEFAULT_SETTINGS, NormalizerSettings
from models import Node, assign_block_ids


class BaseParser(ABC):
    """Base class for all content parsers."""

    def __init__(self, settings: NormalizerSettings = DEFAULT_SETTINGS) -> None:
        self._settings = settings

    @property
    def settings(self) -> NormalizerSettings:
        return self._settings

    # ── public entry point ──

    def parse(self, content: Any) -> Node:
        """Convert *content* into a ``doc`` node with block ids assigned."""
        document = self.build_document(content)
        assign_block_ids(document, self._settings.block_id_prefix)
        return document

    # ── abstract methods ── (to be implemented by subclasses)

    @abstractmethod
    def build_document(self, content: Any) -> Node:
        """Build the ``doc`` node for *content* without assigning ids."""
        ...
