"""
Inline Markdown parser.

Turns a leaf text run such as ``"Text with **bold** and [a link](https://x)"``
into a list of text nodes carrying marks.  Recognised spans:

* ``**bold**``
* ``*italic*`` / ``_italic_``
* ``~~strike~~``
* ```code``` (content is never parsed further)
* ``[label](url)`` (the label may itself carry the other spans)

A backslash before one of these metacharacters makes it literal text.

Anything that does not form a valid span is kept verbatim, so joining the
text of the returned nodes gives back the input minus the delimiters of the
spans that were recognised (and of the escaping backslashes).
"""

from __future__ import annotations

import re

from config import LINK_TARGET, MarkType
from models import Mark, Node


# ── Regex patterns / delimiter table ──────────────────────────────────────

# [label](url): label without brackets, url without spaces or parentheses
RE_LINK = re.compile(r"\[([^\[\]]+)\]\(([^()\s]+)\)")

# Longest delimiters first so that "**" wins over "*"
_DELIMITERS: dict[str, MarkType] = {
    "**": MarkType.BOLD,
    "~~": MarkType.STRIKE,
    "*": MarkType.ITALIC,
    "_": MarkType.ITALIC,
}

# Characters a backslash turns into literal text
_ESCAPABLE = frozenset("\\`*_~[]()")


# ── delimiter helpers ─────────────────────────────────────────────────────


def _delimiter_at(text: str, i: int) -> str | None:
    """Return the emphasis delimiter that can open a span at *i*, if any."""
    for delim in _DELIMITERS:
        if not text.startswith(delim, i):
            continue
        after = i + len(delim)
        # An opener must be followed by a non-space character
        if after >= len(text) or text[after].isspace():
            return None
        # "_" never opens inside a word (snake_case_names stay intact)
        if delim == "_" and i > 0 and text[i - 1].isalnum():
            return None
        return delim
    return None


def _find_closing(text: str, delim: str, start: int) -> int:
    """Return the index of the delimiter closing a span opened before *start*.

    Returns ``-1`` when the span is never closed.  Code spans are skipped,
    and a single ``*`` does not close on half of a ``**`` pair.
    """
    n = len(text)
    j = start
    while j < n:
        if text[j] == "\\" and j + 1 < n and text[j + 1] in _ESCAPABLE:
            j += 2
            continue
        if text[j] == "`":
            end = text.find("`", j + 1)
            if end != -1:
                j = end + 1
                continue
        if len(delim) == 1 and text.startswith(delim * 2, j):
            j += 2
            continue
        if text.startswith(delim, j) and j > start and not text[j - 1].isspace():
            after = j + len(delim)
            if delim == "_" and after < n and text[after].isalnum():
                j += 1
                continue
            return j
        j += 1
    return -1


def _with_mark(marks: list[Mark], mark: Mark) -> list[Mark]:
    """Return *marks* plus *mark* unless a mark of that type is already set."""
    if any(m.type == mark.type for m in marks):
        return list(marks)
    return [*marks, mark]


def append_inline(nodes: list[Node], node: Node) -> None:
    """Append *node*, merging it into the previous text node when marks match."""
    if node.text == "":
        return
    if nodes and nodes[-1].type == node.type == "text" and nodes[-1].marks == node.marks:
        nodes[-1].text = (nodes[-1].text or "") + (node.text or "")
        return
    nodes.append(node)


# ── public API ────────────────────────────────────────────────────────────


def parse_inline(text: str, marks: list[Mark] | None = None) -> list[Node]:
    """Parse inline Markdown in *text* into text nodes.

    *marks* are applied to every produced node (used when recursing into
    the inside of a span).  Never raises and never returns empty text nodes;
    an empty *text* gives an empty list.
    """
    if not text:
        return []

    base = list(marks or [])
    nodes: list[Node] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            append_inline(nodes, Node.text_node("".join(literal), base))
            literal.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]

        # Escaped metacharacter: \* → *
        if ch == "\\" and i + 1 < n and text[i + 1] in _ESCAPABLE:
            literal.append(text[i + 1])
            i += 2
            continue

        # Inline code: `code`
        if ch == "`":
            end = text.find("`", i + 1)
            if end > i + 1:
                flush()
                code_mark = Mark(type=MarkType.CODE)
                append_inline(nodes, Node.text_node(text[i + 1:end], _with_mark(base, code_mark)))
                i = end + 1
                continue

        # Link: [label](url)
        elif ch == "[":
            m = RE_LINK.match(text, i)
            if m:
                flush()
                link = Mark(
                    type=MarkType.LINK,
                    attrs={"href": m.group(2), "target": LINK_TARGET},
                )
                for child in parse_inline(m.group(1), _with_mark(base, link)):
                    append_inline(nodes, child)
                i = m.end()
                continue

        # Emphasis: **bold**, *italic*, _italic_, ~~strike~~
        else:
            delim = _delimiter_at(text, i)
            if delim is not None:
                start = i + len(delim)
                end = _find_closing(text, delim, start)
                if end != -1:
                    flush()
                    mark = Mark(type=_DELIMITERS[delim])
                    for child in parse_inline(text[start:end], _with_mark(base, mark)):
                        append_inline(nodes, child)
                    i = end + len(delim)
                    continue

        literal.append(ch)
        i += 1

    flush()
    return nodes
