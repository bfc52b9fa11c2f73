#!/usr/bin/env python3
"""
CLI entry point for the content normalizer.

Reads a content value (block JSON, an editor document, Markdown or plain
text) and writes the normalized editor document.

Usage
-----
    # Block JSON file → editor JSON on stdout
    python convert.py --file blocks.json

    # Markdown from stdin → editor JSON file
    cat notes.md | python convert.py --output notes.json

    # Normalize, then show the result as Markdown
    python convert.py --file blocks.json --markdown

    # Summary of the top-level blocks (index, type, preview)
    python convert.py --file blocks.json --structure
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from document_operations import get_document_structure
from normalizer import ContentNormalizer
from renderer_markdown import render_markdown


def read_content(file_path: Path | None) -> Any:
    """Read the raw input and decode it as JSON when possible.

    Text that is not valid JSON is returned as-is so that the normalizer
    treats it as Markdown / plain text.
    """
    if file_path is None:
        raw = sys.stdin.read()
    else:
        raw = file_path.read_text(encoding="utf-8")

    try:
        return json.loads(raw)
    except ValueError:
        return raw


def render_output(
    content: Any,
    *,
    markdown: bool = False,
    structure: bool = False,
    indent: int | None = 2,
) -> str:
    """Normalize *content* and render it as JSON (default), Markdown or a block summary."""
    document = ContentNormalizer().normalize(content)
    if markdown:
        return render_markdown(document) + "\n"
    if structure:
        summary = get_document_structure(document).to_dict()
        return json.dumps(summary, ensure_ascii=False, indent=indent) + "\n"
    return json.dumps(document.to_dict(), ensure_ascii=False, indent=indent) + "\n"


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        description="Normalize block JSON, editor JSON, Markdown or plain text "
                    "into an editor document tree.",
    )
    ap.add_argument(
        "--file",
        type=str,
        default=None,
        help="Path to the input file. If omitted, the input is read from stdin.",
    )
    ap.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to write the result to. If omitted, the result goes to stdout.",
    )
    view = ap.add_mutually_exclusive_group()
    view.add_argument(
        "--markdown",
        action="store_true",
        help="Render the normalized document as Markdown instead of JSON.",
    )
    view.add_argument(
        "--structure",
        action="store_true",
        help="Print a summary of the top-level blocks instead of the document.",
    )
    ap.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2, use 0 for compact output).",
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Log degradations and debugging details to stderr.",
    )

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    file_path = Path(args.file) if args.file else None
    if file_path is not None and not file_path.exists():
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        sys.exit(1)

    try:
        content = read_content(file_path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: cannot read input: {exc}", file=sys.stderr)
        sys.exit(1)

    result = render_output(
        content,
        markdown=args.markdown,
        structure=args.structure,
        indent=args.indent if args.indent > 0 else None,
    )

    if args.output:
        out_path = Path(args.output)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(result, encoding="utf-8")
        except OSError as exc:
            print(f"Error: cannot write {out_path}: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"Written: {out_path}", file=sys.stderr)
    else:
        sys.stdout.write(result)


if __name__ == "__main__":
    main()
