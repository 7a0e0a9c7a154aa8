"""Reduce scraped Markdown to the sections that sit under real headings.

Scraped pages carry cookie banners, menus and footers before and around the
article body. Anything under an ATX heading (``#`` to ``###``) or a Setext
heading (text underlined with ``===`` or ``---``) is kept; everything before
the first heading is dropped. Pages without any heading fall back to their
first ``FALLBACK_CHARS`` characters so the document is never lost entirely.
"""
from __future__ import annotations

import re

FALLBACK_CHARS = 2000

_ATX_HEADING = re.compile(r"^#{1,3}\s+\S")
_SETEXT_UNDERLINE = re.compile(r"^(?:=+|-+)$")


def _is_setext_heading(lines: list[str], index: int) -> bool:
    if index + 1 >= len(lines) or not lines[index].strip():
        return False
    return bool(_SETEXT_UNDERLINE.match(lines[index + 1].strip()))


def clean_markdown(raw_markdown: object) -> str:
    if not isinstance(raw_markdown, str) or not raw_markdown:
        return ""

    lines = raw_markdown.split("\n")
    blocks: list[str] = []
    current: list[str] | None = None

    i = 0
    while i < len(lines):
        line = lines[i]
        atx = bool(_ATX_HEADING.match(line.strip()))
        setext = not atx and _is_setext_heading(lines, i)

        if atx or setext:
            if current:
                blocks.append("\n".join(current).strip())
            current = [line]
            if setext:
                current.append(lines[i + 1])
                i += 1
        elif current is not None:
            current.append(line)
        i += 1

    if current:
        blocks.append("\n".join(current).strip())

    result = "\n\n".join(blocks).strip()
    if not result:
        return raw_markdown[:FALLBACK_CHARS].strip()
    return result
