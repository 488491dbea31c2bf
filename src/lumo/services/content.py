"""Plain-text helpers for opaque editor content.

Post content is stored exactly as the editor produced it: an HTML string, a
Tiptap JSON document (serialized or already decoded), or bare text. Every
consumer that needs words (read time, excerpts, search snippets) goes through
``extract_plain_text`` so the format sniffing lives in one place.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup

__all__ = [
    "compute_read_time",
    "count_words",
    "extract_plain_text",
    "make_excerpt",
]


def _tiptap_text(node: Mapping[str, Any]) -> str:
    if node.get("type") == "text":
        return str(node.get("text", ""))

    children = [child for child in node.get("content") or [] if isinstance(child, Mapping)]
    if not children:
        # Leaf nodes such as hardBreak or image still separate words.
        return " "

    parts = [_tiptap_text(child) for child in children]
    if all(child.get("type") == "text" for child in children):
        return "".join(parts)
    return " ".join(parts)


def _json_text(document: Any) -> str:
    if isinstance(document, list):
        return " ".join(_json_text(item) for item in document)
    if not isinstance(document, Mapping):
        return ""
    if document.get("type") == "doc" or "content" in document:
        return _tiptap_text(document)
    text = document.get("text")
    return str(text) if isinstance(text, str) else ""


def _html_text(markup: str) -> str:
    return BeautifulSoup(markup, "html.parser").get_text(separator=" ")


def extract_plain_text(content: Any) -> str:
    """Return the readable text of a post body.

    Args:
        content: HTML, a Tiptap document (as JSON text or a mapping), or plain text.

    Returns:
        Text with markup removed and whitespace collapsed. Unknown structures
        yield an empty string.
    """
    if not content:
        return ""

    if isinstance(content, Mapping | list):
        text = _json_text(content)
    elif isinstance(content, str):
        stripped = content.strip()
        if stripped.startswith(("{", "[")):
            try:
                text = _json_text(json.loads(stripped))
            except json.JSONDecodeError:
                text = _html_text(content)
        else:
            text = _html_text(content)
    else:
        return ""

    return " ".join(text.split())


def count_words(content: Any) -> int:
    """Return the number of whitespace-separated words in the content."""
    return len(extract_plain_text(content).split())


def compute_read_time(content: Any, words_per_minute: int = 200) -> int:
    """Return the estimated reading time in whole minutes, never below one."""
    words = count_words(content)
    return max(1, math.ceil(words / max(words_per_minute, 1)))


def make_excerpt(content: Any, length: int = 160) -> str:
    """Return a short plain-text preview, cut on a word boundary."""
    text = extract_plain_text(content)
    if len(text) <= length:
        return text
    cut = text[:length]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,.;:") + "..."
