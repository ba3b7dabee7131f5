"""Extraction of tag and utility-class signatures from rendered HTML."""

from __future__ import annotations

import re
from typing import List

_ELEMENT_WITH_CLASS = re.compile(
    r"""<(\w+)[^>]*\bclass\s*=\s*["']([^"']*)["'][^>]*>""",
)


def normalize_classes(value: str) -> str:
    """Collapse a class attribute into sorted, de-duplicated, single-spaced tokens."""
    tokens = {token for token in value.split() if token}
    return " ".join(sorted(tokens))


def format_signature(tag: str, classes: str) -> str:
    return f'<{tag} class="{classes}"></{tag}>'


def extract_signatures(html: str) -> List[str]:
    """Return the unique element signatures found in ``html`` in first-seen order."""
    signatures: List[str] = []
    if not html:
        return signatures
    seen = set()
    for match in _ELEMENT_WITH_CLASS.finditer(html):
        classes = normalize_classes(match.group(2))
        if not classes:
            continue
        signature = format_signature(match.group(1), classes)
        if signature not in seen:
            seen.add(signature)
            signatures.append(signature)
    return signatures


__all__ = ["extract_signatures", "format_signature", "normalize_classes"]
