"""Content manifest writing and Tailwind config reference patching."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger

logger = get_logger("manifest")

MANIFEST_FILENAME = "TailwindElements.txt"
MANIFEST_HEADER = "/* Generated by tailharvest - do not edit */"
CONTENT_MARKER = "content:"


class ManifestWriter:
    """Writes the sorted element signatures that Tailwind scans as content."""

    def __init__(self, file_name: str = MANIFEST_FILENAME, header: str = MANIFEST_HEADER) -> None:
        self.file_name = file_name
        self.header = header

    def render(self, signatures: Iterable[str]) -> str:
        lines: List[str] = [self.header]
        lines.extend(sorted(set(signatures)))
        return os.linesep.join(lines)

    def write(self, tailwind_dir: Path, signatures: Iterable[str]) -> Path:
        """Write the manifest even when ``signatures`` is empty."""
        tailwind_dir.mkdir(parents=True, exist_ok=True)
        path = tailwind_dir / self.file_name
        content = self.render(signatures)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        logger.info("Wrote %s", path)
        return path

    def ensure_config_reference(self, config_path: Path) -> bool:
        """Insert the manifest into the config's content list; return True when patched."""
        if not config_path.exists():
            return False
        try:
            text = config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s; leaving it unpatched: %s", config_path, exc)
            return False
        patched = insert_content_reference(text, self.file_name)
        if patched == text:
            return False
        try:
            with config_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(patched)
        except OSError as exc:
            logger.warning("Could not update %s: %s", config_path, exc)
            return False
        logger.info("Added ./%s to %s", self.file_name, config_path.name)
        return True


def insert_content_reference(text: str, file_name: str) -> str:
    """Return ``text`` with ``"./<file_name>"`` prepended to its ``content: [...]`` list."""
    if file_name in text:
        return text
    marker = text.lower().find(CONTENT_MARKER)
    if marker < 0:
        return text
    bracket = text.find("[", marker + len(CONTENT_MARKER))
    if bracket < 0:
        return text
    insert_at = bracket + 1
    entry = f'"./{file_name}"'
    if text[insert_at:].lstrip().startswith("]"):
        addition = entry
    else:
        addition = f"{entry}, "
    return text[:insert_at] + addition + text[insert_at:]


__all__ = [
    "MANIFEST_FILENAME",
    "MANIFEST_HEADER",
    "ManifestWriter",
    "insert_content_reference",
]
