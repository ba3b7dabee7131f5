"""Markup scanning for component usages and their attribute expressions."""

from __future__ import annotations

import os
import re
import threading
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Collection, Dict, Iterator, List, Optional, Sequence

from .config import DEFAULT_EXTENSIONS
from .logging import get_logger
from .models import Usage, check_cancelled

logger = get_logger("scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".vs",
    ".idea",
    ".venv",
    "node_modules",
    "__pycache__",
    "bin",
    "obj",
}

RESERVED_PARAMETERS = frozenset({"ChildContent", "ref", "key"})
DIRECTIVE_PREFIX = "@"


class UsageParser:
    """Stateless parser turning markup text into component usages."""

    def __init__(self) -> None:
        self._tag = re.compile(r"<([A-Z][a-zA-Z0-9]*)\s*([^>]*(?:/>|>))")
        self._attribute = re.compile(r"""(?:^|\s)([A-Za-z][A-Za-z0-9]*)\s*=\s*["']([^"']*)["']""")
        self._expression = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)+$")

    def parse(self, content: str, known_tags: Optional[Collection[str]] = None) -> Iterator[Usage]:
        """Yield every usage in ``content``; duplicates are left to the caller."""
        for match in self._tag.finditer(content):
            tag = match.group(1)
            if known_tags is not None and tag not in known_tags:
                continue
            section = match.group(2)
            if section.startswith(("/", ">")):
                continue
            yield Usage.create(tag, self.parse_attributes(section))

    def parse_attributes(self, section: str) -> Dict[str, str]:
        attributes: Dict[str, str] = {}
        for match in self._attribute.finditer(section):
            name = match.group(1)
            value = match.group(2).strip()
            if name.startswith(DIRECTIVE_PREFIX) or value.startswith(DIRECTIVE_PREFIX):
                continue
            if name in RESERVED_PARAMETERS:
                continue
            if not self.is_expression(value):
                continue
            attributes[name] = value
        return attributes

    def is_expression(self, value: str) -> bool:
        return bool(self._expression.match(value))


@dataclass
class ExcludeRule:
    """Glob rule from ``scan.exclude_paths``."""

    pattern: str
    directory_only: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.has_slash:
            return fnmatchcase(rel_path, self.pattern) or rel_path.startswith(f"{self.pattern}/")
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_rules(patterns: Sequence[str]) -> List[ExcludeRule]:
    rules: List[ExcludeRule] = []
    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue
        directory_only = pattern.endswith("/")
        pattern = pattern.strip("/")
        if not pattern:
            continue
        rules.append(ExcludeRule(pattern=pattern, directory_only=directory_only, has_slash="/" in pattern))
    return rules


class MarkupScanner:
    """Walks a project tree and collects unique component usages."""

    def __init__(
        self,
        parser: UsageParser | None = None,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.parser = parser or UsageParser()
        self.extensions = tuple(ext.lower() for ext in extensions)
        self._rules = _build_rules(exclude_paths)

    def scan(
        self,
        root: Path,
        known_tags: Optional[Collection[str]] = None,
        cancel: threading.Event | None = None,
    ) -> List[Usage]:
        """Return unique usages in order of first discovery."""
        root = Path(root)
        usages: List[Usage] = []
        if not root.is_dir():
            logger.debug("Markup root %s does not exist; nothing to scan", root)
            return usages

        seen: set[str] = set()
        for path in self.iter_markup_files(root):
            check_cancelled(cancel, "markup scan")
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipped unreadable file %s: %s", path, exc)
                continue
            for usage in self.parser.parse(content, known_tags):
                if usage.key in seen:
                    continue
                seen.add(usage.key)
                usages.append(usage)

        logger.info("Found %d unique component usage(s) under %s", len(usages), root)
        return usages

    def iter_markup_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix() if current != root else ""

            kept = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if self._excluded(rel_path, True):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in sorted(filenames):
                if not filename.lower().endswith(self.extensions):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if self._excluded(rel_path, False):
                    continue
                yield current / filename

    def _excluded(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self._rules)


__all__ = ["MarkupScanner", "UsageParser"]
