"""Usage-based collection: resolve, render and harvest each discovered usage."""

from __future__ import annotations

import threading
from typing import Iterable, Mapping, Set

from .harvester import extract_signatures
from .logging import get_logger
from .models import ComponentDescriptor, Usage, check_cancelled
from .rendering.renderer import HeadlessRenderer, RenderFailure
from .resolver import ExpressionResolver

logger = get_logger("collector")


class UsageCollector:
    """Turns scanned usages into element signatures, one usage at a time."""

    def __init__(self, resolver: ExpressionResolver, renderer: HeadlessRenderer) -> None:
        self.resolver = resolver
        self.renderer = renderer

    def collect(
        self,
        usages: Iterable[Usage],
        catalog: Mapping[str, ComponentDescriptor],
        cancel: threading.Event | None = None,
    ) -> Set[str]:
        signatures: Set[str] = set()
        rendered = 0
        for usage in usages:
            check_cancelled(cancel, "usage collection")

            descriptor = catalog.get(usage.tag)
            if descriptor is None:
                continue

            params = self.resolver.resolve_parameters(usage, descriptor)
            label = f"{usage.tag} with params"
            try:
                html = self.renderer.render(descriptor, params, label=label)
            except RenderFailure as exc:
                logger.warning("Skipped %s: %s", label, exc.error)
                continue

            rendered += 1
            if html:
                signatures.update(extract_signatures(html))

        logger.info("Rendered %d usage(s); harvested %d element signature(s)", rendered, len(signatures))
        return signatures


__all__ = ["UsageCollector"]
