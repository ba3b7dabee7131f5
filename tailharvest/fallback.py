"""Full-sweep fallback: render every local component with no parameters."""

from __future__ import annotations

import threading
from typing import Callable, Iterable, Optional, Set

from .catalog import describe_component
from .harvester import extract_signatures
from .logging import get_logger
from .models import check_cancelled
from .rendering.environment import RenderEnvironment, RenderEnvironmentBuilder
from .rendering.renderer import HeadlessRenderer, RenderFailure

logger = get_logger("fallback")


class FullSweep:
    """Lower-bound class discovery used when no usage produced a signature.

    Each component is rendered through the shared full renderer. When that
    raises, the component gets one more attempt inside a freshly built
    minimal environment, which is closed again straight after. Timeouts are
    not retried.
    """

    def __init__(
        self,
        renderer: HeadlessRenderer,
        minimal_factory: Callable[[], RenderEnvironment] | None = None,
    ) -> None:
        self.renderer = renderer
        self._minimal_factory = minimal_factory or RenderEnvironmentBuilder().minimal

    def collect(self, components: Iterable[type], cancel: threading.Event | None = None) -> Set[str]:
        signatures: Set[str] = set()
        for component_type in components:
            check_cancelled(cancel, "full sweep")
            html = self.render_component(component_type)
            if html:
                signatures.update(extract_signatures(html))
        logger.info("Full sweep harvested %d element signature(s)", len(signatures))
        return signatures

    def render_component(self, component_type: type) -> Optional[str]:
        descriptor = describe_component(component_type)
        label = descriptor.qualified_name
        try:
            return self.renderer.render(descriptor, label=label)
        except RenderFailure as first:
            logger.debug("Retrying %s with the minimal environment: %s", label, first.error)
            try:
                with self._minimal_factory() as environment:
                    minimal = HeadlessRenderer(environment, self.renderer.timeout)
                    return minimal.render(descriptor, label=label)
            except RenderFailure:
                logger.warning("Skipped %s: %s", label, first.error)
                return None


__all__ = ["FullSweep"]
