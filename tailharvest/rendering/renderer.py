"""Headless component rendering bounded by a per-render timeout."""

from __future__ import annotations

import asyncio
import inspect
import threading
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import DEFAULT_RENDER_TIMEOUT
from ..logging import get_logger
from ..models import ComponentDescriptor
from .environment import RenderEnvironment

logger = get_logger("rendering")


class RenderFailure(RuntimeError):
    """Raised when a component raises while rendering."""

    def __init__(self, label: str, error: BaseException) -> None:
        super().__init__(f"{label}: {error}")
        self.label = label
        self.error = error


class HeadlessRenderer:
    """Renders components to HTML inside a shared environment."""

    def __init__(self, environment: RenderEnvironment, timeout: float = DEFAULT_RENDER_TIMEOUT) -> None:
        self.environment = environment
        self.timeout = timeout

    def render(
        self,
        descriptor: ComponentDescriptor,
        params: Optional[Mapping[str, Any]] = None,
        *,
        label: str | None = None,
    ) -> Optional[str]:
        """Return the component HTML, or None when the render timed out."""
        label = label or descriptor.qualified_name

        def _render() -> Optional[str]:
            instance = descriptor.instantiate(params)
            result = instance.render(self.environment)
            if inspect.isawaitable(result):
                result = asyncio.run(_await(result))
            if result is None:
                return None
            return result if isinstance(result, str) else str(result)

        return run_with_timeout(_render, self.timeout, label)


def run_with_timeout(func: Callable[[], Optional[str]], timeout: float, label: str) -> Optional[str]:
    """Race ``func`` against ``timeout``; the loser is abandoned, never awaited again."""
    outcome: Dict[str, Any] = {}
    finished = threading.Event()

    def _target() -> None:
        try:
            outcome["html"] = func()
        except Exception as exc:
            outcome["error"] = exc
        finally:
            finished.set()

    # Daemon so an abandoned render never holds up interpreter exit.
    worker = threading.Thread(target=_target, name=f"tailharvest-render-{label}", daemon=True)
    worker.start()

    if not finished.wait(timeout):
        logger.warning("Skipped %s: render timed out after %ss.", label, _format_seconds(timeout))
        return None

    error = outcome.get("error")
    if error is not None:
        raise RenderFailure(label, error) from error
    return outcome.get("html")


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _format_seconds(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


__all__ = ["HeadlessRenderer", "RenderFailure", "run_with_timeout"]
