"""Service environments used for headless component rendering.

Two configurations are available from :class:`RenderEnvironmentBuilder`:

* ``full`` carries every build-time no-op service plus whatever the target
  registers through ``@build_time_services`` hooks;
* ``minimal`` carries only navigation and script-interop no-ops and is used
  as a retry for components that need app services we cannot provide.

No service here performs I/O, so a render can never block on a browser,
network or script host.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, Iterator, List

from jinja2 import Environment, Template

from ..components import BUILD_TIME_SERVICES_MARKER
from ..logging import get_logger

logger = get_logger("rendering")

DEFAULT_BASE_URI = "https://localhost/"


class MissingServiceError(LookupError):
    """Raised when a component requires a service the environment lacks."""


class ServiceSet:
    """Named services available to components during a render."""

    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}

    def register(self, name: str, service: Any) -> None:
        self._services[name] = service

    def get(self, name: str, default: Any = None) -> Any:
        return self._services.get(name, default)

    def require(self, name: str) -> Any:
        try:
            return self._services[name]
        except KeyError:
            raise MissingServiceError(f"No service registered for '{name}'") from None

    def names(self) -> List[str]:
        return sorted(self._services)

    def clear(self) -> None:
        self._services.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __len__(self) -> int:
        return len(self._services)


class StaticNavigationManager:
    """Navigation service pinned to a fixed URI."""

    def __init__(self, base_uri: str = DEFAULT_BASE_URI) -> None:
        self.base_uri = base_uri
        self.uri = base_uri

    def navigate_to(self, uri: str, force_load: bool = False) -> None:
        self.uri = uri

    def to_absolute_uri(self, relative: str) -> str:
        return self.base_uri.rstrip("/") + "/" + relative.lstrip("/")


class NoOpScriptRuntime:
    """Script interop that never reaches a browser."""

    def invoke(self, identifier: str, *args: Any) -> None:
        return None

    def invoke_void(self, identifier: str, *args: Any) -> None:
        return None


class NoOpNavigationInterception:
    def enable_navigation_interception(self) -> None:
        return None


class NoOpScrollToLocationHash:
    def refresh_scroll_position_for_hash(self, location_absolute: str) -> None:
        return None


class NoOpResourceLoader:
    """Style/script loader that completes immediately."""

    def load_style(self, url: str, **attributes: Any) -> None:
        return None

    def load_script(self, url: str, **attributes: Any) -> None:
        return None

    def load_script_and_wait_for_variable(self, url: str, variable_name: str, **attributes: Any) -> None:
        return None

    def import_module(self, url: str) -> None:
        return None

    def import_module_and_wait(self, url: str) -> None:
        return None

    def wait_for_variable(self, variable_name: str, timeout_ms: int = 5000) -> None:
        return None

    def dispose_module(self, module_id: str) -> None:
        return None


@dataclass
class RenderOptions:
    """Options shared with component libraries at build time."""

    base_uri: str = DEFAULT_BASE_URI
    build_time: bool = True


def class_names(*values: Any) -> str:
    """Join class fragments, skipping empty values."""
    parts: List[str] = []
    for value in values:
        if value is None or value is False:
            continue
        text = str(value).strip()
        if text:
            parts.append(text)
    return " ".join(parts)


class RenderEnvironment:
    """Services plus a template engine shared by the renders of a run."""

    def __init__(self, services: ServiceSet, *, mode: str) -> None:
        self.services = services
        self.mode = mode
        self.templates = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self.templates.globals["class_names"] = class_names
        self._compiled: Dict[str, Template] = {}
        self.closed = False

    def compile(self, source: str) -> Template:
        template = self._compiled.get(source)
        if template is None:
            template = self.templates.from_string(source)
            self._compiled[source] = template
        return template

    def close(self) -> None:
        self._compiled.clear()
        self.services.clear()
        self.closed = True

    def __enter__(self) -> "RenderEnvironment":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RenderEnvironment(mode={self.mode!r}, services={self.services.names()!r})"


class RenderEnvironmentBuilder:
    """Assembles full or minimal render environments."""

    def __init__(self, base_uri: str = DEFAULT_BASE_URI) -> None:
        self.base_uri = base_uri

    def minimal(self) -> RenderEnvironment:
        services = self._base_services()
        return RenderEnvironment(services, mode="minimal")

    def full(self, modules: Iterable[ModuleType] = ()) -> RenderEnvironment:
        services = self._base_services()
        services.register("resource_loader", NoOpResourceLoader())
        services.register("options", RenderOptions(base_uri=self.base_uri))
        for hook in find_build_time_hooks(modules):
            _invoke_hook(hook, services)
        return RenderEnvironment(services, mode="full")

    def _base_services(self) -> ServiceSet:
        services = ServiceSet()
        component_logger = get_logger("components")
        if not component_logger.handlers:
            component_logger.addHandler(logging.NullHandler())
        services.register("logger", component_logger)
        services.register("navigation", StaticNavigationManager(self.base_uri))
        services.register("script_runtime", NoOpScriptRuntime())
        services.register("navigation_interception", NoOpNavigationInterception())
        services.register("scroll_to_location_hash", NoOpScrollToLocationHash())
        return services


def find_build_time_hooks(modules: Iterable[ModuleType]) -> Iterator[Callable[[ServiceSet], Any]]:
    """Yield functions marked with ``@build_time_services`` declared in ``modules``."""
    seen: set[int] = set()
    for module in modules:
        for value in list(vars(module).values()):
            if not callable(value) or not getattr(value, BUILD_TIME_SERVICES_MARKER, False):
                continue
            if getattr(value, "__module__", None) != module.__name__ or id(value) in seen:
                continue
            seen.add(id(value))
            yield value


def _invoke_hook(hook: Callable[[ServiceSet], Any], services: ServiceSet) -> None:
    name = getattr(hook, "__qualname__", repr(hook))
    try:
        hook(services)
    except Exception as exc:
        logger.warning("build_time_services hook %s.%s failed: %s", hook.__module__, name, exc)
    else:
        logger.debug("Applied build_time_services hook %s.%s", hook.__module__, name)


__all__ = [
    "DEFAULT_BASE_URI",
    "MissingServiceError",
    "NoOpNavigationInterception",
    "NoOpResourceLoader",
    "NoOpScriptRuntime",
    "NoOpScrollToLocationHash",
    "RenderEnvironment",
    "RenderEnvironmentBuilder",
    "RenderOptions",
    "ServiceSet",
    "StaticNavigationManager",
    "class_names",
    "find_build_time_hooks",
]
