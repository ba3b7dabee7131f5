"""Component capability exposed to component libraries rendered by tailharvest.

A component is any concrete subclass of :class:`Component`. Its parameters are
the public annotated class attributes, for example::

    class Column(TemplateComponent):
        column_size: Optional[CssValue[ColumnSizeBuilder]] = None
        template = '<div class="{{ class_names("col", column_size) }}"></div>'

Markup such as ``<Column ColumnSize="ColumnSize.Is10.OnMd">`` binds the resolved
builder to ``column_size`` (names match ignoring case and underscores).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, Generic, Optional, TypeVar

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rendering.environment import RenderEnvironment, ServiceSet

T = TypeVar("T")

BUILD_TIME_SERVICES_MARKER = "__tailharvest_build_time_services__"


class Component(ABC):
    """Base class for renderable components."""

    @abstractmethod
    def render(self, context: "RenderEnvironment") -> Any:
        """Return the component HTML, or an awaitable producing it."""

    def parameter_values(self) -> Dict[str, Any]:
        from .catalog import component_parameters

        return {spec.name: getattr(self, spec.name, None) for spec in component_parameters(type(self)).values()}


class TemplateComponent(Component):
    """Component rendered from a Jinja2 template string."""

    template: ClassVar[Optional[str]] = None

    def render(self, context: "RenderEnvironment") -> str:
        if self.template is None:
            return ""
        variables = self.parameter_values()
        variables["component"] = self
        variables["services"] = context.services
        return context.compile(self.template).render(variables)


class CssValue(Generic[T]):
    """Wrapper parameter type around a style-builder value."""

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    @classmethod
    def from_builder(cls, builder: T) -> "CssValue[T]":
        return cls(builder)

    def __str__(self) -> str:
        return str(self.value) if self.value is not None else ""

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CssValue):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"CssValue({self.value!r})"


def build_time_services(func: Callable[["ServiceSet"], Any]) -> Callable[["ServiceSet"], Any]:
    """Mark a function that registers app services for build-time rendering."""
    setattr(func, BUILD_TIME_SERVICES_MARKER, True)
    return func


__all__ = [
    "BUILD_TIME_SERVICES_MARKER",
    "Component",
    "CssValue",
    "TemplateComponent",
    "build_time_services",
]
