"""Resolution of dotted style expressions into runtime parameter values."""

from __future__ import annotations

from typing import Any, Optional

from .logging import get_logger
from .models import ComponentDescriptor, ResolvedParameters, Usage
from .symbols import SymbolRegistry

logger = get_logger("resolver")


class ExpressionResolver:
    """Turns ``Margin.Is3.FromEnd`` style expressions into concrete values."""

    def __init__(self, registry: SymbolRegistry) -> None:
        self.registry = registry

    def resolve(self, expression: str) -> Optional[Any]:
        """Return the value of ``expression`` or None when it cannot be resolved."""
        if not expression or not expression.strip():
            return None
        parts = expression.strip().split(".")
        if len(parts) < 2:
            return None

        current = self.registry.lookup(parts[0])
        if current is None:
            return None
        for part in parts[1:]:
            current = self.registry.get_member(current, part)
            if current is None:
                return None
        return current

    def resolve_parameters(self, usage: Usage, descriptor: ComponentDescriptor) -> ResolvedParameters:
        """Resolve each attribute of ``usage``, dropping the ones that fail."""
        resolved = ResolvedParameters()
        for name, expression in usage.attributes:
            value = self.resolve(expression)
            if value is None:
                logger.debug("Unresolved %s=%r on <%s>; attribute dropped", name, expression, usage.tag)
                continue
            resolved[name] = wrap_for_parameter(value, descriptor, name)
        return resolved


def wrap_for_parameter(value: Any, descriptor: ComponentDescriptor, name: str) -> Any:
    """Convert a builder into the wrapper type the component parameter declares."""
    spec = descriptor.parameter(name)
    if spec is None:
        return value
    try:
        converted = spec.convert(value)
    except Exception as exc:
        logger.debug("Wrapper conversion for %s.%s failed: %s", descriptor.tag, spec.name, exc)
        return value
    return value if converted is None else converted


__all__ = ["ExpressionResolver", "wrap_for_parameter"]
