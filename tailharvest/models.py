"""Core data models shared across tailharvest components."""

from __future__ import annotations

import threading
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


def fold_name(name: str) -> str:
    """Return the lookup key used for case-insensitive parameter matching."""
    return name.replace("_", "").casefold()


@dataclass(frozen=True)
class Usage:
    """A component tag discovered in markup with its raw attribute expressions."""

    tag: str
    attributes: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def create(cls, tag: str, attributes: Mapping[str, str]) -> "Usage":
        return cls(tag=tag, attributes=tuple(sorted(attributes.items())))

    @property
    def has_attributes(self) -> bool:
        return bool(self.attributes)

    @property
    def key(self) -> str:
        parts = [self.tag]
        parts.extend(f"{name}={expression}" for name, expression in self.attributes)
        return "|".join(parts)


@dataclass(frozen=True)
class ParameterSpec:
    """Declared component parameter and its wrapper-conversion rule."""

    name: str
    annotation: Any = None
    value_type: Optional[type] = None
    wrapper: Optional[type] = None
    builder_type: Optional[type] = None

    def convert(self, value: Any) -> Any:
        """Wrap a raw builder value when the parameter expects a wrapper around it."""
        if self.wrapper is None or self.builder_type is None:
            return value
        if not isinstance(value, self.builder_type):
            return value
        factory = getattr(self.wrapper, "from_builder", None)
        if not callable(factory):
            return value
        return factory(value)


@dataclass(frozen=True)
class ComponentDescriptor:
    """Identity and parameter schema of a renderable component type."""

    tag: str
    component_type: type
    module: str
    parameters: Mapping[str, ParameterSpec] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.component_type.__qualname__}"

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        return self.parameters.get(fold_name(name))

    def instantiate(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Create a component instance and assign every declared parameter."""
        instance = self.component_type()
        for name, value in (params or {}).items():
            spec = self.parameter(name)
            if spec is None:
                continue
            setattr(instance, spec.name, value)
        return instance


class ResolvedParameters(MutableMapping):
    """Parameter name to value mapping that ignores case on lookup."""

    def __init__(self, items: Optional[Mapping[str, Any]] = None) -> None:
        self._store: Dict[str, Tuple[str, Any]] = {}
        if items:
            self.update(items)

    def __getitem__(self, key: str) -> Any:
        return self._store[key.casefold()][1]

    def __setitem__(self, key: str, value: Any) -> None:
        folded = key.casefold()
        existing = self._store.get(folded)
        original = existing[0] if existing else key
        self._store[folded] = (original, value)

    def __delitem__(self, key: str) -> None:
        del self._store[key.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"ResolvedParameters({dict(self.items())!r})"


@dataclass
class RunOutcome:
    """Result of a pipeline run."""

    exit_code: int
    manifest_path: Optional[Path] = None
    signatures: List[str] = field(default_factory=list)
    used_fallback: bool = False
    tailwind_exit_code: Optional[int] = None


class RunCancelled(RuntimeError):
    """Raised between items when a run is asked to stop."""


def check_cancelled(cancel: Optional[threading.Event], stage: str) -> None:
    if cancel is not None and cancel.is_set():
        raise RunCancelled(f"Run cancelled during {stage}")


__all__ = [
    "ComponentDescriptor",
    "ParameterSpec",
    "ResolvedParameters",
    "RunCancelled",
    "RunOutcome",
    "Usage",
    "check_cancelled",
    "fold_name",
]
