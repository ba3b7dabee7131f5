"""Component discovery and the tag-name catalog used during usage resolution."""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Mapping
from types import ModuleType
from typing import Any, ClassVar, Dict, Iterable, Iterator, List, Optional, Union
from weakref import WeakKeyDictionary

from .components import Component
from .logging import get_logger
from .models import ComponentDescriptor, ParameterSpec, fold_name

logger = get_logger("catalog")

_PARAMETER_CACHE: WeakKeyDictionary[type, Dict[str, ParameterSpec]] = WeakKeyDictionary()

_FRAMEWORK_MODULE = Component.__module__


class ComponentCatalog(Mapping):
    """Read-only mapping from exact-case tag name to component descriptor."""

    def __init__(self, descriptors: Iterable[ComponentDescriptor] = ()) -> None:
        entries: Dict[str, ComponentDescriptor] = {}
        for descriptor in descriptors:
            existing = entries.get(descriptor.tag)
            if existing is not None and existing.component_type is not descriptor.component_type:
                logger.debug(
                    "Tag %s already mapped to %s; ignoring %s",
                    descriptor.tag,
                    existing.qualified_name,
                    descriptor.qualified_name,
                )
                continue
            entries[descriptor.tag] = descriptor
        self._entries = types.MappingProxyType(entries)

    def __getitem__(self, tag: str) -> ComponentDescriptor:
        return self._entries[tag]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def tags(self) -> List[str]:
        return list(self._entries)


def is_component_type(obj: Any) -> bool:
    """Return True for concrete, non-generic component classes."""
    if not isinstance(obj, type) or not issubclass(obj, Component):
        return False
    if obj.__module__ == _FRAMEWORK_MODULE:
        return False
    if inspect.isabstract(obj):
        return False
    if getattr(obj, "__parameters__", ()):
        return False
    return True


def exported_members(module: ModuleType) -> Iterator[tuple[str, Any]]:
    """Yield the public attributes of a module, honouring ``__all__`` when present."""
    namespace = vars(module)
    exported = namespace.get("__all__")
    if isinstance(exported, (list, tuple)):
        names: Iterable[str] = [name for name in exported if isinstance(name, str)]
    else:
        names = [name for name in list(namespace) if not name.startswith("_")]
    for name in names:
        if name in namespace:
            yield name, namespace[name]


def build_catalog(modules: Iterable[ModuleType]) -> ComponentCatalog:
    """Build the catalog from the component types exported by ``modules``."""
    descriptors: List[ComponentDescriptor] = []
    seen: set[type] = set()
    for module in modules:
        for _, member in exported_members(module):
            if not is_component_type(member) or member in seen:
                continue
            seen.add(member)
            descriptors.append(describe_component(member))
    catalog = ComponentCatalog(descriptors)
    logger.debug("Component catalog holds %d tag(s)", len(catalog))
    return catalog


def discover_local_components(modules: Iterable[ModuleType]) -> List[type]:
    """Return component classes declared in ``modules`` themselves, not imported ones."""
    modules = list(modules)
    owned = {module.__name__ for module in modules}
    found: List[type] = []
    for module in modules:
        for _, member in exported_members(module):
            if not is_component_type(member) or member in found:
                continue
            if member.__module__ not in owned:
                continue
            found.append(member)
    return found


def describe_component(component_type: type) -> ComponentDescriptor:
    return ComponentDescriptor(
        tag=component_type.__name__,
        component_type=component_type,
        module=component_type.__module__,
        parameters=component_parameters(component_type),
    )


def component_parameters(component_type: type) -> Dict[str, ParameterSpec]:
    """Return the declared parameters of a component keyed by folded name.

    Results are cached per class for as long as the class is alive, so a
    reloaded target does not pin the classes of earlier runs.
    """
    cached = _PARAMETER_CACHE.get(component_type)
    if cached is not None:
        return cached
    specs: Dict[str, ParameterSpec] = {}
    for name, annotation in _annotations(component_type).items():
        if name.startswith("_") or _is_classvar(annotation):
            continue
        specs[fold_name(name)] = _parameter_spec(name, annotation)
    _PARAMETER_CACHE[component_type] = specs
    return specs


def _annotations(component_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(component_type)
    except Exception as exc:
        logger.debug("Falling back to raw annotations for %s: %s", component_type.__qualname__, exc)
    merged: Dict[str, Any] = {}
    for klass in reversed(component_type.__mro__):
        merged.update(klass.__dict__.get("__annotations__", {}))
    return merged


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def _strip_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is getattr(types, "UnionType", None):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _parameter_spec(name: str, annotation: Any) -> ParameterSpec:
    target = _strip_optional(annotation)
    origin = typing.get_origin(target)
    args = typing.get_args(target)

    if isinstance(origin, type) and callable(getattr(origin, "from_builder", None)):
        builder_type: Optional[type] = args[0] if args and isinstance(args[0], type) else None
        return ParameterSpec(
            name=name,
            annotation=annotation,
            value_type=origin,
            wrapper=origin if builder_type is not None else None,
            builder_type=builder_type,
        )

    if isinstance(target, type):
        value_type: Optional[type] = target
    elif isinstance(origin, type):
        value_type = origin
    else:
        value_type = None
    return ParameterSpec(name=name, annotation=annotation, value_type=value_type)


__all__ = [
    "ComponentCatalog",
    "build_catalog",
    "component_parameters",
    "describe_component",
    "discover_local_components",
    "exported_members",
    "is_component_type",
]
