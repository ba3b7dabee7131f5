"""Symbol registry backing style-expression resolution."""

from __future__ import annotations

import inspect
import sys
from types import ModuleType
from typing import Any, Iterable, List, Optional, Protocol, Sequence

from .catalog import exported_members, is_component_type
from .loader import import_package_tree
from .logging import get_logger

logger = get_logger("symbols")

_FRAMEWORK_ROOT = __name__.split(".", 1)[0]


class SymbolRegistry(Protocol):
    """Read-only access to named style-builder values and their members."""

    def lookup(self, name: str) -> Optional[Any]:
        """Return the value exposed under ``name`` or None when unknown."""

    def get_member(self, value: Any, name: str) -> Optional[Any]:
        """Return the public member ``name`` of ``value`` or None when absent."""


class ModuleSymbolRegistry:
    """Registry over the public attributes of an ordered list of modules."""

    def __init__(self, modules: Iterable[ModuleType]) -> None:
        self.modules: List[ModuleType] = list(modules)

    def lookup(self, name: str) -> Optional[Any]:
        if not _is_public(name):
            return None
        for module in self.modules:
            namespace = vars(module)
            if name not in namespace:
                continue
            exported = namespace.get("__all__")
            if isinstance(exported, (list, tuple)) and name not in exported:
                continue
            return namespace[name]
        return None

    def get_member(self, value: Any, name: str) -> Optional[Any]:
        if value is None or not _is_public(name):
            return None
        try:
            member = getattr(value, name)
        except Exception:
            return None
        if inspect.isroutine(member) or isinstance(member, property):
            return None
        return member


def candidate_modules(
    own_modules: Sequence[ModuleType],
    namespaces: Iterable[str] = (),
) -> List[ModuleType]:
    """Return the target's modules followed by every module of the libraries it uses.

    A referenced module is one the target imports directly, or the defining
    module of an object it imports. It qualifies when its dotted name starts
    (case-insensitively) with the target's top-level package or one of
    ``namespaces``, or when it declares component classes. The whole
    top-level package of each qualifying module is then imported and walked,
    as is every configured namespace, so markup can name styles and
    components the target's own code never imports.
    """
    configured = [prefix.strip() for prefix in namespaces if prefix and prefix.strip()]
    own_roots = {module.__name__.split(".", 1)[0] for module in own_modules}
    prefixes = {prefix.casefold() for prefix in configured}
    prefixes.update(root.casefold() for root in own_roots)

    ordered: List[ModuleType] = []
    seen: set[str] = set()

    def _add(module: ModuleType) -> None:
        if module.__name__ in seen:
            return
        seen.add(module.__name__)
        ordered.append(module)

    for module in own_modules:
        _add(module)

    library_roots: List[str] = list(configured)
    for module in own_modules:
        for name in _referenced_module_names(module):
            if name in seen:
                continue
            referenced = sys.modules.get(name)
            if referenced is None:
                continue
            if not _in_namespace(name, prefixes) and not _declares_components(referenced):
                continue
            _add(referenced)
            root = name.split(".", 1)[0]
            if root not in library_roots:
                library_roots.append(root)

    for root in library_roots:
        if root in own_roots or root.split(".", 1)[0] == _FRAMEWORK_ROOT:
            continue
        for module in import_package_tree(root):
            _add(module)

    logger.debug("Resolving symbols across %d module(s)", len(ordered))
    return ordered


def _referenced_module_names(module: ModuleType) -> List[str]:
    names: List[str] = []
    for value in list(vars(module).values()):
        if isinstance(value, ModuleType):
            name = value.__name__
        else:
            name = getattr(value, "__module__", None)
        if isinstance(name, str) and name not in names:
            names.append(name)
    return names


def _declares_components(module: ModuleType) -> bool:
    try:
        return any(is_component_type(member) for _, member in exported_members(module))
    except Exception as exc:
        logger.debug("Could not inspect %s for components: %s", module.__name__, exc)
        return False


def _in_namespace(name: str, prefixes: Iterable[str]) -> bool:
    folded = name.casefold()
    return any(folded == prefix or folded.startswith(f"{prefix}.") for prefix in prefixes)


def _is_public(name: str) -> bool:
    return bool(name) and not name.startswith("_")


__all__ = ["ModuleSymbolRegistry", "SymbolRegistry", "candidate_modules"]
