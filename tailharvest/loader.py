"""Import of the render target (a Python module file or package directory)."""

from __future__ import annotations

import importlib
import pkgutil
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Iterator, List, Set

from .config import ConfigurationError
from .logging import get_logger

logger = get_logger("loader")


class LoadFailure(RuntimeError):
    """Raised when the target module cannot be imported for introspection."""


@dataclass(frozen=True)
class TargetLocation:
    """Where a target lives and the module name it imports under."""

    path: Path
    import_root: Path
    module_name: str
    is_package: bool


@dataclass
class LoadedTarget:
    """The imported target and every module declared within it."""

    location: TargetLocation
    root: ModuleType
    modules: List[ModuleType] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.location.module_name

    @property
    def module_names(self) -> Set[str]:
        return {module.__name__ for module in self.modules}

    def owns(self, module_name: str) -> bool:
        return module_name in self.module_names


def locate_target(path: Path) -> TargetLocation:
    """Map a target path to its import root and module name."""
    path = path.expanduser().resolve()
    if not path.exists():
        raise ConfigurationError(f"Target module not found: {path}")

    if path.is_dir():
        if not (path / "__init__.py").exists():
            raise ConfigurationError(f"Target directory is not a Python package: {path}")
        return TargetLocation(path=path, import_root=path.parent, module_name=path.name, is_package=True)

    if path.suffix != ".py":
        raise ConfigurationError(f"Target must be a .py file or package directory: {path}")
    if path.stem == "__init__":
        package_dir = path.parent
        return TargetLocation(
            path=package_dir,
            import_root=package_dir.parent,
            module_name=package_dir.name,
            is_package=True,
        )
    return TargetLocation(path=path, import_root=path.parent, module_name=path.stem, is_package=False)


@contextmanager
def target_import_path(location: TargetLocation) -> Iterator[None]:
    """Expose the target's import root on ``sys.path`` for the duration of a run."""
    entry = str(location.import_root)
    added = entry not in sys.path
    if added:
        sys.path.insert(0, entry)
    try:
        yield
    finally:
        if added:
            try:
                sys.path.remove(entry)
            except ValueError:
                pass


def load_target(location: TargetLocation) -> LoadedTarget:
    """Import the target and, for packages, every submodule beneath it."""
    _forget_modules(location.module_name)
    importlib.invalidate_caches()
    try:
        root = importlib.import_module(location.module_name)
    except Exception as exc:
        raise LoadFailure(f"Failed to load target module {location.module_name}: {exc}") from exc

    modules = [root]
    if location.is_package:
        modules.extend(_import_submodules(root))
    logger.debug("Loaded %d module(s) from %s", len(modules), location.path)
    return LoadedTarget(location=location, root=root, modules=modules)


def import_package_tree(name: str) -> List[ModuleType]:
    """Import ``name`` and, when it is a package, every submodule beneath it."""
    try:
        root = importlib.import_module(name)
    except Exception as exc:
        logger.warning("Could not import library package %s: %s", name, exc)
        return []
    return [root, *_import_submodules(root)]


def _import_submodules(package: ModuleType) -> List[ModuleType]:
    imported: List[ModuleType] = []

    def _on_error(name: str) -> None:
        logger.warning("Could not import %s while walking %s", name, package.__name__)

    search_path = getattr(package, "__path__", None)
    if not search_path:
        return imported
    for info in pkgutil.walk_packages(search_path, prefix=f"{package.__name__}.", onerror=_on_error):
        try:
            imported.append(importlib.import_module(info.name))
        except Exception as exc:
            logger.warning("Could not import %s: %s", info.name, exc)
    return imported


def _forget_modules(name: str) -> None:
    stale = [key for key in sys.modules if key == name or key.startswith(f"{name}.")]
    for key in stale:
        sys.modules.pop(key, None)


__all__ = [
    "LoadFailure",
    "LoadedTarget",
    "TargetLocation",
    "import_package_tree",
    "load_target",
    "locate_target",
    "target_import_path",
]
