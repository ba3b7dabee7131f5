"""Tests for tailharvest.symbols and tailharvest.resolver."""

from __future__ import annotations

import sys
import types

from tailharvest.catalog import build_catalog
from tailharvest.components import CssValue
from tailharvest.loader import load_target, locate_target, target_import_path
from tailharvest.models import Usage
from tailharvest.resolver import ExpressionResolver
from tailharvest.symbols import ModuleSymbolRegistry, candidate_modules
from tests._fixtures.project_builder import (
    COMPONENTS_MODULE,
    LAYOUT_MODULE,
    STYLES_MODULE,
    ProjectBuilder,
)


class _Builder:
    @property
    def Bold(self) -> "_Builder":
        return self

    def method(self) -> None:
        return None


def _registry(**values: object) -> ModuleSymbolRegistry:
    module = types.ModuleType("resolver_symbols")
    for name, value in values.items():
        setattr(module, name, value)
    return ModuleSymbolRegistry([module])


def test_resolve_requires_at_least_two_segments() -> None:
    resolver = ExpressionResolver(_registry(Margin=types.SimpleNamespace(Is3="m-3")))

    assert resolver.resolve("Margin") is None
    assert resolver.resolve("") is None
    assert resolver.resolve("Margin.Is3") == "m-3"


def test_resolve_fails_on_missing_or_none_members() -> None:
    styles = types.SimpleNamespace(Is3=None, Is4=types.SimpleNamespace())
    resolver = ExpressionResolver(_registry(Margin=styles))

    assert resolver.resolve("Unknown.Is3") is None
    assert resolver.resolve("Margin.Is3") is None
    assert resolver.resolve("Margin.Is4.FromEnd") is None


def test_registry_rejects_methods_and_private_names() -> None:
    registry = _registry(Text=_Builder())
    builder = registry.lookup("Text")

    assert registry.get_member(builder, "Bold") is builder
    assert registry.get_member(builder, "method") is None
    assert registry.get_member(_Builder, "Bold") is None
    assert registry.get_member(builder, "__class__") is None
    assert registry.lookup("_hidden") is None


def test_registry_searches_modules_in_order_and_honours_all() -> None:
    first = types.ModuleType("resolver_first")
    first.Margin = "first"
    first.Padding = "hidden"
    first.__all__ = ["Margin"]
    second = types.ModuleType("resolver_second")
    second.Margin = "second"
    second.Padding = "second"

    registry = ModuleSymbolRegistry([first, second])

    assert registry.lookup("Margin") == "first"
    assert registry.lookup("Padding") == "second"


def test_candidate_modules_adds_referenced_modules_in_namespace(monkeypatch) -> None:
    shared = types.ModuleType("acme_styles.spacing")
    unrelated = types.ModuleType("unrelated_lib")
    own = types.ModuleType("acme_app")
    own.spacing = shared
    own.other = unrelated
    monkeypatch.setitem(sys.modules, "acme_styles.spacing", shared)
    monkeypatch.setitem(sys.modules, "unrelated_lib", unrelated)

    assert candidate_modules([own]) == [own]
    assert candidate_modules([own], ["ACME_STYLES"]) == [own, shared]


def test_resolve_parameters_drops_unresolved_and_wraps_builders(project_builder: ProjectBuilder) -> None:
    loaded = project_builder.load(project_builder.write_package())
    catalog = build_catalog(loaded.modules)
    resolver = ExpressionResolver(ModuleSymbolRegistry(loaded.modules))
    usage = Usage.create(
        "Column",
        {"ColumnSize": "ColumnSize.Is10.OnMd", "Gutter": "Gutter.Is2", "Offset": "ColumnSize.Missing"},
    )

    params = resolver.resolve_parameters(usage, catalog["Column"])

    assert list(params) == ["ColumnSize"]
    value = params["columnsize"]
    assert isinstance(value, CssValue)
    assert str(value) == "md:col-span-10"


def test_resolve_parameters_passes_raw_builder_when_no_wrapper(project_builder: ProjectBuilder) -> None:
    loaded = project_builder.load(project_builder.write_package())
    catalog = build_catalog(loaded.modules)
    resolver = ExpressionResolver(ModuleSymbolRegistry(loaded.modules))

    params = resolver.resolve_parameters(Usage.create("Box", {"Margin": "Margin.Is3.FromEnd"}), catalog["Box"])

    assert type(params["Margin"]).__name__ == "MarginBuilder"
    assert str(params["Margin"]) == "me-3"


def test_candidate_modules_walks_library_packages(project_builder: ProjectBuilder) -> None:
    library = project_builder.write_library(
        {"styles": STYLES_MODULE, "components": COMPONENTS_MODULE, "layout": LAYOUT_MODULE}
    )
    target = project_builder.write_module(f"from {library}.components import Column\n")
    location = locate_target(target)
    with target_import_path(location):
        loaded = load_target(location)
        referenced = candidate_modules(loaded.modules)
        configured = candidate_modules([types.ModuleType("bare_app")], [library])

    names = [module.__name__ for module in referenced]
    assert names[0] == loaded.name
    assert {f"{library}.styles", f"{library}.layout"} <= set(names)
    registry = ModuleSymbolRegistry(referenced)
    assert str(registry.lookup("Gap").Is2) == "gap-2"
    assert "Row" in build_catalog(referenced).tags
    assert f"{library}.layout" in [module.__name__ for module in configured]
