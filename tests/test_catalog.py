"""Tests for tailharvest.catalog."""

from __future__ import annotations

import gc
import types
import weakref
from typing import ClassVar, Generic, Optional, TypeVar

from tailharvest.catalog import (
    build_catalog,
    component_parameters,
    describe_component,
    discover_local_components,
    is_component_type,
)
from tailharvest.components import Component, CssValue, TemplateComponent
from tests._fixtures.project_builder import ProjectBuilder

T = TypeVar("T")


class _Builder:
    pass


class Panel(TemplateComponent):
    shade: Optional[CssValue[_Builder]] = None
    title: str = ""
    count: ClassVar[int] = 0
    _private: int = 0
    template = '<div class="panel"></div>'


class _AbstractPanel(Component):
    pass


class _GenericPanel(TemplateComponent, Generic[T]):
    pass


def test_is_component_type_filters_framework_abstract_and_generic_types() -> None:
    assert is_component_type(Panel) is True
    assert is_component_type(TemplateComponent) is False
    assert is_component_type(_AbstractPanel) is False
    assert is_component_type(_GenericPanel) is False
    assert is_component_type(_Builder) is False
    assert is_component_type(Panel()) is False


def test_component_parameters_skip_classvars_and_private_names() -> None:
    params = component_parameters(Panel)

    assert sorted(spec.name for spec in params.values()) == ["shade", "title"]
    shade = params["shade"]
    assert shade.wrapper is CssValue
    assert shade.builder_type is _Builder
    assert params["title"].value_type is str
    assert params["title"].wrapper is None


def test_component_parameters_do_not_keep_discarded_classes_alive() -> None:
    class Banner(TemplateComponent):
        title: str = ""
        template = '<div class="banner"></div>'

    assert component_parameters(Banner) is component_parameters(Banner)
    assert describe_component(Banner).parameter("Title").name == "title"
    ref = weakref.ref(Banner)

    del Banner
    gc.collect()

    assert ref() is None


def test_descriptor_matches_parameters_ignoring_case_and_underscores() -> None:
    class ColumnHolder(TemplateComponent):
        column_size: Optional[str] = None

    descriptor = describe_component(ColumnHolder)

    assert descriptor.tag == "ColumnHolder"
    assert descriptor.parameter("ColumnSize") is descriptor.parameter("column_size")
    instance = descriptor.instantiate({"COLUMNSIZE": "md", "Unknown": 1})
    assert instance.column_size == "md"
    assert not hasattr(instance, "Unknown")


def test_build_catalog_keeps_first_type_for_duplicate_tags() -> None:
    first = types.ModuleType("catalog_first")
    second = types.ModuleType("catalog_second")
    first.Panel = Panel
    duplicate = type("Panel", (TemplateComponent,), {"__module__": "catalog_second"})
    second.Panel = duplicate

    catalog = build_catalog([first, second])

    assert catalog.tags == ["Panel"]
    assert catalog["Panel"].component_type is Panel


def test_build_catalog_honours_module_all() -> None:
    module = types.ModuleType("catalog_exports")
    module.Panel = Panel
    module.Hidden = type("Hidden", (TemplateComponent,), {"__module__": "catalog_exports"})
    module.__all__ = ["Panel"]

    catalog = build_catalog([module])

    assert list(catalog) == ["Panel"]


def test_discover_local_components_excludes_imported_types(project_builder: ProjectBuilder) -> None:
    loaded = project_builder.load(project_builder.write_package())

    local = discover_local_components(loaded.modules)
    catalog = build_catalog(loaded.modules)

    assert sorted(component.__name__ for component in local) == ["Box", "Column"]
    assert sorted(catalog) == ["Box", "Column"]
    assert discover_local_components([types.ModuleType("elsewhere")]) == []
