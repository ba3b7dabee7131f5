"""Tests for tailharvest.rendering.environment."""

from __future__ import annotations

import types

import pytest

from tailharvest.components import build_time_services
from tailharvest.rendering.environment import (
    MissingServiceError,
    RenderEnvironmentBuilder,
    ServiceSet,
    class_names,
    find_build_time_hooks,
)


def _hook_module(name: str, **hooks: object) -> types.ModuleType:
    module = types.ModuleType(name)
    for attr, hook in hooks.items():
        hook.__module__ = name  # type: ignore[attr-defined]
        setattr(module, attr, hook)
    return module


def test_service_set_require_raises_for_missing_service() -> None:
    services = ServiceSet()
    services.register("navigation", object())

    assert "navigation" in services
    assert services.get("missing") is None
    with pytest.raises(MissingServiceError):
        services.require("missing")


def test_minimal_environment_has_only_navigation_and_interop_services() -> None:
    environment = RenderEnvironmentBuilder().minimal()

    assert environment.mode == "minimal"
    assert environment.services.names() == [
        "logger",
        "navigation",
        "navigation_interception",
        "script_runtime",
        "scroll_to_location_hash",
    ]


def test_full_environment_adds_loader_options_and_hook_services() -> None:
    @build_time_services
    def register_theme(services: ServiceSet) -> None:
        services.register("theme", "dark")

    module = _hook_module("env_hooks_ok", register_theme=register_theme)

    environment = RenderEnvironmentBuilder().full([module])

    assert environment.mode == "full"
    assert environment.services.require("theme") == "dark"
    assert "resource_loader" in environment.services
    assert environment.services.require("options").build_time is True


def test_full_environment_survives_failing_hook(caplog: pytest.LogCaptureFixture) -> None:
    @build_time_services
    def broken(services: ServiceSet) -> None:
        raise RuntimeError("needs a database")

    module = _hook_module("env_hooks_broken", broken=broken)

    with caplog.at_level("WARNING", logger="tailharvest"):
        environment = RenderEnvironmentBuilder().full([module])

    assert "resource_loader" in environment.services
    assert any("needs a database" in record.getMessage() for record in caplog.records)


def test_find_build_time_hooks_ignores_unmarked_and_imported_functions() -> None:
    @build_time_services
    def marked(services: ServiceSet) -> None:
        return None

    def unmarked(services: ServiceSet) -> None:
        return None

    module = _hook_module("env_hooks_scan", marked=marked, unmarked=unmarked)
    other = types.ModuleType("env_hooks_other")
    other.marked = marked

    assert list(find_build_time_hooks([module, other])) == [marked]


def test_environment_compiles_templates_with_class_names_and_closes() -> None:
    with RenderEnvironmentBuilder().minimal() as environment:
        html = environment.compile('<p class="{{ class_names("a", none, "", "b") }}"></p>').render(none=None)
        assert html == '<p class="a b"></p>'
    assert environment.closed is True
    assert len(environment.services) == 0


def test_class_names_skips_empty_values() -> None:
    assert class_names("col", None, False, "  ", "md:col-span-6") == "col md:col-span-6"


def test_navigation_manager_builds_absolute_uris() -> None:
    navigation = RenderEnvironmentBuilder().minimal().services.require("navigation")

    assert navigation.to_absolute_uri("/counter") == "https://localhost/counter"
