"""Tests for tailharvest.models."""

from __future__ import annotations

import threading

import pytest

from tailharvest.components import CssValue
from tailharvest.models import (
    ParameterSpec,
    ResolvedParameters,
    RunCancelled,
    Usage,
    check_cancelled,
    fold_name,
)


class _Builder:
    pass


def test_usage_key_is_independent_of_attribute_order() -> None:
    first = Usage.create("Box", {"Padding": "Padding.Is2", "Margin": "Margin.Is3"})
    second = Usage.create("Box", {"Margin": "Margin.Is3", "Padding": "Padding.Is2"})

    assert first == second
    assert first.key == "Box|Margin=Margin.Is3|Padding=Padding.Is2"
    assert Usage.create("Box", {}).key == "Box"


def test_resolved_parameters_ignore_case_and_keep_first_spelling() -> None:
    params = ResolvedParameters()
    params["ColumnSize"] = 1
    params["columnsize"] = 2

    assert params["COLUMNSIZE"] == 2
    assert list(params) == ["ColumnSize"]
    del params["columnSize"]
    assert len(params) == 0


def test_parameter_spec_converts_matching_builders_only() -> None:
    spec = ParameterSpec(name="shade", wrapper=CssValue, builder_type=_Builder)
    builder = _Builder()

    assert spec.convert(builder) == CssValue(builder)
    assert spec.convert("literal") == "literal"
    assert ParameterSpec(name="plain").convert(builder) is builder


def test_fold_name_ignores_case_and_underscores() -> None:
    assert fold_name("column_size") == fold_name("ColumnSize")


def test_check_cancelled() -> None:
    cancel = threading.Event()
    check_cancelled(cancel, "scan")
    check_cancelled(None, "scan")
    cancel.set()

    with pytest.raises(RunCancelled, match="scan"):
        check_cancelled(cancel, "scan")
