"""Headless render adapter: service environments and the timed renderer."""

from .environment import (
    MissingServiceError,
    RenderEnvironment,
    RenderEnvironmentBuilder,
    ServiceSet,
)
from .renderer import HeadlessRenderer, RenderFailure, run_with_timeout

__all__ = [
    "HeadlessRenderer",
    "MissingServiceError",
    "RenderEnvironment",
    "RenderEnvironmentBuilder",
    "RenderFailure",
    "ServiceSet",
    "run_with_timeout",
]
