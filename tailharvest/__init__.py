"""Build-time discovery of the Tailwind classes a component library renders."""

from __future__ import annotations

from .components import Component, CssValue, TemplateComponent, build_time_services
from .orchestrator import Pipeline

__version__ = "0.1.0"

__all__ = [
    "Component",
    "CssValue",
    "Pipeline",
    "TemplateComponent",
    "__version__",
    "build_time_services",
]
