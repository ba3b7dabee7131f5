"""Configuration loading for tailharvest (.tailharvest.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".tailharvest.yml"

DEFAULT_EXTENSIONS = (".razor", ".cshtml")
DEFAULT_RENDER_TIMEOUT = 15.0
DEFAULT_CLI_TIMEOUT = 180.0
DEFAULT_TAILWIND_OUTPUT = "../wwwroot/css/tailharvest-tailwind.css"


class ConfigurationError(RuntimeError):
    """Raised for missing arguments, missing paths or an unparsable config file."""


@dataclass
class ScanConfig:
    """Markup discovery settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class RenderConfig:
    """Headless rendering settings."""

    timeout: float = DEFAULT_RENDER_TIMEOUT


@dataclass
class SymbolConfig:
    """Extra module namespaces searched when resolving style expressions."""

    namespaces: List[str] = field(default_factory=list)


@dataclass
class FallbackConfig:
    """Full-sweep fallback toggle."""

    enabled: bool = True


@dataclass
class TailwindConfig:
    """Settings for the downstream Tailwind toolchain."""

    output: Optional[str] = None
    scaffold: bool = True
    run_cli: bool = True
    cli_timeout: float = DEFAULT_CLI_TIMEOUT


@dataclass
class HarvestConfig:
    """Represents the settings defined in .tailharvest.yml."""

    root: Path
    scan: ScanConfig = field(default_factory=ScanConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    symbols: SymbolConfig = field(default_factory=SymbolConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    tailwind: TailwindConfig = field(default_factory=TailwindConfig)


def load_config(config_path: Path) -> HarvestConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return HarvestConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        extensions = [_normalise_extension(ext) for ext in _as_str_list(scan_data.get("extensions"))]
        if extensions:
            scan.extensions = extensions
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))

    render = RenderConfig()
    render_data = _as_dict(data.get("render"))
    timeout = _as_float(render_data.get("timeout")) if render_data else None
    if timeout is not None:
        if timeout <= 0:
            raise ConfigurationError("render.timeout must be a positive number of seconds")
        render.timeout = timeout

    symbols = SymbolConfig()
    symbol_data = _as_dict(data.get("symbols"))
    if symbol_data:
        symbols.namespaces = _as_str_list(symbol_data.get("namespaces"))

    fallback = FallbackConfig()
    fallback_data = _as_dict(data.get("fallback"))
    if fallback_data:
        enabled = _as_bool(fallback_data.get("enabled"))
        if enabled is not None:
            fallback.enabled = enabled

    tailwind = TailwindConfig()
    tailwind_data = _as_dict(data.get("tailwind"))
    if tailwind_data:
        tailwind.output = _as_str(tailwind_data.get("output"))
        scaffold = _as_bool(tailwind_data.get("scaffold"))
        if scaffold is not None:
            tailwind.scaffold = scaffold
        run_cli = _as_bool(tailwind_data.get("run_cli"))
        if run_cli is not None:
            tailwind.run_cli = run_cli
        cli_timeout = _as_float(tailwind_data.get("cli_timeout"))
        if cli_timeout is not None:
            tailwind.cli_timeout = cli_timeout

    return HarvestConfig(
        root=root,
        scan=scan,
        render=render,
        symbols=symbols,
        fallback=fallback,
        tailwind=tailwind,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigurationError",
    "FallbackConfig",
    "HarvestConfig",
    "RenderConfig",
    "ScanConfig",
    "SymbolConfig",
    "TailwindConfig",
    "load_config",
]
