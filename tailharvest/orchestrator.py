"""Pipeline orchestration: scan, resolve, render, harvest, write."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional, Set, Tuple

from .catalog import build_catalog, discover_local_components
from .collector import UsageCollector
from .config import DEFAULT_TAILWIND_OUTPUT, ConfigurationError, HarvestConfig, load_config
from .fallback import FullSweep
from .loader import LoadedTarget, load_target, locate_target, target_import_path
from .logging import get_logger
from .manifest import ManifestWriter
from .markup_scanner import MarkupScanner
from .models import RunOutcome, check_cancelled
from .rendering.environment import RenderEnvironmentBuilder
from .rendering.renderer import HeadlessRenderer
from .resolver import ExpressionResolver
from .symbols import ModuleSymbolRegistry, candidate_modules
from .tailwind import CONFIG_FILE, DownstreamToolFailure, TailwindToolchain

TAILWIND_DIRNAME = "tailwind"


class Pipeline:
    """Coordinates a single class-discovery run for one project."""

    def __init__(
        self,
        scanner: MarkupScanner | None = None,
        writer: ManifestWriter | None = None,
        toolchain: TailwindToolchain | None = None,
        environment_builder: RenderEnvironmentBuilder | None = None,
    ) -> None:
        self.scanner = scanner
        self.writer = writer or ManifestWriter()
        self.toolchain = toolchain
        self.environment_builder = environment_builder or RenderEnvironmentBuilder()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        target_path: str | Path | None,
        project_dir: str | Path | None,
        tailwind_output: str | None = None,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        """Run the pipeline end to end and return its outcome."""
        target = _require_path(target_path, "--targetPath")
        project = _require_path(project_dir, "--projectDir")
        location = locate_target(target)
        project = project.expanduser().resolve()
        if not project.is_dir():
            raise ConfigurationError(f"Project directory not found: {project}")

        config = load_config(project)
        self.logger.info("Discovering Tailwind classes for %s in %s", location.module_name, project)

        with target_import_path(location):
            loaded = load_target(location)
            signatures, used_fallback = self._collect(loaded, project, config, cancel)

        check_cancelled(cancel, "manifest write")
        tailwind_dir = project / TAILWIND_DIRNAME
        toolchain = self._resolve_toolchain(config)
        output = tailwind_output or config.tailwind.output or DEFAULT_TAILWIND_OUTPUT
        if config.tailwind.scaffold:
            toolchain.scaffold(tailwind_dir, output)

        manifest_path = self.writer.write(tailwind_dir, signatures)
        self.writer.ensure_config_reference(tailwind_dir / CONFIG_FILE)

        outcome = RunOutcome(
            exit_code=0,
            manifest_path=manifest_path,
            signatures=sorted(signatures),
            used_fallback=used_fallback,
        )
        if not signatures:
            self.logger.info("No element signatures found; skipping the Tailwind CLI")
            return outcome
        if not config.tailwind.run_cli:
            self.logger.debug("Tailwind CLI disabled in configuration")
            return outcome

        try:
            outcome.tailwind_exit_code = toolchain.build(tailwind_dir, output)
        except DownstreamToolFailure as exc:
            self.logger.warning("Tailwind build failed: %s", exc)
        return outcome

    def _collect(
        self,
        loaded: LoadedTarget,
        project: Path,
        config: HarvestConfig,
        cancel: Optional[threading.Event],
    ) -> Tuple[Set[str], bool]:
        modules = candidate_modules(loaded.modules, config.symbols.namespaces)
        registry = ModuleSymbolRegistry(modules)
        catalog = build_catalog(modules)
        self.logger.info("Catalogued %d component(s)", len(catalog))

        scanner = self.scanner or MarkupScanner(
            extensions=config.scan.extensions,
            exclude_paths=config.scan.exclude_paths,
        )
        usages = scanner.scan(project, known_tags=catalog.tags, cancel=cancel)

        with self.environment_builder.full(loaded.modules) as environment:
            renderer = HeadlessRenderer(environment, config.render.timeout)
            collector = UsageCollector(ExpressionResolver(registry), renderer)
            signatures = collector.collect(usages, catalog, cancel)
            if signatures or not config.fallback.enabled:
                return signatures, False

            self.logger.info("No signatures from usages; rendering every local component")
            sweep = FullSweep(renderer, self.environment_builder.minimal)
            return sweep.collect(discover_local_components(loaded.modules), cancel), True

    def _resolve_toolchain(self, config: HarvestConfig) -> TailwindToolchain:
        if self.toolchain is not None:
            return self.toolchain
        return TailwindToolchain(timeout=config.tailwind.cli_timeout)


def _require_path(value: str | Path | None, option: str) -> Path:
    if value is None or not str(value).strip():
        raise ConfigurationError(f"Missing required argument {option}")
    return Path(value)


__all__ = ["Pipeline", "TAILWIND_DIRNAME"]
