"""CLI entrypoint for tailharvest runs."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigurationError
from .loader import LoadFailure
from .logging import configure_logging
from .models import RunCancelled
from .orchestrator import Pipeline


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailharvest",
        description="Discover the Tailwind classes a component library renders and write a content manifest.",
    )
    parser.add_argument(
        "--targetPath",
        dest="target_path",
        help="Path to the Python module file or package that declares the components.",
    )
    parser.add_argument(
        "--projectDir",
        dest="project_dir",
        help="Project root scanned for markup files; the manifest is written under <projectDir>/tailwind.",
    )
    parser.add_argument(
        "--tailwindOutput",
        dest="tailwind_output",
        default=None,
        help="CSS output path passed to the Tailwind CLI, relative to the tailwind directory.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only report warnings such as skipped renders.",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Missing values exit 1; argparse required=True would exit 2.
    for option, value in (("--targetPath", args.target_path), ("--projectDir", args.project_dir)):
        if not value or not value.strip():
            parser.exit(1, f"tailharvest: missing required argument {option}\n")

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    pipeline = Pipeline()
    try:
        outcome = pipeline.run(args.target_path, args.project_dir, args.tailwind_output)
    except (ConfigurationError, LoadFailure, RunCancelled) as exc:
        parser.exit(1, f"tailharvest: {exc}\n")

    print(f"Wrote {len(outcome.signatures)} element signature(s) to {_relativize(outcome.manifest_path)}")
    return outcome.exit_code


def _relativize(path: Path | None) -> str:
    if path is None:
        return "(none)"
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
