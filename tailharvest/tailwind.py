"""Tailwind toolchain collaborator: default files and CLI invocation."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Sequence

from .config import DEFAULT_CLI_TIMEOUT, DEFAULT_TAILWIND_OUTPUT
from .logging import get_logger
from .manifest import MANIFEST_FILENAME

logger = get_logger("tailwind")

INPUT_CSS = "input.css"
CONFIG_FILE = "tailwind.config.js"
PACKAGE_JSON = "package.json"

_UTF8_BOM = b"\xef\xbb\xbf"

_CONFIG_TEMPLATE = """export default {{
  content: [
    "./{manifest}",
    "./**/*.txt",
    "../**/*.razor",
    "../**/*.cshtml",
    "../**/*.html"
  ]
}};
"""

Runner = Callable[[Sequence[str], Path, float], int]


class DownstreamToolFailure(RuntimeError):
    """Raised when npm or the Tailwind CLI cannot start or exits non-zero."""


class TailwindToolchain:
    """Scaffolds the tailwind directory and compiles CSS through the Tailwind CLI."""

    def __init__(
        self,
        runner: Runner | None = None,
        *,
        timeout: float = DEFAULT_CLI_TIMEOUT,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._runner = runner or self._default_runner
        self.timeout = timeout
        self._which = which

    def scaffold(self, tailwind_dir: Path, output: str = DEFAULT_TAILWIND_OUTPUT) -> List[Path]:
        """Create missing default files; return the paths written."""
        tailwind_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []

        input_css = tailwind_dir / INPUT_CSS
        if not input_css.exists():
            input_css.write_text('@import "tailwindcss" source("..");\n', encoding="utf-8")
            written.append(input_css)

        config_path = tailwind_dir / CONFIG_FILE
        if not config_path.exists():
            config_path.write_text(_CONFIG_TEMPLATE.format(manifest=MANIFEST_FILENAME), encoding="utf-8")
            written.append(config_path)

        package_json = tailwind_dir / PACKAGE_JSON
        if not package_json.exists() or package_json.read_bytes().startswith(_UTF8_BOM):
            package_json.write_text(_package_json(output), encoding="utf-8")
            written.append(package_json)

        for path in written:
            logger.debug("Created %s", path)
        return written

    def build(self, tailwind_dir: Path, output: str = DEFAULT_TAILWIND_OUTPUT) -> int:
        """Install the CLI and compile ``input.css`` into ``output``."""
        input_css = tailwind_dir / INPUT_CSS
        if not input_css.exists():
            raise DownstreamToolFailure(f"Tailwind input not found: {input_css}")

        npm = self._executable("npm")
        self._run([npm, "install"], tailwind_dir, "npm install")

        npx = self._executable("npx")
        args = [npx, "@tailwindcss/cli"]
        if (tailwind_dir / CONFIG_FILE).exists():
            args.extend(["-c", CONFIG_FILE])
        args.extend(["-i", INPUT_CSS, "-o", output])
        return self._run(args, tailwind_dir, "Tailwind CLI")

    def _executable(self, name: str) -> str:
        resolved = self._which(name)
        if not resolved:
            raise DownstreamToolFailure(f"Unable to locate '{name}'. Ensure Node.js is installed.")
        return resolved

    def _run(self, args: Sequence[str], cwd: Path, label: str) -> int:
        logger.debug("Running %s in %s", " ".join(args), cwd)
        code = self._runner(args, cwd, self.timeout)
        if code != 0:
            raise DownstreamToolFailure(f"{label} exited with code {code}")
        return code

    @staticmethod
    def _default_runner(args: Sequence[str], cwd: Path, timeout: float) -> int:
        try:
            completed = subprocess.run(list(args), cwd=cwd, timeout=timeout, check=False)
        except FileNotFoundError as exc:
            raise DownstreamToolFailure(f"Failed to start {args[0]}: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise DownstreamToolFailure(f"{args[0]} did not finish within {timeout:g}s") from exc
        return completed.returncode


def _package_json(output: str) -> str:
    command = f"npx @tailwindcss/cli -c ./{CONFIG_FILE} -i ./{INPUT_CSS} -o {output}"
    payload = {
        "name": "tailwind",
        "private": True,
        "devDependencies": {"@tailwindcss/cli": "^4.0.0", "tailwindcss": "^4.0.0"},
        "scripts": {"build": command, "watch": f"{command} --watch"},
    }
    return json.dumps(payload, indent=2) + "\n"


__all__ = ["DownstreamToolFailure", "TailwindToolchain"]
