"""jspm script bundler.

Runs `jspm bundle-sfx` as a subprocess. jspm prints one harmless diagnostic
on every self-executing bundle; callers pass a filter that drops it, and the
remaining stderr lines are logged.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from loguru import logger

from themepack_engine.errors import ParseError

JSPM_BIN_ENV = "THEMEPACK_JSPM_BIN"

BENIGN_DIAGNOSTIC = "Unable to calculate canonical name to bundle"

# Returns True for lines that should be kept.
DiagnosticFilter = Callable[[str], bool]


@dataclass(frozen=True)
class BundleOptions:
    minify: bool = True
    mangle: bool = True


def suppress_benign(line: str) -> bool:
    return BENIGN_DIAGNOSTIC not in line


def filter_diagnostics(lines: Iterable[str], keep: DiagnosticFilter) -> Iterator[str]:
    """Lazily yield the non-empty diagnostic lines accepted by keep."""
    for line in lines:
        line = line.rstrip()
        if line and keep(line):
            yield line


def resolve_executable(executable: Optional[str] = None) -> str:
    candidate = executable or os.environ.get(JSPM_BIN_ENV) or "jspm"
    found = shutil.which(candidate)
    if found is None:
        raise ParseError(f"jspm executable not found: {candidate} (set {JSPM_BIN_ENV} to override)")
    return found


def bundle(
    bootstrap: str,
    output_path: Path,
    project_root: Path,
    options: BundleOptions = BundleOptions(),
    diagnostic_filter: DiagnosticFilter = suppress_benign,
    executable: Optional[str] = None,
) -> bool:
    """Bundle the jspm entry point into a self-executing script at output_path.

    Args:
        bootstrap: Module to bundle, e.g. "js/app"
        output_path: File the bundle is written to
        project_root: Theme root (holds package.json and the jspm config)
        options: Minify/mangle switches
        diagnostic_filter: Predicate selecting which stderr lines get logged
        executable: jspm binary, defaults to $THEMEPACK_JSPM_BIN or jspm on PATH

    Returns:
        True once the bundle has been written

    Raises:
        ParseError: If jspm is missing or exits with an error
    """
    command = [resolve_executable(executable), "bundle-sfx", bootstrap, str(output_path)]
    if options.minify:
        command.append("--minify")
    if not options.mangle:
        command.append("--no-mangle")

    logger.info(f"Bundling jspm entry point {bootstrap}")
    try:
        completed = subprocess.run(command, cwd=project_root, capture_output=True, text=True)
    except OSError as e:
        raise ParseError(f"Failed to run jspm: {e}") from e

    for line in filter_diagnostics(completed.stderr.splitlines(), diagnostic_filter):
        logger.warning(f"jspm: {line}")

    if completed.returncode != 0:
        raise ParseError(f"jspm bundle-sfx exited with status {completed.returncode}")

    logger.debug(f"jspm bundle written to {output_path}")
    return True
