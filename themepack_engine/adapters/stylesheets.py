"""Stylesheet assembler.

Collects an entry stylesheet and every local file it imports, so the platform
can compile it later. No compilation happens here.
"""

import os
import re
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from themepack_engine.errors import ParseError

IMPORT_PATTERN = re.compile(r"@import\s+([^;]+);")
QUOTED_PATTERN = re.compile(r"""["']([^"']+)["']""")


def assemble(file_name: str, base_path: Path, compiler_name: str) -> Dict[str, str]:
    """Read file_name and its imports.

    Args:
        file_name: Entry stylesheet, relative to base_path (e.g. "theme.scss")
        base_path: Stylesheet source directory (assets/<compiler>)
        compiler_name: Stylesheet extension without the dot

    Returns:
        Mapping of posix path relative to base_path to file source

    Raises:
        ParseError: If the entry stylesheet cannot be read
    """
    base_path = Path(base_path)
    entry = base_path / file_name
    try:
        source = entry.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not read stylesheet {entry}: {e}") from e

    files: Dict[str, str] = {}
    pending = [(entry, source)]
    while pending:
        path, source = pending.pop()
        key = path.relative_to(base_path).as_posix()
        if key in files:
            continue
        files[key] = source

        for target in _imports(source):
            resolved = _resolve(target, path.parent, base_path, compiler_name)
            if resolved is None:
                logger.debug(f"Unresolved import '{target}' in {key}, leaving it to the compiler")
                continue
            if resolved.relative_to(base_path).as_posix() in files:
                continue
            try:
                pending.append((resolved, resolved.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                raise ParseError(f"Could not read stylesheet {resolved}: {e}") from e

    return files


def _imports(source: str) -> List[str]:
    targets = []
    for statement in IMPORT_PATTERN.findall(source):
        for target in QUOTED_PATTERN.findall(statement):
            # Plain css, remote and url() imports are passed through by compilers
            if target.endswith(".css") or "://" in target or target.startswith("url("):
                continue
            targets.append(target)
    return targets


def _resolve(target: str, current_dir: Path, base_path: Path, compiler_name: str) -> Optional[Path]:
    relative = Path(target)
    stem = relative.name
    if stem.endswith(f".{compiler_name}"):
        stem = stem[: -len(compiler_name) - 1]

    root = base_path.resolve()
    for directory in (current_dir, base_path):
        folder = directory / relative.parent
        for candidate in (folder / f"{stem}.{compiler_name}", folder / f"_{stem}.{compiler_name}"):
            if not candidate.is_file():
                continue
            # Imports escaping the stylesheet directory belong to the compiler's include paths
            if root not in candidate.resolve().parents:
                return None
            return Path(os.path.normpath(candidate))
    return None
