"""Directory scanner - lists files under a base directory as logical identifiers."""

import os
import re
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from themepack_engine.errors import ScanError

# Maps a posix path relative to the scanned directory to a logical identifier,
# or None to drop the file.
Predicate = Callable[[str], Optional[str]]


def scan(base_dir: Path, predicate: Predicate) -> List[str]:
    """Recursively list files under base_dir, projected through predicate.

    Args:
        base_dir: Directory to walk
        predicate: Filter/projection applied to each relative posix path

    Returns:
        Sorted logical identifiers. Sorting is for display only.

    Raises:
        ScanError: If base_dir does not exist or cannot be read
    """
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise ScanError(f"Directory not found: {base_dir}")
    if not os.access(base_dir, os.R_OK | os.X_OK):
        raise ScanError(f"Directory not readable: {base_dir}")

    def _raise(error: OSError) -> None:
        raise ScanError(f"Failed to scan {base_dir}: {error}") from error

    identifiers = []
    for dirpath, _dirnames, filenames in os.walk(base_dir, onerror=_raise):
        for filename in filenames:
            relative = (Path(dirpath) / filename).relative_to(base_dir).as_posix()
            identifier = predicate(relative)
            if identifier is not None:
                identifiers.append(identifier)

    logger.debug(f"Scanned {base_dir}: {len(identifiers)} matching files")
    return sorted(identifiers)


def extension_filter(*extensions: str) -> Predicate:
    """Keep files whose suffix is one of extensions, unchanged."""
    wanted = tuple(ext if ext.startswith(".") else f".{ext}" for ext in extensions)

    def predicate(relative: str) -> Optional[str]:
        return relative if relative.endswith(wanted) else None

    return predicate


def suffix_projection(suffix: str) -> Predicate:
    """Keep files ending in suffix and strip it, e.g. pages/home.html -> pages/home."""

    def predicate(relative: str) -> Optional[str]:
        if not relative.endswith(suffix) or relative == suffix:
            return None
        return relative[: -len(suffix)]

    return predicate


def pattern_projection(pattern: str) -> Predicate:
    """Keep files fully matching pattern, projected to its first group."""
    regex = re.compile(pattern)

    def predicate(relative: str) -> Optional[str]:
        match = regex.fullmatch(relative)
        return match.group(1) if match else None

    return predicate
