import json
import threading
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from loguru import logger

from themepack_engine.addressing import template_archive_path
from themepack_engine.bundle.schema import (
    ALWAYS_EXCLUDES,
    BASE_INCLUDES,
    LANG_ARCHIVE_PATH,
    ArchiveEntry,
    lite_excludes,
    stylesheet_archive_path,
)
from themepack_engine.errors import ArchiveIOError
from themepack_engine.models import (
    BundleConfig,
    CssResult,
    JspmResult,
    LangResult,
    TaskKind,
    TaskResult,
    TemplateResult,
    TempBundle,
)

# Platform upload limit
MAX_BUNDLE_SIZE = 50 * 1024 * 1024


class ArchiveWriter:
    """Sequential zip sink. Safe to hand entries to from several threads."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._finalized = False
        try:
            self._zip = zipfile.ZipFile(self.path, "w", zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise ArchiveIOError(f"Cannot write bundle to {self.path}: {e}") from e

    @property
    def finalized(self) -> bool:
        return self._finalized

    def add(self, entry: ArchiveEntry) -> None:
        with self._lock:
            if self._finalized:
                raise ArchiveIOError(f"Archive already finalized, cannot add {entry.archive_path}")
            try:
                if entry.is_passthrough:
                    self._zip.write(entry.source, entry.archive_path)
                else:
                    self._zip.writestr(entry.archive_path, entry.content)
            except (OSError, zipfile.BadZipFile, ValueError) as e:
                raise ArchiveIOError(f"Failed to add {entry.archive_path}: {e}") from e

    def finalize(self) -> Path:
        """Close the zip and its file. Returns once the file is closed."""
        with self._lock:
            if self._finalized:
                return self.path
            self._finalized = True
            try:
                self._zip.close()
            except OSError as e:
                raise ArchiveIOError(f"Failed to finalize {self.path}: {e}") from e
        return self.path


def select_passthrough(project_root: Path, compiler_name: str, lite: bool) -> List[str]:
    """Relative posix paths of files copied into the archive as-is."""
    project_root = Path(project_root)
    excludes = ALWAYS_EXCLUDES + (lite_excludes(compiler_name) if lite else ())

    included = _glob_files(project_root, BASE_INCLUDES)
    excluded = _glob_files(project_root, excludes)
    return sorted(included - excluded)


def _glob_files(root: Path, patterns: Iterable[str]) -> Set[str]:
    matches: Set[str] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            relative = path.relative_to(root)
            # Hidden files and directories never ship (.DS_Store, .git, editor swap files)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if path.is_file():
                matches.add(relative.as_posix())
    return matches


def serialize(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_entries(
    config: BundleConfig,
    results: Dict[TaskKind, TaskResult],
    temp_bundle: Optional[TempBundle] = None,
) -> List[ArchiveEntry]:
    """Collect every archive entry for a run: passthrough files first, then generated ones."""
    root = config.project_root
    bundle_location = config.jspm.bundle_location if config.jspm_enabled else None
    output_path = config.output_path.resolve()

    entries = [
        ArchiveEntry(archive_path=relative, source=root / relative)
        for relative in select_passthrough(root, config.compiler_name, config.lite)
        if relative != bundle_location and (root / relative).resolve() != output_path
    ]

    for result in results.values():
        if isinstance(result, TemplateResult):
            for identifier, parsed in result.templates.items():
                entries.append(ArchiveEntry(archive_path=template_archive_path(identifier), content=serialize(parsed)))
        elif isinstance(result, CssResult):
            for name, parsed in result.files.items():
                entries.append(
                    ArchiveEntry(archive_path=stylesheet_archive_path(result.compiler, name), content=serialize(parsed))
                )
        elif isinstance(result, LangResult):
            entries.append(ArchiveEntry(archive_path=LANG_ARCHIVE_PATH, content=serialize(result.value)))
        elif isinstance(result, JspmResult):
            if not result.success or temp_bundle is None:
                raise ArchiveIOError("jspm bundle was scheduled but no bundle file is available")
            entries.append(ArchiveEntry(archive_path=bundle_location, source=temp_bundle.path))
        else:
            raise TypeError(f"Unknown task result: {result!r}")

    return entries


class ArchiveAssembler:
    """Streams a run's passthrough and generated entries into the output zip."""

    def __init__(self, config: BundleConfig, temp_bundle: Optional[TempBundle] = None):
        self.config = config
        self.temp_bundle = temp_bundle

    def assemble(self, results: Dict[TaskKind, TaskResult]) -> Path:
        """Write the archive and return its path once the file is closed.

        The destination is written in place; an interrupted run can leave a
        partial file behind.
        """
        return self.finalize(self.write(results))

    def write(self, results: Dict[TaskKind, TaskResult]) -> ArchiveWriter:
        """Queue every entry into a fresh archive without closing it."""
        entries = build_entries(self.config, results, self.temp_bundle)

        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveIOError(f"Cannot create output directory {self.config.output_dir}: {e}") from e

        writer = ArchiveWriter(self.config.output_path)
        try:
            for entry in entries:
                writer.add(entry)
        except ArchiveIOError:
            writer.finalize()
            raise

        generated = sum(1 for entry in entries if not entry.is_passthrough)
        logger.info(f"Wrote {len(entries)} entries ({generated} generated) to {writer.path}")
        return writer

    def finalize(self, writer: ArchiveWriter) -> Path:
        output_path = writer.finalize()

        size = output_path.stat().st_size
        if size > MAX_BUNDLE_SIZE:
            logger.warning(
                f"Bundle is {size / (1024 * 1024):.1f}MB, over the {MAX_BUNDLE_SIZE // (1024 * 1024)}MB upload limit"
            )
        return output_path
