"""Bundle orchestrator - schedules asset parsing and drives archive assembly."""

import os
import re
import tempfile
from contextlib import contextmanager
from functools import partial
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from loguru import logger

from themepack_engine.adapters import Adapters
from themepack_engine.adapters.jspm import BundleOptions, suppress_benign
from themepack_engine.bundle.writer import ArchiveAssembler
from themepack_engine.config import build_bundle_config, load_theme_config
from themepack_engine.errors import ParseError
from themepack_engine.models import (
    BundleConfig,
    CssResult,
    JspmResult,
    LangResult,
    RunState,
    TaskDescriptor,
    TaskKind,
    TaskResult,
    TemplateResult,
    TempBundle,
)
from themepack_engine.scanner import pattern_projection, scan, suffix_projection
from themepack_engine.scheduler import map_concurrently, run_descriptors

TEMPLATES_DIR = "templates"
LANG_DIR = "lang"


@contextmanager
def allocate_temp_bundle() -> Iterator[TempBundle]:
    """Create the jspm temp file and delete it on every exit path."""
    fd, name = tempfile.mkstemp(prefix="themepack-jspm-", suffix=".js")
    os.close(fd)
    handle = TempBundle(path=Path(name))
    try:
        yield handle
    finally:
        try:
            handle.path.unlink()
        except FileNotFoundError:
            pass
        logger.debug(f"Removed temp bundle {handle.path}")


def build_tasks(config: BundleConfig, adapters: Adapters, temp_bundle: Optional[TempBundle] = None) -> List[TaskDescriptor]:
    """Task set for a run. css, templates and lang always; jspm when configured."""
    root = config.project_root
    css_path = root / "assets" / config.compiler_name
    templates_path = root / TEMPLATES_DIR

    def run_css() -> CssResult:
        names = scan(css_path, pattern_projection(rf"([^/]+)\.{re.escape(config.compiler_name)}"))
        logger.debug(f"Parsing {len(names)} stylesheets")
        files = map_concurrently(
            lambda name: adapters.stylesheet(f"{name}.{config.compiler_name}", css_path, config.compiler_name),
            names,
        )
        return CssResult(compiler=config.compiler_name, files=files)

    def run_templates() -> TemplateResult:
        identifiers = scan(templates_path, suffix_projection(".html"))
        logger.debug(f"Parsing {len(identifiers)} templates")
        return TemplateResult(templates=map_concurrently(partial(_assemble_template, adapters, templates_path), identifiers))

    def run_lang() -> LangResult:
        return LangResult(value=adapters.lang(root / LANG_DIR))

    tasks = [
        TaskDescriptor(kind=TaskKind.CSS, run=run_css),
        TaskDescriptor(kind=TaskKind.TEMPLATES, run=run_templates),
        TaskDescriptor(kind=TaskKind.LANG, run=run_lang),
    ]

    if config.jspm_enabled:
        if temp_bundle is None:
            raise ValueError("jspm is enabled but no temp bundle was allocated")

        def run_jspm() -> JspmResult:
            success = adapters.jspm_bundle(
                config.jspm.bootstrap,
                temp_bundle.path,
                root,
                BundleOptions(minify=True, mangle=True),
                suppress_benign,
            )
            if not success:
                raise ParseError(f"jspm did not produce a bundle for {config.jspm.bootstrap}")
            return JspmResult(success=True)

        tasks.append(TaskDescriptor(kind=TaskKind.JSPM_BUNDLE, run=run_jspm))

    return tasks


def _assemble_template(adapters: Adapters, templates_path: Path, identifier: str):
    return adapters.template(identifier, templates_path)


class BundleOrchestrator:
    """Runs one bundle: schedule every task, then assemble or abort.

    State: configuring -> scheduling -> succeeded -> assembling -> finalizing -> done,
    or scheduling -> failed -> cleanup -> aborted. No retries.
    """

    def __init__(self, config: BundleConfig, adapters: Optional[Adapters] = None):
        self.config = config
        self.adapters = adapters or Adapters()
        self.state = RunState.CONFIGURING
        self.transitions: List[RunState] = [self.state]

    def run(self) -> Path:
        try:
            with self._temp_bundle() as temp_bundle:
                try:
                    self._transition(RunState.SCHEDULING)
                    results = self._schedule(temp_bundle)
                    self._transition(RunState.SUCCEEDED)

                    assembler = ArchiveAssembler(self.config, temp_bundle)
                    self._transition(RunState.ASSEMBLING)
                    writer = assembler.write(results)
                    self._transition(RunState.FINALIZING)
                    output_path = assembler.finalize(writer)
                except Exception as e:
                    logger.debug(f"Bundle run failed in state {self.state.value}: {e}")
                    self._transition(RunState.FAILED)
                    self._transition(RunState.CLEANUP)
                    raise
        except Exception:
            self._transition(RunState.ABORTED)
            raise

        self._transition(RunState.DONE)
        return output_path

    def _transition(self, state: RunState) -> None:
        self.state = state
        self.transitions.append(state)

    def _schedule(self, temp_bundle: Optional[TempBundle]) -> Dict[TaskKind, TaskResult]:
        tasks = build_tasks(self.config, self.adapters, temp_bundle)
        logger.info(f"Scheduling tasks: {', '.join(task.kind.value for task in tasks)}")
        return run_descriptors(tasks)

    @contextmanager
    def _temp_bundle(self) -> Iterator[Optional[TempBundle]]:
        if not self.config.jspm_enabled:
            yield None
            return
        with allocate_temp_bundle() as handle:
            yield handle


def bundle_theme(
    project_root: Path,
    dest: Optional[Path] = None,
    name: Optional[str] = None,
    lite: bool = False,
    adapters: Optional[Adapters] = None,
) -> Path:
    """Bundle the theme at project_root and return the archive path.

    Configuration errors are raised before any task is scheduled and before
    the archive file is created.
    """
    theme_config = load_theme_config(Path(project_root))
    config = build_bundle_config(project_root, theme_config, dest=dest, name=name, lite=lite)
    return BundleOrchestrator(config, adapters).run()
