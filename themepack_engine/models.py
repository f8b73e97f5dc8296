"""
Core models for the themepack engine.

Configuration is modelled with pydantic (immutable once built); task results
are plain frozen dataclasses. Archive entries are pydantic models in
bundle/schema.py.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Project configuration (config.json)
# ============================================================================


class JspmSettings(BaseModel):
    """The `jspm` block of a theme's config.json."""

    model_config = ConfigDict(extra="ignore")

    bootstrap: str
    bundle_location: str
    jspm_packages_path: str
    dev: Optional[Dict[str, Any]] = None


class ThemeConfig(BaseModel):
    """Subset of config.json the bundler cares about."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    version: Optional[str] = None
    css_compiler: str = Field(default="scss")
    jspm: Optional[JspmSettings] = None


# ============================================================================
# Run configuration
# ============================================================================


class JspmConfig(BaseModel):
    """Resolved jspm settings for one run."""

    model_config = ConfigDict(frozen=True)

    packages_path: Path
    bootstrap: str
    bundle_location: str  # posix path inside the archive


class BundleConfig(BaseModel):
    """Everything one bundle run needs. Built once, never mutated."""

    model_config = ConfigDict(frozen=True)

    project_root: Path
    compiler_name: str = "scss"
    jspm: Optional[JspmConfig] = None
    lite: bool = False
    output_dir: Path
    output_name: str = "bundle.zip"

    @property
    def jspm_enabled(self) -> bool:
        return self.jspm is not None

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.output_name


@dataclass(frozen=True)
class TempBundle:
    """Handle to the temporary file the jspm bundle is written to."""

    path: Path


# ============================================================================
# Task model
# ============================================================================


class TaskKind(str, Enum):
    """Top-level tasks a run can schedule."""

    CSS = "css"
    TEMPLATES = "templates"
    LANG = "lang"
    JSPM_BUNDLE = "jspm_bundle"


@dataclass(frozen=True)
class CssResult:
    """Parsed stylesheets keyed by stylesheet name (no extension)."""

    compiler: str
    files: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TemplateResult:
    """Parsed templates keyed by logical template identifier."""

    templates: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LangResult:
    """Aggregated language strings."""

    value: Any


@dataclass(frozen=True)
class JspmResult:
    """Marker for a finished jspm bundle. The bytes live in the temp file."""

    success: bool = True


TaskResult = Union[CssResult, TemplateResult, LangResult, JspmResult]


@dataclass(frozen=True)
class TaskDescriptor:
    """A named unit of work for the scheduler."""

    kind: TaskKind
    run: Callable[[], TaskResult]


class RunState(str, Enum):
    """Lifecycle of a single bundle run."""

    CONFIGURING = "configuring"
    SCHEDULING = "scheduling"
    SUCCEEDED = "succeeded"
    ASSEMBLING = "assembling"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"
    CLEANUP = "cleanup"
    ABORTED = "aborted"
