"""Error taxonomy for theme bundling.

Every error is terminal for the run. The CLI translates these into click
outcomes; the engine only raises them.
"""

from typing import Any


class ThemepackError(Exception):
    """Base class for all bundling errors."""


class UsageError(ThemepackError):
    """Bad invocation, e.g. no config.json where the project root should be."""


class ConfigError(ThemepackError):
    """Project configuration is malformed or references missing paths."""


class ScanError(ThemepackError):
    """A directory that should be scanned is missing or unreadable."""


class ParseError(ThemepackError):
    """An asset adapter failed on a single file."""


class SchedulingError(ThemepackError):
    """A scheduled task failed, so the run cannot proceed."""


class TaskFailedError(SchedulingError):
    """The first task error observed by the scheduler."""

    def __init__(self, task: Any, cause: BaseException):
        self.task = task
        self.cause = cause
        name = getattr(task, "value", task)
        super().__init__(f"{name} task failed: {cause}")


class ArchiveIOError(ThemepackError):
    """The archive could not be written or was written to after finalize."""
