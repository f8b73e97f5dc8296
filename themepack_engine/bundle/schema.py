"""Bundle schema - archive layout contract between the bundler and the platform."""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

PARSED_PREFIX = "parsed"
LANG_ARCHIVE_PATH = f"{PARSED_PREFIX}/lang.json"

# Passthrough files, relative to the project root
BASE_INCLUDES: Tuple[str, ...] = (
    "assets/**/*",
    "meta/**/*",
    "templates/**/*",
    "lang/*",
    "README.md",
    "config.json",
    "package.json",
)

ALWAYS_EXCLUDES: Tuple[str, ...] = ("assets/jspm_packages/**/*",)


def lite_excludes(compiler_name: str) -> Tuple[str, ...]:
    """Source trees dropped from a lite bundle. Only runtime assets remain."""
    return (
        "meta/**/*",
        "assets/js/**/*",
        f"assets/{compiler_name}/**/*",
        "templates/**/*",
        "lang/**/*",
    )


def stylesheet_archive_path(compiler_name: str, name: str) -> str:
    return f"{PARSED_PREFIX}/{compiler_name}/{name}.json"


class ArchiveEntry(BaseModel):
    """One file in the archive, copied from disk or generated in memory."""

    model_config = ConfigDict(frozen=True)

    archive_path: str
    source: Optional[Path] = Field(default=None, description="Passthrough file on disk")
    content: Optional[bytes] = Field(default=None, description="Generated bytes")

    @model_validator(mode="after")
    def _one_payload(self) -> "ArchiveEntry":
        if (self.source is None) == (self.content is None):
            raise ValueError("ArchiveEntry needs exactly one of source or content")
        return self

    @property
    def is_passthrough(self) -> bool:
        return self.source is not None
