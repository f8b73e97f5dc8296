"""Project configuration loading and run configuration derivation."""

import json
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from themepack_engine.errors import ConfigError, UsageError
from themepack_engine.models import BundleConfig, JspmConfig, ThemeConfig

CONFIG_FILE = "config.json"
DEFAULT_BUNDLE_NAME = "bundle.zip"


def load_theme_config(project_root: Path) -> ThemeConfig:
    """Parse <project_root>/config.json.

    Raises:
        UsageError: If there is no config.json, i.e. not a theme directory
        ConfigError: If config.json is not valid
    """
    config_path = Path(project_root) / CONFIG_FILE
    if not config_path.is_file():
        raise UsageError(f"{CONFIG_FILE} not found in {project_root}. Run this command from a theme directory.")

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    try:
        return ThemeConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid {CONFIG_FILE}: {e}") from e


def normalize_bundle_name(name: Optional[str]) -> str:
    name = name or DEFAULT_BUNDLE_NAME
    return name if name.lower().endswith(".zip") else f"{name}.zip"


def build_bundle_config(
    project_root: Path,
    theme_config: ThemeConfig,
    dest: Optional[Path] = None,
    name: Optional[str] = None,
    lite: bool = False,
) -> BundleConfig:
    """Derive the immutable run configuration.

    Raises:
        ConfigError: If jspm is configured but its packages directory is missing
    """
    project_root = Path(project_root).resolve()

    jspm = None
    if theme_config.jspm is not None:
        packages_path = project_root / theme_config.jspm.jspm_packages_path
        if not packages_path.is_dir():
            raise ConfigError(
                f"jspm packages directory not found: {packages_path}. Run `jspm install` before bundling."
            )
        jspm = JspmConfig(
            packages_path=packages_path,
            bootstrap=theme_config.jspm.bootstrap,
            bundle_location=Path(theme_config.jspm.bundle_location).as_posix().lstrip("/"),
        )

    config = BundleConfig(
        project_root=project_root,
        compiler_name=theme_config.css_compiler,
        jspm=jspm,
        lite=lite,
        output_dir=Path(dest or Path.cwd()).resolve(),
        output_name=normalize_bundle_name(name),
    )
    logger.debug(f"Bundle config: {config.model_dump(mode='json')}")
    return config
