"""Language aggregator - merges every locale file into one mapping."""

import json
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from themepack_engine.errors import ParseError
from themepack_engine.scanner import pattern_projection, scan


def assemble(lang_path: Path) -> Dict[str, Any]:
    """Read lang/<locale>.json files into {locale: translations}.

    Raises:
        ScanError: If the language directory is missing
        ParseError: If a locale file is not valid JSON
    """
    lang_path = Path(lang_path)
    locales = scan(lang_path, pattern_projection(r"([^/]+)\.json"))

    translations: Dict[str, Any] = {}
    for locale in locales:
        path = lang_path / f"{locale}.json"
        try:
            translations[locale] = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Could not read language file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in language file {path}: {e}") from e

    logger.debug(f"Aggregated {len(translations)} locales from {lang_path}")
    return translations
