"""Template assembler - gathers a template and the partials it references."""

import re
from pathlib import Path
from typing import Dict, List, Optional

from themepack_engine.errors import ParseError

TEMPLATE_SUFFIX = ".html"

# {{> components/card}} and {{#> layout/base}}
PARTIAL_PATTERN = re.compile(r"\{\{#?>\s*([\w\-/]+)[^{]*?\}\}")


def assemble(logical_identifier: str, templates_path: Path) -> Dict[str, str]:
    """Read a template and, recursively, every partial it includes.

    Args:
        logical_identifier: Template path relative to templates_path, no suffix
        templates_path: Root of the template tree

    Returns:
        Mapping of template identifier to template source

    Raises:
        ParseError: If the template or any referenced partial cannot be read
    """
    templates_path = Path(templates_path)
    sources: Dict[str, str] = {}
    pending = [(logical_identifier, None)]

    while pending:
        name, parent = pending.pop()
        if name in sources:
            continue
        sources[name] = _read(name, templates_path, parent)
        pending.extend((partial, name) for partial in partials_of(sources[name]) if partial not in sources)

    return sources


def partials_of(source: str) -> List[str]:
    return PARTIAL_PATTERN.findall(source)


def _read(name: str, templates_path: Path, referenced_by: Optional[str]) -> str:
    path = templates_path / f"{name}{TEMPLATE_SUFFIX}"
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        where = f" (included from {referenced_by})" if referenced_by else ""
        raise ParseError(f"Could not read template {name}{where}: {e}") from e
