"""Asset adapters the orchestrator schedules.

Each adapter turns one asset class into a JSON-serializable value. They are
grouped in Adapters so a run can be given fakes.
"""

from dataclasses import dataclass
from typing import Callable

from . import jspm, lang, stylesheets, templates


@dataclass(frozen=True)
class Adapters:
    stylesheet: Callable = stylesheets.assemble
    template: Callable = templates.assemble
    lang: Callable = lang.assemble
    jspm_bundle: Callable = jspm.bundle


__all__ = ["Adapters", "jspm", "lang", "stylesheets", "templates"]
