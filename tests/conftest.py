import json
from pathlib import Path

import pytest


def write(path: Path, content) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def make_theme(root: Path, config: dict = None) -> Path:
    """A small theme: 2 templates, 1 top-level stylesheet, 2 locales."""
    config = config or {"name": "Cornerstone", "version": "1.0.0", "css_compiler": "scss"}
    write(root / "config.json", json.dumps(config))
    write(root / "package.json", json.dumps({"name": "cornerstone", "version": "1.0.0"}))
    write(root / "README.md", "# Cornerstone\n")

    write(root / "templates/pages/home.html", "{{> components/header}}<main>{{lang 'home.title'}}</main>")
    write(root / "templates/components/header.html", "<header>{{shop.name}}</header>")

    write(root / "assets/scss/theme.scss", '@import "settings/colors";\nbody { color: $primary; }\n')
    write(root / "assets/scss/settings/_colors.scss", "$primary: #333;\n")
    write(root / "assets/img/logo.png", b"\x89PNG\r\n")
    write(root / "assets/js/theme.js", "export default function () {}\n")
    write(root / "assets/jspm_packages/system.js", "// loader\n")

    write(root / "meta/screenshot.txt", "screenshot\n")

    write(root / "lang/en.json", json.dumps({"home": {"title": "Welcome"}}))
    write(root / "lang/fr.json", json.dumps({"home": {"title": "Bienvenue"}}))
    return root


JSPM_CONFIG = {
    "name": "Cornerstone",
    "css_compiler": "scss",
    "jspm": {
        "dev": {"dep_location": "assets/js/dependency-bundle.js", "bootstrap": "js/**/*"},
        "bootstrap": "js/app",
        "bundle_location": "assets/js/bundle.js",
        "jspm_packages_path": "assets/jspm_packages",
    },
}


@pytest.fixture
def theme(tmp_path: Path) -> Path:
    return make_theme(tmp_path / "theme")


@pytest.fixture
def jspm_theme(tmp_path: Path) -> Path:
    return make_theme(tmp_path / "theme", JSPM_CONFIG)


@pytest.fixture
def dest(tmp_path: Path) -> Path:
    return tmp_path / "dist"


@pytest.fixture
def write_file():
    return write
