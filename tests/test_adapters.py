import json
import os
import stat
import sys
from pathlib import Path

import pytest
from loguru import logger

from themepack_engine.adapters import jspm, lang, stylesheets, templates
from themepack_engine.errors import ParseError, ScanError


class TestStylesheets:
    def test_collects_entry_and_imports(self, tmp_path: Path, write_file):
        write_file(tmp_path / "theme.scss", '@import "settings/colors", "mixins";\n@import "vendor.css";\n')
        write_file(tmp_path / "settings/_colors.scss", '@import "../mixins";\n$primary: red;\n')
        write_file(tmp_path / "mixins.scss", "@mixin x {}\n")

        files = stylesheets.assemble("theme.scss", tmp_path, "scss")

        assert set(files) == {"theme.scss", "settings/_colors.scss", "mixins.scss"}
        assert files["settings/_colors.scss"].endswith("$primary: red;\n")

    def test_unresolved_imports_are_left_to_the_compiler(self, tmp_path: Path, write_file):
        write_file(tmp_path / "theme.scss", '@import "foundation/settings";\n')

        assert stylesheets.assemble("theme.scss", tmp_path, "scss") == {"theme.scss": '@import "foundation/settings";\n'}

    def test_circular_imports_terminate(self, tmp_path: Path, write_file):
        write_file(tmp_path / "a.scss", '@import "b";\n')
        write_file(tmp_path / "b.scss", '@import "a";\n')

        assert set(stylesheets.assemble("a.scss", tmp_path, "scss")) == {"a.scss", "b.scss"}

    def test_missing_entry_raises(self, tmp_path: Path):
        with pytest.raises(ParseError):
            stylesheets.assemble("missing.scss", tmp_path, "scss")


class TestTemplates:
    def test_resolves_partials_recursively(self, tmp_path: Path, write_file):
        write_file(tmp_path / "pages/home.html", "{{#> layout/base}}{{> components/card item=this}}{{/layout/base}}")
        write_file(tmp_path / "layout/base.html", "<body>{{> components/footer}}</body>")
        write_file(tmp_path / "components/card.html", "<div/>")
        write_file(tmp_path / "components/footer.html", "<footer/>")

        sources = templates.assemble("pages/home", tmp_path)

        assert set(sources) == {"pages/home", "layout/base", "components/card", "components/footer"}

    def test_missing_partial_raises(self, tmp_path: Path, write_file):
        write_file(tmp_path / "pages/home.html", "{{> components/missing}}")

        with pytest.raises(ParseError, match="components/missing.*included from pages/home"):
            templates.assemble("pages/home", tmp_path)


class TestLang:
    def test_aggregates_locales(self, tmp_path: Path, write_file):
        write_file(tmp_path / "en.json", json.dumps({"hello": "Hello"}))
        write_file(tmp_path / "de.json", json.dumps({"hello": "Hallo"}))
        write_file(tmp_path / "README.txt", "ignored")

        assert lang.assemble(tmp_path) == {"en": {"hello": "Hello"}, "de": {"hello": "Hallo"}}

    def test_invalid_json_raises(self, tmp_path: Path, write_file):
        write_file(tmp_path / "en.json", "{not json")

        with pytest.raises(ParseError, match="Invalid JSON"):
            lang.assemble(tmp_path)

    def test_missing_directory_raises_scan_error(self, tmp_path: Path):
        with pytest.raises(ScanError):
            lang.assemble(tmp_path / "lang")


class TestJspm:
    def test_filter_diagnostics_is_lazy_and_drops_benign_line(self):
        lines = iter([f"{jspm.BENIGN_DIAGNOSTIC} file:///app.js", "", "real problem  "])
        filtered = jspm.filter_diagnostics(lines, jspm.suppress_benign)

        assert next(filtered) == "real problem"
        assert list(filtered) == []

    def test_missing_executable_raises(self, tmp_path: Path):
        with pytest.raises(ParseError, match="not found"):
            jspm.bundle("js/app", tmp_path / "out.js", tmp_path, executable=str(tmp_path / "no-jspm"))

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script as the jspm binary")
    def test_runs_bundle_sfx_and_logs_filtered_stderr(self, tmp_path: Path, write_file, monkeypatch):
        fake = write_file(
            tmp_path / "bin/jspm",
            "#!/bin/sh\n"
            f'echo "{jspm.BENIGN_DIAGNOSTIC} file:///app.js" >&2\n'
            'echo "deprecated option" >&2\n'
            'echo "$@" > "$3"\n',
        )
        fake.chmod(fake.stat().st_mode | stat.S_IXUSR)
        monkeypatch.setenv(jspm.JSPM_BIN_ENV, str(fake))

        messages = []
        handler = logger.add(messages.append, format="{message}", level="WARNING")
        try:
            output = tmp_path / "bundle.js"
            assert jspm.bundle("js/app", output, tmp_path, jspm.BundleOptions(minify=True, mangle=False))
        finally:
            logger.remove(handler)

        assert output.read_text().split() == ["bundle-sfx", "js/app", str(output), "--minify", "--no-mangle"]
        assert [message.strip() for message in messages] == ["jspm: deprecated option"]

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script as the jspm binary")
    def test_nonzero_exit_raises(self, tmp_path: Path, write_file):
        fake = write_file(tmp_path / "jspm", "#!/bin/sh\nexit 3\n")
        fake.chmod(fake.stat().st_mode | stat.S_IXUSR)

        with pytest.raises(ParseError, match="status 3"):
            jspm.bundle("js/app", tmp_path / "out.js", tmp_path, executable=str(fake))
