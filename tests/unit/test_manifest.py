"""
Unit tests for manifest discovery, parsing and generator construction.
"""

import json
import sys

import pytest

from template_codegen.diagnostics import Severity
from template_codegen.errors import ManifestError
from template_codegen.manifest import ManifestLoader, ManifestResource, parse_manifest
from template_codegen.model import Model
from template_codegen.options import CodegenOptions


def _entry(kind="class", template="t.j2", filename="fqn ~ '.txt'", **extra):
    entry = {"kind": kind, "templateFilename": template, "filename": filename}
    entry.update(extra)
    return entry


class TestParseManifest:

    def test_current_spelling(self):
        manifest = parse_manifest(ManifestResource("m", '{"name": "rx", "generators": [{"kind": "class", "templateFilename": "a.j2", "filename": "fqn"}]}'))
        assert manifest.name == "rx"
        entry = manifest.generators[0]
        assert (entry.kind, entry.template_filename, entry.filename, entry.incremental) == ("class", "a.j2", "fqn", False)

    def test_historical_spelling(self):
        manifest = parse_manifest(ManifestResource("m", '{"name": "rx", "generators": [{"kind": "class", "templateFileName": "a.j2", "fileName": "fqn", "incremental": true}]}'))
        entry = manifest.generators[0]
        assert entry.template_filename == "a.j2"
        assert entry.filename == "fqn"
        assert entry.incremental is True

    def test_yaml(self):
        text = "name: docs\ngenerators:\n  - kind: module\n    templateFilename: d.j2\n    filename: \"'x.md'\"\n"
        manifest = parse_manifest(ManifestResource("codegen.yaml", text))
        assert manifest.generators[0].filename == "'x.md'"

    @pytest.mark.parametrize("text", [
        "{not json",
        "[1, 2]",
        '{"generators": []}',
        '{"name": "x", "generators": [{"kind": "class", "filename": "fqn"}]}',
    ])
    def test_invalid(self, text):
        with pytest.raises(ManifestError) as info:
            parse_manifest(ManifestResource("broken/codegen.json", text))
        assert info.value.locator == "broken/codegen.json"


class TestManifestLoader:

    def test_loads_generators(self, diagnostics, write_generator_dir):
        root = write_generator_dir(
            {"name": "rx", "generators": [_entry(template="rx/a.j2", incremental=True)]},
            {"rx/a.j2": "{{ fqn }}"},
        )
        generators = ManifestLoader(diagnostics, search_path=[root]).load()

        assert len(generators) == 1
        generator = generators[0]
        assert generator.name == "rx"
        assert generator.kind == "class"
        assert generator.incremental
        assert generator.path_expr.evaluate({"fqn": "a.Foo"}) == "a.Foo.txt"
        assert generator.template.render(Model("a.Foo", "class")) == "a.Foo"
        assert diagnostics.diagnostics == []

    def test_template_deduplicated_across_manifests(self, diagnostics, write_generator_dir):
        first = write_generator_dir({"name": "one", "generators": [_entry(template="shared.j2")]}, {"shared.j2": "1"})
        second = write_generator_dir({"name": "two", "generators": [_entry(template="shared.j2"), _entry(template="own.j2")]}, {"own.j2": "2"})

        generators = ManifestLoader(diagnostics, search_path=[first, second]).load()
        assert [(g.name, g.template_filename) for g in generators] == [("one", "shared.j2"), ("two", "own.j2")]

    def test_malformed_manifest_is_skipped(self, diagnostics, write_generator_dir):
        broken = write_generator_dir("{ this is not valid")
        good = write_generator_dir({"name": "ok", "generators": [_entry()]}, {"t.j2": "x"})

        generators = ManifestLoader(diagnostics, search_path=[broken, good]).load()

        assert [g.name for g in generators] == ["ok"]
        assert len(diagnostics.errors) == 1
        assert str(broken / "codegen.json") in diagnostics.errors[0].message

    def test_missing_template_is_reported(self, diagnostics, write_generator_dir):
        root = write_generator_dir({"name": "rx", "generators": [_entry(template="missing.j2"), _entry(template="t.j2")]}, {"t.j2": "x"})
        generators = ManifestLoader(diagnostics, search_path=[root]).load()
        assert [g.template_filename for g in generators] == ["t.j2"]
        assert len(diagnostics.errors) == 1
        assert "missing.j2" in diagnostics.errors[0].message

    def test_bad_expression_is_reported(self, diagnostics, write_generator_dir):
        root = write_generator_dir({"name": "rx", "generators": [_entry(filename="fqn ~ ~")]}, {"t.j2": "x"})
        assert ManifestLoader(diagnostics, search_path=[root]).load() == []
        assert diagnostics.errors[0].severity is Severity.ERROR

    def test_name_filter(self, diagnostics, write_generator_dir):
        foo = write_generator_dir({"name": "foobar", "generators": [_entry(template="a.j2")]}, {"a.j2": "a"})
        baz = write_generator_dir({"name": "bazgen", "generators": [_entry(template="b.j2")]}, {"b.j2": "b"})
        options = CodegenOptions.from_options({"codegen.generators": "foo.*"})

        generators = ManifestLoader(diagnostics, options, search_path=[foo, baz]).load()
        assert [g.name for g in generators] == ["foobar"]

    def test_options_reach_templates(self, diagnostics, write_generator_dir):
        root = write_generator_dir({"name": "rx", "generators": [_entry()]}, {"t.j2": "{{ options['flavor'] }}"})
        options = CodegenOptions.from_options({"flavor": "spicy"})
        generator = ManifestLoader(diagnostics, options, search_path=[root]).load()[0]
        assert generator.template.render(Model("a.Foo", "class")) == "spicy"

    def test_yaml_manifest_discovered(self, diagnostics, write_generator_dir):
        text = "name: docs\ngenerators:\n  - kind: module\n    templateFilename: d.j2\n    filename: \"'x.md'\"\n"
        root = write_generator_dir(text, {"d.j2": "doc"}, manifest_name="codegen.yaml")
        assert [g.name for g in ManifestLoader(diagnostics, search_path=[root]).load()] == ["docs"]

    def test_unknown_package_is_a_warning(self, diagnostics):
        generators = ManifestLoader(diagnostics, packages=["no_such_codegen_package_xyz"]).load()
        assert generators == []
        assert [d.severity for d in diagnostics.diagnostics] == [Severity.WARNING]


@pytest.fixture
def installed_package(temp_output_dir, monkeypatch):
    """Factory fixture writing an importable package with a manifest and templates."""
    def _install(name, manifest, templates):
        package = temp_output_dir / "site" / name
        package.mkdir(parents=True)
        (package / "__init__.py").write_text("", encoding="utf-8")
        (package / "codegen.json").write_text(json.dumps(manifest), encoding="utf-8")
        for filename, content in templates.items():
            path = package / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        monkeypatch.syspath_prepend(str(package.parent))
        monkeypatch.delitem(sys.modules, name, raising=False)
        return name
    return _install


class TestPackageDiscovery:

    def test_generator_loaded_from_package(self, diagnostics, installed_package):
        name = installed_package(
            "codegen_pkg_generators",
            {"name": "pkg", "generators": [_entry(template="pkg/t.j2")]},
            {"pkg/t.j2": "{{ fqn }}-pkg"},
        )
        generators = ManifestLoader(diagnostics, packages=[name]).load()

        assert [g.name for g in generators] == ["pkg"]
        assert generators[0].template.render(Model("a.Foo", "class")) == "a.Foo-pkg"
        assert diagnostics.diagnostics == []

    def test_reloading_keeps_packages_once(self, diagnostics, installed_package):
        name = installed_package(
            "codegen_pkg_reload",
            {"name": "pkg", "generators": [_entry()]},
            {"t.j2": "x"},
        )
        loader = ManifestLoader(diagnostics, packages=[name])
        loader.load()
        loader.load()

        assert loader._available_packages == [name]
