"""
Pytest configuration and shared fixtures for the template-codegen test suite.
"""

import json
import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from template_codegen.descriptor import GeneratorDescriptor
from template_codegen.diagnostics import DiagnosticCollector
from template_codegen.expressions import compile_expression
from template_codegen.model import Declaration, Model
from template_codegen.sinks import ResourceLocation, ResourceSink, SourceSink


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def examples_dir(project_root):
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated output."""
    temp_dir = tempfile.mkdtemp(prefix="codegen_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def diagnostics():
    return DiagnosticCollector()


# In-memory sinks


class RecordingSourceSink(SourceSink):
    def __init__(self, known=()):
        self.known = set(known)
        self.written = {}

    def exists(self, qualified_name):
        return qualified_name in self.known

    def write(self, qualified_name, content):
        self.written[qualified_name] = content


class RecordingResourceSink(ResourceSink):
    def __init__(self, distinct=True):
        self.distinct = distinct
        self.written = {ResourceLocation.PRIMARY: {}, ResourceLocation.COMPANION: {}}

    def write(self, location, relative_path, content):
        self.written[location][relative_path] = content

    def is_distinct(self, location, other):
        return self.distinct


@pytest.fixture
def source_sink():
    return RecordingSourceSink()


@pytest.fixture
def resource_sink():
    return RecordingResourceSink()


class FakeTemplate:
    """Template double: renders through a plain callable `(model, variables) -> str`."""

    def __init__(self, render):
        self._render = render
        self.calls = []

    def render(self, model, variables=None):
        variables = dict(variables or {})
        self.calls.append((model, variables))
        return self._render(model, variables)


@pytest.fixture
def make_generator():
    """Factory fixture building a descriptor around a callable template."""
    def _make(name="gen", kind="class", path="fqn ~ '.txt'", render=None, incremental=False):
        render = render or (lambda model, variables: f"{model.fqn}\n")
        return GeneratorDescriptor(
            name=name,
            kind=kind,
            incremental=incremental,
            path_expr=compile_expression(path),
            template=FakeTemplate(render),
            template_filename=f"{name}/{kind}.j2",
        )
    return _make


@pytest.fixture
def make_model():
    """Factory fixture building a model (kind `class` by default)."""
    def _make(fqn, kind="class", module="acme", enclosing=None, **values):
        return Model(
            fqn=fqn,
            kind=kind,
            module=module,
            vars=values,
            declaration=Declaration(fqn, enclosing),
        )
    return _make


@pytest.fixture
def write_generator_dir(temp_output_dir):
    """
    Factory fixture writing a manifest plus its templates into a fresh
    search-path directory; returns that directory.
    """
    counter = {"n": 0}

    def _write(manifest, templates=None, manifest_name="codegen.json"):
        counter["n"] += 1
        root = temp_output_dir / f"generators{counter['n']}"
        root.mkdir(parents=True)
        text = manifest if isinstance(manifest, str) else json.dumps(manifest)
        (root / manifest_name).write_text(text, encoding="utf-8")
        for filename, content in (templates or {}).items():
            path = root / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root
    return _write


@pytest.fixture(autouse=True)
def reset_codegen_logger():
    """The CLI installs a non-propagating handler; undo it so caplog keeps working."""
    yield
    logger = logging.getLogger("codegen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
