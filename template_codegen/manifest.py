"""
Generator manifests.

Every contributing module ships a `codegen.json` (or `codegen.yaml`) at the
root of its resources:

    {
      "name": "rx",
      "generators": [
        {
          "kind": "class",
          "templateFilename": "rx/class.templ",
          "filename": "'resources/' ~ helper.to_path(fqn) ~ '.txt'",
          "incremental": false
        }
      ]
    }

`templateFileName` and `fileName` are accepted as historical spellings.
The loader enumerates manifests on the search path (directories, then
installed packages), skips the ones it cannot read, keeps the first
generator seen for any given template and builds descriptors from the
rest.
"""

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable, Iterator, List

import yaml
from jinja2 import TemplateError
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from .descriptor import GeneratorDescriptor
from .diagnostics import Severity
from .errors import ExpressionError, ManifestError
from .expressions import compile_expression
from .gen_logging import get_logger
from .options import CodegenOptions
from .templates import Template, build_environment

logger = get_logger(__name__)

MANIFEST_NAMES = ("codegen.json", "codegen.yaml", "codegen.yml")


class GeneratorEntry(BaseModel):
    kind: str
    template_filename: str = Field(
        validation_alias=AliasChoices("templateFilename", "templateFileName")
    )
    filename: str = Field(validation_alias=AliasChoices("filename", "fileName"))
    incremental: bool = False


class Manifest(BaseModel):
    name: str
    generators: List[GeneratorEntry] = Field(default_factory=list)


@dataclass(frozen=True)
class ManifestResource:
    """A discovered manifest and where it came from."""
    locator: str
    text: str


def discover_directory(directory) -> Iterator[ManifestResource]:
    """Manifests at the root of one search-path directory."""
    directory = Path(directory)
    for name in MANIFEST_NAMES:
        path = directory / name
        if path.is_file():
            yield ManifestResource(str(path), path.read_text(encoding="utf-8"))


def discover_package(package: str) -> Iterator[ManifestResource]:
    """
    Manifests shipped at the root of an installed package.

    Raises:
        ModuleNotFoundError: when the package is not installed.
    """
    root = resources.files(package)
    for name in MANIFEST_NAMES:
        entry = root / name
        if entry.is_file():
            yield ManifestResource(f"{package}:{name}", entry.read_text(encoding="utf-8"))


def parse_manifest(resource: ManifestResource) -> Manifest:
    """
    Parse one manifest (JSON is read through the YAML loader).

    Raises:
        ManifestError: unreadable text or missing/invalid fields.
    """
    try:
        data = yaml.safe_load(resource.text)
    except yaml.YAMLError as e:
        raise ManifestError(resource.locator, f"invalid syntax: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(resource.locator, "expected a mapping at the top level")
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(resource.locator, str(e)) from e


class ManifestLoader:
    """
    Builds the generator list for one invocation.

    Never raises: manifests and generators that cannot be loaded are
    reported on the diagnostics channel and skipped.
    """

    def __init__(self, diagnostics, options: CodegenOptions = None,
                 search_path: Iterable = (), packages: Iterable[str] = (),
                 template_env=None):
        self.diagnostics = diagnostics
        self.options = options or CodegenOptions()
        self.search_path = [Path(p) for p in search_path]
        self.packages = list(packages)
        self._available_packages = []
        self._template_env = template_env

    @property
    def template_env(self):
        # Built after discovery so packages that failed to resolve are left out
        if self._template_env is None:
            self._template_env = build_environment(self.search_path, self._available_packages)
        return self._template_env

    def _unlisted(self, location, error) -> None:
        logger.warning(f"Could not load code generator descriptors from {location}: {error}")
        self.diagnostics.report(Severity.WARNING, "Could not load code generator descriptors")

    def _manifests(self) -> List[ManifestResource]:
        found = []
        available = []
        for directory in self.search_path:
            try:
                found.extend(discover_directory(directory))
            except OSError as e:
                self._unlisted(directory, e)
        for package in self.packages:
            try:
                found.extend(discover_package(package))
            except (OSError, ImportError) as e:
                self._unlisted(package, e)
                continue
            available.append(package)
        self._available_packages = available
        return found

    def load_entries(self) -> List[tuple]:
        """(manifest name, entry) pairs, deduplicated by template filename."""
        entries = []
        templates = set()
        for resource in self._manifests():
            try:
                manifest = parse_manifest(resource)
            except ManifestError as e:
                logger.error(str(e), exc_info=True)
                self.diagnostics.report(Severity.ERROR, f"Could not load code generator {e.locator}")
                continue
            for entry in manifest.generators:
                if entry.template_filename in templates:
                    logger.debug(f"Skipping duplicate template {entry.template_filename} from {resource.locator}")
                    continue
                templates.add(entry.template_filename)
                entries.append((manifest.name, entry))
        return entries

    def _build(self, name: str, entry: GeneratorEntry) -> GeneratorDescriptor:
        template = Template(self.template_env, entry.template_filename, self.options.raw)
        return GeneratorDescriptor(
            name=name,
            kind=entry.kind,
            incremental=entry.incremental,
            path_expr=compile_expression(entry.filename),
            template=template,
            template_filename=entry.template_filename,
        )

    def load(self) -> List[GeneratorDescriptor]:
        generators = []
        for name, entry in self.load_entries():
            if not self.options.accepts(name):
                continue
            try:
                generator = self._build(name, entry)
            except (TemplateError, ExpressionError) as e:
                msg = f"Could not load code generator {name} ({entry.template_filename}): {e}"
                logger.error(msg, exc_info=True)
                self.diagnostics.report(Severity.ERROR, msg)
                continue
            logger.info(f"Loaded {name} code generator")
            generators.append(generator)
        return generators
