"""
Naming helpers exposed to path expressions and templates.

- Case: identifier case conventions (CamelCase, snake_case, ...), each able
  to split a name into atoms and join atoms back.
- TypeNameTranslator: per-generator mapping of qualified type names.
- Helper: small utilities on qualified names, bound as `helper`.
"""

import os
import re
from pathlib import Path
from typing import Dict, List


class Case:
    """An identifier case convention."""

    name = ""

    def parse(self, value: str) -> List[str]:
        raise NotImplementedError

    def join(self, atoms: List[str]) -> str:
        raise NotImplementedError

    def format(self, value: str, source: "Case" = None) -> str:
        """Re-case `value`, read with `source` (guessed when omitted)."""
        atoms = (source or _guess_case(value)).parse(value)
        return self.join(atoms)

    def __call__(self, value: str) -> str:
        return self.format(value)

    def __repr__(self):
        return f"Case({self.name})"


_CAMEL_ATOM = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+|[A-Z]")


class _CamelCase(Case):
    name = "CAMEL"

    def parse(self, value):
        return [atom.lower() for atom in _CAMEL_ATOM.findall(value)]

    def join(self, atoms):
        return "".join(atom[:1].upper() + atom[1:] for atom in atoms)


class _LowerCamelCase(_CamelCase):
    name = "LOWER_CAMEL"

    def join(self, atoms):
        joined = super().join(atoms)
        return joined[:1].lower() + joined[1:]


class _SeparatorCase(Case):
    separator = ""

    def parse(self, value):
        return [atom.lower() for atom in value.split(self.separator) if atom]

    def join(self, atoms):
        return self.separator.join(atom.lower() for atom in atoms)


class _SnakeCase(_SeparatorCase):
    name = "SNAKE"
    separator = "_"


class _KebabCase(_SeparatorCase):
    name = "KEBAB"
    separator = "-"


class _QualifiedCase(_SeparatorCase):
    name = "QUALIFIED"
    separator = "."

    def parse(self, value):
        return [atom for atom in value.split(".") if atom]

    def join(self, atoms):
        return ".".join(atoms)


CAMEL = _CamelCase()
LOWER_CAMEL = _LowerCamelCase()
SNAKE = _SnakeCase()
KEBAB = _KebabCase()
QUALIFIED = _QualifiedCase()

CASES = (CAMEL, LOWER_CAMEL, SNAKE, KEBAB, QUALIFIED)


def _guess_case(value: str) -> Case:
    if "_" in value:
        return SNAKE
    if "-" in value:
        return KEBAB
    if "." in value:
        return QUALIFIED
    return CAMEL


def case_vars() -> Dict[str, Case]:
    """Variables `CASE_CAMEL`, `CASE_SNAKE`, ... bound to each convention."""
    return {f"CASE_{case.name}": case for case in CASES}


# Declaration kinds a model can carry; exposed as `KIND_<NAME>` constants
MODEL_KINDS = ("class", "dataObject", "enum", "module", "proxy", "method")


def kind_vars() -> Dict[str, str]:
    return {f"KIND_{SNAKE.format(kind).upper()}": kind for kind in MODEL_KINDS}


class TypeNameTranslator:
    """
    Maps a qualified type name into a generator-specific package.

    `translate("io.acme", "io.acme.api.Foo")` for generator `rx` gives
    `io.acme.rx.api.Foo`: the generator name is inserted right after the
    module package. Names outside the module package are left unchanged.
    """

    def __init__(self, generator_name: str):
        self.generator_name = generator_name

    def translate(self, module_package: str, qualified_name: str) -> str:
        if not module_package:
            return qualified_name
        if qualified_name == module_package:
            return f"{module_package}.{self.generator_name}"
        prefix = module_package + "."
        if qualified_name.startswith(prefix):
            return f"{module_package}.{self.generator_name}.{qualified_name[len(prefix):]}"
        return qualified_name


def translator_vars(generator_name: str) -> Dict[str, object]:
    """Per-generator naming-convention variables."""
    return {
        "typeNameTranslator": TypeNameTranslator(generator_name),
        "generatorName": generator_name,
    }


class Helper:
    """Qualified-name utilities, bound as `helper` in every environment."""

    @staticmethod
    def get_simple_name(qualified_name: str) -> str:
        return qualified_name.rsplit(".", 1)[-1]

    @staticmethod
    def get_package_name(qualified_name: str) -> str:
        if "." not in qualified_name:
            return ""
        return qualified_name.rsplit(".", 1)[0]

    @staticmethod
    def to_path(qualified_name: str) -> str:
        return qualified_name.replace(".", "/")

    @staticmethod
    def ensure_parent_dir(path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


def base_vars(model, options) -> Dict[str, object]:
    """
    Environment shared by path expressions and templates for one model:
    fixed helpers, options, model identity and the model's own values.
    """
    env = {
        "helper": Helper(),
        "options": dict(options),
        "fileSeparator": os.sep,
        "fqn": model.fqn,
        "module": model.module,
        "model": model,
    }
    env.update(model.vars)
    env.update(kind_vars())
    env.update(case_vars())
    return env
