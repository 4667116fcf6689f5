"""
Declarations language: a small textX DSL describing models.

    declaration dataObject com.acme.Order in com.acme {
        table: "orders";
        fields: ["id", "total"];
        cached: true;
    }

    declaration method com.acme.Order.total member of com.acme.Order

Each declaration becomes one `Model`; the values block turns into the
model's named values. Build integrations that discover declarations some
other way feed `Model` objects to the pipeline directly.
"""

from pathlib import Path
from typing import Iterable, List

from textx import TextXError, metamodel_from_str

from .gen_logging import get_logger
from .model import Declaration, Model, ModelProvider

logger = get_logger(__name__)

GRAMMAR = r"""
DeclarationsModel:
    declarations*=Declaration
;

Declaration:
    'declaration' kind=ID qname=QualifiedName
    ('in' module=QualifiedName)?
    ('member' 'of' enclosing=QualifiedName)?
    ('{' values*=Value '}')?
;

Value:
    key=ID ':' (is_list?='[' items*=Scalar[','] ']' | scalar=Scalar) ';'?
;

Scalar:
    STRICTFLOAT | INT | BOOL | STRING | QualifiedName
;

QualifiedName:
    ID ('.' ID)*
;

Comment:
    /\/\/.*$/ | /#.*$/
;
"""

_metamodel = None


def get_metamodel():
    global _metamodel
    if _metamodel is None:
        _metamodel = metamodel_from_str(GRAMMAR)
    return _metamodel


def _value(node):
    if node.is_list:
        return list(node.items)
    return node.scalar


def _to_model(decl) -> Model:
    values = {value.key: _value(value) for value in decl.values}
    return Model(
        fqn=decl.qname,
        kind=decl.kind,
        module=decl.module or None,
        vars=values,
        declaration=Declaration(decl.qname, decl.enclosing or None),
    )


def build_models_str(text: str) -> List[Model]:
    """Parse declarations from a string."""
    parsed = get_metamodel().model_from_str(text)
    return [_to_model(decl) for decl in parsed.declarations]


def build_models(path) -> List[Model]:
    """
    Parse a declarations file.

    Raises:
        TextXError: syntax errors, with file location.
    """
    parsed = get_metamodel().model_from_file(str(path))
    models = [_to_model(decl) for decl in parsed.declarations]
    logger.debug(f"Parsed {len(models)} declaration(s) from {path}")
    return models


class DeclarationFileProvider(ModelProvider):
    """Models parsed from one or more declaration files, in file order."""

    def __init__(self, paths: Iterable):
        self.paths = [Path(p) for p in paths]
        self._models = None

    @property
    def models(self) -> List[Model]:
        if self._models is None:
            models = []
            for path in self.paths:
                models.extend(build_models(path))
            self._models = models
        return self._models

    def get_models(self):
        return [(model.declaration, model) for model in self.models]


__all__ = [
    "GRAMMAR",
    "TextXError",
    "get_metamodel",
    "build_models",
    "build_models_str",
    "DeclarationFileProvider",
]
