"""
Semantic models consumed by the pipeline.

A model describes one annotated declaration. The pipeline only relies on
its qualified name, owning module, kind tag, declaration handle and the
named values handed to templates; everything else is up to the provider.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Declaration:
    """Handle on the source declaration a model was built from."""
    qualified_name: str
    enclosing: Optional[str] = None

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def display_name(self) -> str:
        """Name used in diagnostics; members read as `Enclosing#member`."""
        if self.enclosing:
            return f"{self.enclosing}#{self.simple_name}"
        return self.qualified_name

    def __str__(self):
        return self.display_name


@dataclass
class Model:
    """One declaration's semantic model."""
    fqn: str
    kind: str
    module: Optional[str] = None
    vars: Dict[str, Any] = field(default_factory=dict)
    declaration: Optional[Declaration] = None

    def __post_init__(self):
        if self.declaration is None:
            self.declaration = Declaration(self.fqn)

    @property
    def simple_name(self) -> str:
        return self.declaration.simple_name

    def __getattr__(self, name):
        # Expose named values as attributes so templates can write `model.foo`
        values = self.__dict__.get("vars") or {}
        if name in values:
            return values[name]
        raise AttributeError(name)


class ModelProvider:
    """
    Source of models for one processing pass.

    Subclasses override `get_models`, which is called once per pass and
    returns `(key, model)` pairs in discovery order.
    """

    def get_models(self) -> Iterable[Tuple[Any, Model]]:
        raise NotImplementedError


class StaticModelProvider(ModelProvider):
    """Provider over a fixed, in-memory list of models."""

    def __init__(self, models: List[Model]):
        self.models = list(models)

    def get_models(self):
        return [(model.declaration, model) for model in self.models]
