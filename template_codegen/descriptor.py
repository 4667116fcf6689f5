"""Generator descriptors: one declarative generator, resolved and compiled."""

from dataclasses import dataclass

from .expressions import PathExpression


@dataclass(frozen=True)
class GeneratorDescriptor:
    """
    Immutable definition of one generator.

    Attributes:
        name: Generator name (the manifest's module name).
        kind: Model kind this generator applies to.
        incremental: Whether contributions accumulate with other generators'
            in a shared output instead of replacing them.
        path_expr: Compiled output-path expression.
        template: Resolved template handle.
        template_filename: Template identity the generator was deduplicated on.
    """
    name: str
    kind: str
    incremental: bool
    path_expr: PathExpression
    template: object
    template_filename: str

    def applies_to(self, model) -> bool:
        return self.kind == model.kind
