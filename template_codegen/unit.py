"""
Generation units: everything destined for one output artifact.

A unit collects (model, generator) assignments. A non-incremental generator
owns its output, so appending one of its assignments starts the unit over;
incremental generators accumulate side by side and share the unit's
session mapping while rendering.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import GenerationError
from .naming import translator_vars
from .gen_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Assignment:
    """A model paired with the generator invoked for it."""
    model: Any
    generator: Any


@dataclass
class GenerationUnit:
    output_path: str
    assignments: List[Assignment] = field(default_factory=list)
    session: Dict[str, Any] = field(default_factory=dict)

    def add(self, model, generator) -> Assignment:
        if not generator.incremental:
            self.assignments.clear()
        assignment = Assignment(model, generator)
        self.assignments.append(assignment)
        return assignment

    def __len__(self):
        return len(self.assignments)

    @property
    def first_model(self):
        return self.assignments[0].model

    def render(self) -> str:
        """
        Render every assignment, ordered by the model's simple declared name,
        and concatenate the non-empty fragments.

        Raises:
            GenerationError: when any assignment fails; the whole unit is lost.
        """
        self.assignments.sort(key=lambda a: a.model.declaration.simple_name)
        size = len(self.assignments)
        index = 0
        parts = []
        for assignment in self.assignments:
            generator = assignment.generator
            variables = translator_vars(generator.name)
            if generator.incremental:
                variables["incrementalIndex"] = index
                variables["incrementalSize"] = size
                variables["session"] = self.session
                index += 1
            try:
                part = generator.template.render(assignment.model, variables)
            except GenerationError:
                raise
            except Exception as e:
                raise GenerationError(assignment.model.declaration, str(e)) from e
            if part:
                parts.append(part)
        logger.debug(f"Rendered {self.output_path} from {size} assignment(s)")
        return "".join(parts)


class UnitTable(dict):
    """Units keyed by output path, created on first assignment."""

    def assign(self, path: str, model, generator) -> GenerationUnit:
        unit = self.get(path)
        if unit is None:
            unit = self[path] = GenerationUnit(path)
        unit.add(model, generator)
        return unit
