"""
Output-path expressions.

Manifest `filename` entries are Jinja2 expressions evaluated against the
model's variable environment, e.g. `"resources/" ~ helper.to_path(fqn) ~ ".json"`
or `fqn ~ "Impl.java" if kind == "class" else none`.
"""

from jinja2 import StrictUndefined, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from .errors import ExpressionError
from .naming import CASES

_env = SandboxedEnvironment(undefined=StrictUndefined)
for _case in CASES:
    _env.filters[_case.name.lower()] = _case.format


class PathExpression:
    """A compiled output-path expression."""

    def __init__(self, source: str):
        self.source = source
        try:
            self._compiled = _env.compile_expression(source, undefined_to_none=False)
        except TemplateSyntaxError as e:
            raise ExpressionError(f"Invalid expression {source!r}: {e}") from e

    def evaluate(self, variables):
        """Return the evaluated path, or None when the generator opts out."""
        value = self._compiled(**variables)
        if value is None or value is False:
            return None
        value = str(value)
        return value or None

    def __repr__(self):
        return f"PathExpression({self.source!r})"


def compile_expression(source: str) -> PathExpression:
    return PathExpression(source)
