"""
Jinja2 template engine binding.

Generator templates are looked up on the same search path as manifests
(directories first, then packages). Each generator gets a `Template`
handle resolved once at load time.
"""

from pathlib import Path
from typing import Iterable, Mapping

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
)

from ..naming import CASES, base_vars


def _simple_name(value: str) -> str:
    """Qualified name -> simple name."""
    return value.rsplit(".", 1)[-1]


def _package_name(value: str) -> str:
    """Qualified name -> package part ("" for the default package)."""
    return value.rsplit(".", 1)[0] if "." in value else ""


def build_environment(search_path: Iterable = (), packages: Iterable[str] = ()) -> Environment:
    """Create the Jinja environment used to resolve generator templates."""
    loaders = [FileSystemLoader(str(Path(p))) for p in search_path]
    loaders += [PackageLoader(pkg, "") for pkg in packages]
    env = Environment(
        loader=ChoiceLoader(loaders),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["simple_name"] = _simple_name
    env.filters["package_name"] = _package_name
    for case in CASES:
        env.filters[case.name.lower()] = case.format
    return env


class Template:
    """
    Renderable template bound to one template file.

    `render(model, variables)` exposes the model, its named values, the
    fixed helpers and the option map, then the per-call `variables` on top.
    """

    def __init__(self, env: Environment, filename: str, options: Mapping[str, str] = None):
        self.filename = filename
        self.options = dict(options or {})
        self._template = env.get_template(filename)

    def render(self, model, variables: Mapping = None) -> str:
        context = base_vars(model, self.options)
        context.update(variables or {})
        return self._template.render(**context)

    def __repr__(self):
        return f"Template({self.filename!r})"
