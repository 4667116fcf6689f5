"""Classification of evaluated output paths into source, resource or generic outputs."""

from enum import Enum
from typing import Mapping, Tuple

SOURCE_SUFFIX = ".java"
RESOURCE_PREFIX = "resources/"


class OutputKind(Enum):
    SOURCE = "source"
    RESOURCE = "resource"
    GENERIC = "generic"


def classify(
    raw_path: str,
    generator_name: str,
    relocations: Mapping[str, str] = None,
    source_suffix: str = SOURCE_SUFFIX,
) -> Tuple[OutputKind, str]:
    """
    Decide where an evaluated relative path goes.

    Returns (kind, final_path):
        - `Foo.java` (suffix, no `/`) -> SOURCE, unchanged; when the generator
          has a relocation root it becomes GENERIC `root/Foo.java`, dots in
          the stem turning into directories (`a.b.Foo.java` -> `root/a/b/Foo.java`).
        - `resources/x/y.json` -> RESOURCE `x/y.json`.
        - anything else -> GENERIC, unchanged.
    """
    if raw_path.endswith(source_suffix) and "/" not in raw_path:
        relocation = (relocations or {}).get(generator_name)
        if relocation is not None:
            stem = raw_path[: -len(source_suffix)]
            return OutputKind.GENERIC, f"{relocation}/{stem.replace('.', '/')}{source_suffix}"
        return OutputKind.SOURCE, raw_path
    if raw_path.startswith(RESOURCE_PREFIX):
        return OutputKind.RESOURCE, raw_path[len(RESOURCE_PREFIX):]
    return OutputKind.GENERIC, raw_path


def source_type_name(path: str, source_suffix: str = SOURCE_SUFFIX) -> str:
    """`a.b.Foo.java` -> `a.b.Foo`."""
    return path[: -len(source_suffix)]
