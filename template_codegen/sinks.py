"""
Output sinks.

    SourceSink      generated sources, addressed by qualified type name
    ResourceSink    packaged resources, addressed by relative path, with a
                    primary location and an optional companion location
    FileSystemSink  plain files under an output root

The directory-backed implementations below are what the CLI uses; build
integrations plug in their own.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Set

from .classifier import SOURCE_SUFFIX
from .gen_logging import get_logger

logger = get_logger(__name__)


def _under(root: Path, relative_path: str) -> Path:
    """`relative_path` nested under `root`; a leading separator is dropped."""
    path = Path(relative_path)
    if path.is_absolute():
        path = path.relative_to(path.anchor)
    target = root / path
    if not target.resolve().is_relative_to(root.resolve()):
        raise ValueError(f"{relative_path} escapes output root {root}")
    return target


def _write_text(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class SourceSink(ABC):

    @abstractmethod
    def exists(self, qualified_name: str) -> bool:
        """True when the type is already known to the current compilation."""

    @abstractmethod
    def write(self, qualified_name: str, content: str):
        """Register a generated source for `qualified_name`."""


class ResourceLocation(Enum):
    PRIMARY = "primary"
    COMPANION = "companion"


class ResourceSink(ABC):

    @abstractmethod
    def write(self, location: ResourceLocation, relative_path: str, content: str):
        pass

    @abstractmethod
    def is_distinct(self, location: ResourceLocation, other: ResourceLocation) -> bool:
        """False when both locations are the same physical place."""


class FileSystemSink:
    """Writes files under a root directory, creating parent directories."""

    def __init__(self, root):
        self.root = Path(root)

    def write(self, relative_path: str, content: str) -> Path:
        return _write_text(_under(self.root, relative_path), content)


class DirectorySourceSink(SourceSink):
    """
    Writes `a.b.Foo` to `<root>/a/b/Foo<suffix>`.

    `known` seeds the names of declarations already present in the
    compilation; every name written here is added to it.
    """

    def __init__(self, root, known: Iterable[str] = (), suffix: str = SOURCE_SUFFIX):
        self.root = Path(root)
        self.known: Set[str] = set(known)
        self.suffix = suffix

    def path_for(self, qualified_name: str) -> Path:
        return self.root / (qualified_name.replace(".", "/") + self.suffix)

    def exists(self, qualified_name):
        return qualified_name in self.known

    def write(self, qualified_name, content):
        path = _write_text(self.path_for(qualified_name), content)
        self.known.add(qualified_name)
        return path


class DirectoryResourceSink(ResourceSink):
    """Resource roots on disk; the companion root is optional."""

    def __init__(self, primary, companion: Optional[object] = None):
        self.roots = {ResourceLocation.PRIMARY: Path(primary)}
        if companion is not None:
            self.roots[ResourceLocation.COMPANION] = Path(companion)

    def write(self, location, relative_path, content):
        root = self.roots.get(location)
        if root is None:
            raise KeyError(f"No root configured for {location.value} resources")
        return _write_text(_under(root, relative_path), content)

    def is_distinct(self, location, other):
        root = self.roots.get(location)
        if root is None:
            return False
        return root.resolve() != self.roots[other].resolve()
