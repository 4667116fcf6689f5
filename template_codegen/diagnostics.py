"""Diagnostics channel: user-visible failures, attached to declarations."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .gen_logging import get_logger

logger = get_logger(__name__)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    declaration: Optional[object] = None

    def __str__(self):
        where = f" ({self.declaration})" if self.declaration is not None else ""
        return f"{self.severity.value}: {self.message}{where}"


class DiagnosticCollector:
    """Default channel: keeps every diagnostic for the driver to inspect."""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def report(self, severity: Severity, message: str, declaration=None) -> Diagnostic:
        diagnostic = Diagnostic(severity, message, declaration)
        self.diagnostics.append(diagnostic)
        logger.debug(f"[DIAGNOSTIC] {diagnostic}")
        return diagnostic

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def for_declaration(self, declaration) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.declaration == declaration]
