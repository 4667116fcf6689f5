"""
Template-driven code generation pipeline.

Generators are declared in `codegen.json` manifests; each one pairs a
Jinja2 output-path expression with a template. The `Orchestrator` routes
models through them pass by pass and writes the results to source,
resource and plain-file sinks.
"""

from .classifier import OutputKind, classify
from .descriptor import GeneratorDescriptor
from .diagnostics import Diagnostic, DiagnosticCollector, Severity
from .errors import (
    CodegenError,
    ConfigurationError,
    ExpressionError,
    GenerationError,
    ManifestError,
)
from .manifest import ManifestLoader
from .model import Declaration, Model, ModelProvider, StaticModelProvider
from .options import CodegenOptions
from .orchestrator import Orchestrator, PassState
from .unit import Assignment, GenerationUnit

__all__ = [
    "OutputKind",
    "classify",
    "GeneratorDescriptor",
    "Diagnostic",
    "DiagnosticCollector",
    "Severity",
    "CodegenError",
    "ConfigurationError",
    "ExpressionError",
    "GenerationError",
    "ManifestError",
    "ManifestLoader",
    "Declaration",
    "Model",
    "ModelProvider",
    "StaticModelProvider",
    "CodegenOptions",
    "Orchestrator",
    "PassState",
    "Assignment",
    "GenerationUnit",
]
