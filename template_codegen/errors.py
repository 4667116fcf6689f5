"""Error types raised and reported by the generation pipeline."""


class CodegenError(Exception):
    """Base class for every pipeline error."""


class ManifestError(CodegenError):
    """A generator manifest could not be read, parsed or validated."""

    def __init__(self, locator, msg):
        super().__init__(f"Could not load code generator {locator}: {msg}")
        self.locator = locator
        self.msg = msg


class ExpressionError(CodegenError):
    """An output-path expression failed to compile."""


class ConfigurationError(CodegenError):
    """An option value is unusable (e.g. the output root is not a directory)."""


class GenerationError(CodegenError):
    """
    Expression evaluation or template rendering failed for one declaration.

    Carries the offending declaration so the failure can be reported
    against it.
    """

    def __init__(self, declaration, msg):
        super().__init__(msg)
        self.declaration = declaration
        self.msg = msg
