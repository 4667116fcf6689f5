"""
Logging for the generation pipeline.

Modules log through `get_logger(__name__)`, which maps every module onto
the "codegen" hierarchy. Records may carry a `declaration` extra; the
console formatter appends it unless the message already names it:

    [DEBUG] Skipping a.b.FooImpl: already exists  <- a.b.Foo

Handlers are installed by the CLI only.
"""

import logging
import sys

_LOGGER_NAME = "codegen"


def get_logger(name: str = None) -> logging.Logger:
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "template_codegen.orchestrator" -> "codegen.orchestrator"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def declaration_extra(declaration) -> dict:
    """`extra=` payload tagging a record with the element it concerns."""
    return {"declaration": declaration}


def configure_gen_logging(verbose: bool = False, quiet: bool = False) -> None:
    """DEBUG shows every assignment, INFO loaded generators and written files, WARNING problems only."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    # A second call (several CLI invocations in one process) only changes levels
    for handler in root_logger.handlers:
        handler.setLevel(level)
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)


class _GenFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        text = f"[{record.levelname}] {record.getMessage()}"
        declaration = getattr(record, "declaration", None)
        if declaration is not None and str(declaration) not in text:
            text += f"  <- {declaration}"
        if record.exc_info and record.levelno <= logging.DEBUG:
            text += "\n" + self.formatException(record.exc_info)
        return text
