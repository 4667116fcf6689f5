"""
Invocation options.

The build step hands the pipeline a flat map of string options. The
recognized keys are:

    codegen.output            filesystem root for generic outputs
                              (legacy alias: outputDirectory)
    codegen.generators        comma-separated regular expressions; a
                              generator is kept iff its name fully matches one
                              (legacy alias: codeGenerators)
    codegen.output.<name>     relocation root for generator <name>

Every option, recognized or not, stays visible to expressions and
templates through the `options` variable.
"""

import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigurationError
from .gen_logging import get_logger

logger = get_logger(__name__)

OUTPUT_OPTION = "codegen.output"
GENERATORS_OPTION = "codegen.generators"
RELOCATION_PREFIX = "codegen.output."

_LEGACY_ALIASES = {
    OUTPUT_OPTION: "outputDirectory",
    GENERATORS_OPTION: "codeGenerators",
}


def _lookup(options: Mapping[str, str], key: str) -> Optional[str]:
    value = options.get(key)
    if value is None:
        legacy = _LEGACY_ALIASES[key]
        value = options.get(legacy)
        if value is not None:
            logger.warning(f"Please use '{key}' option instead of '{legacy}' option")
    return value


class CodegenOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    raw: Dict[str, str] = Field(default_factory=dict)
    output_directory: Optional[Path] = None
    generator_patterns: Optional[List[re.Pattern]] = None
    relocations: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Mapping[str, str] = None) -> "CodegenOptions":
        options = dict(options or {})

        output = _lookup(options, OUTPUT_OPTION)
        patterns = _lookup(options, GENERATORS_OPTION)

        return cls(
            raw=options,
            output_directory=Path(output) if output is not None else None,
            generator_patterns=(
                [re.compile(p.strip()) for p in patterns.split(",")]
                if patterns is not None else None
            ),
            relocations={
                key[len(RELOCATION_PREFIX):]: value
                for key, value in options.items()
                if key.startswith(RELOCATION_PREFIX)
            },
        )

    def accepts(self, generator_name: str) -> bool:
        """Name filter; everything passes when no patterns are configured."""
        if self.generator_patterns is None:
            return True
        return any(p.fullmatch(generator_name) for p in self.generator_patterns)

    def check_output_directory(self) -> List[ConfigurationError]:
        """Problems with the configured output root (empty when usable or unset)."""
        errors = []
        if self.output_directory is None:
            return errors
        if not self.output_directory.exists():
            errors.append(ConfigurationError(f"Output directory {self.output_directory} does not exist"))
        if not self.output_directory.is_dir():
            errors.append(ConfigurationError(f"Output directory {self.output_directory} is not a directory"))
        return errors

    @property
    def output_usable(self) -> bool:
        return self.output_directory is not None and self.output_directory.is_dir()
