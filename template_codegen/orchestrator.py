"""
Generation pipeline.

One `Orchestrator` lives for one invocation (one multi-pass batch). The
driver calls `process()` once per pass with the models discovered in that
pass, then `process(terminal=True)` once at the end:

    INTERMEDIATE  every model x matching generator is evaluated, classified
                  and routed to a unit table; the pass's source units are
                  rendered and written right away so later passes can see
                  the generated types.
    TERMINAL      resource units, then generic-file units, accumulated
                  over the whole batch are rendered and written.

Failures never escape: they are reported on the diagnostics channel
against the offending declaration, and only that model (path evaluation)
or that unit (rendering) is abandoned.
"""

from enum import Enum
from typing import Iterable, List, Optional

from .classifier import OutputKind, SOURCE_SUFFIX, classify, source_type_name
from .diagnostics import DiagnosticCollector, Severity
from .errors import GenerationError
from .gen_logging import declaration_extra, get_logger
from .manifest import ManifestLoader
from .naming import base_vars, translator_vars
from .options import CodegenOptions
from .sinks import FileSystemSink, ResourceLocation
from .unit import UnitTable

logger = get_logger(__name__)


class PassState(Enum):
    INTERMEDIATE = "intermediate"
    TERMINAL = "terminal"


class Orchestrator:
    """
    Args:
        options: Raw option map (see `template_codegen.options`).
        source_sink / resource_sink: Output sinks; a missing sink drops that
            kind of output with a warning.
        diagnostics: Channel with a `report(severity, message, declaration)` method.
        loader: Generator source; defaults to a `ManifestLoader` over
            `search_path` and `packages`.
        generators: Pre-built descriptors, bypassing manifest loading.
    """

    def __init__(self, options=None, *, source_sink=None, resource_sink=None,
                 diagnostics=None, loader=None, generators=None,
                 search_path: Iterable = (), packages: Iterable[str] = (),
                 source_suffix: str = SOURCE_SUFFIX):
        if isinstance(options, CodegenOptions):
            self.options = options
        else:
            self.options = CodegenOptions.from_options(options)
        self.source_sink = source_sink
        self.resource_sink = resource_sink
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.loader = loader or ManifestLoader(
            self.diagnostics, self.options, search_path=search_path, packages=packages,
        )
        self.source_suffix = source_suffix
        self.state = PassState.INTERMEDIATE

        self._generators = list(generators) if generators is not None else None
        self._configuration_checked = False
        self.relocations = dict(self.options.relocations)
        self.source_units = UnitTable()
        self.resource_units = UnitTable()
        self.generic_units = UnitTable()

    # ------------------------------------------------------------------
    # Generators

    @property
    def generators(self) -> List:
        """Generator list, loaded on first use and kept for the invocation."""
        if self._generators is None:
            self._generators = self.loader.load()
        return self._generators

    def _check_configuration(self) -> None:
        if self._configuration_checked:
            return
        self._configuration_checked = True
        for error in self.options.check_output_directory():
            logger.error(str(error))
            self.diagnostics.report(Severity.ERROR, str(error))

    # ------------------------------------------------------------------
    # Passes

    def process(self, models: Iterable = (), terminal: bool = False, errors_raised: bool = False) -> None:
        """
        Run one pass.

        Args:
            models: `(key, model)` pairs or bare models discovered in this pass.
            terminal: True for the final pass of the batch.
            errors_raised: The driver already saw errors this pass; generation
                is skipped for it.
        """
        if self.state is PassState.TERMINAL:
            logger.warning("Terminal pass already processed, ignoring")
            return
        self._check_configuration()
        if terminal:
            self.state = PassState.TERMINAL
            self._write_resources()
            self._write_generic_files()
            return

        generators = self.generators
        if errors_raised:
            return

        self.source_units = UnitTable()
        for entry in models:
            key, model = entry if isinstance(entry, tuple) else (entry.declaration, entry)
            self._route(key, model, generators)
        self._write_sources()

    def run(self, provider, passes: int = 1) -> None:
        """Drive a whole batch from a model provider: `passes` intermediate passes, then terminal."""
        for _ in range(passes):
            self.process(provider.get_models())
        self.process(terminal=True)

    # ------------------------------------------------------------------
    # Routing

    def _route(self, key, model, generators) -> None:
        try:
            variables = base_vars(model, self.options.raw)
            for generator in generators:
                if not generator.applies_to(model):
                    continue
                env = dict(variables)
                env.update(translator_vars(generator.name))
                try:
                    raw_path = generator.path_expr.evaluate(env)
                except GenerationError:
                    raise
                except Exception as e:
                    raise GenerationError(model.declaration, str(e)) from e
                if raw_path is None:
                    continue
                self._assign(model, generator, raw_path)
        except GenerationError as e:
            self.report_generation_error(e)
        except Exception as e:
            self.report_exception(e, getattr(model, "declaration", key))

    def _assign(self, model, generator, raw_path: str) -> None:
        kind, path = classify(raw_path, generator.name, self.relocations, self.source_suffix)
        if kind is OutputKind.SOURCE:
            type_name = source_type_name(path, self.source_suffix)
            # Don't regenerate a type the compilation already has
            if self.source_sink is not None and self.source_sink.exists(type_name):
                logger.debug(f"Skipping {type_name}: already exists", extra=declaration_extra(model.declaration))
                return
            self.source_units.assign(type_name, model, generator)
        elif kind is OutputKind.RESOURCE:
            self.resource_units.assign(path, model, generator)
        else:
            self.generic_units.assign(path, model, generator)
        logger.debug(
            f"Assigned {kind.value} output {path} ({generator.name})",
            extra=declaration_extra(model.declaration),
        )

    # ------------------------------------------------------------------
    # Writing

    def _render(self, unit) -> Optional[str]:
        try:
            return unit.render()
        except GenerationError as e:
            self.report_generation_error(e)
        except Exception as e:
            self.report_exception(e, unit.first_model.declaration)
        return None

    def _write_sources(self) -> None:
        for unit in self.source_units.values():
            content = self._render(unit)
            if not content:
                continue
            if self.source_sink is None:
                logger.warning(f"No source sink configured, dropping {unit.output_path}")
                continue
            try:
                self.source_sink.write(unit.output_path, content)
            except Exception as e:
                self.report_exception(e, unit.first_model.declaration)
                continue
            logger.info(f"Generated model {unit.first_model.fqn}: {unit.output_path}")

    def _write_resources(self) -> None:
        for unit in self.resource_units.values():
            content = self._render(unit)
            if not content:
                continue
            if self.resource_sink is None:
                logger.warning(f"No resource sink configured, dropping {unit.output_path}")
                continue
            try:
                self.resource_sink.write(ResourceLocation.PRIMARY, unit.output_path, content)
                if self.resource_sink.is_distinct(ResourceLocation.COMPANION, ResourceLocation.PRIMARY):
                    self.resource_sink.write(ResourceLocation.COMPANION, unit.output_path, content)
            except Exception as e:
                self.report_exception(e, unit.first_model.declaration)
                continue
            logger.info(f"Generated model {unit.first_model.fqn}: {unit.output_path}")

    def _write_generic_files(self) -> None:
        if self.options.output_directory is None:
            return
        if not self.options.output_usable:
            logger.warning(f"Skipping {len(self.generic_units)} file(s): output directory is unusable")
            return
        sink = FileSystemSink(self.options.output_directory)
        for unit in self.generic_units.values():
            content = self._render(unit)
            if not content:
                continue
            try:
                sink.write(unit.output_path, content)
            except Exception as e:
                self.report_exception(e, unit.first_model.declaration)
                continue
            logger.info(f"Generated model {unit.first_model.fqn}: {unit.output_path}")

    # ------------------------------------------------------------------
    # Reporting

    def report_generation_error(self, e: GenerationError) -> None:
        msg = f"Could not generate model for {e.declaration}: {e.msg}"
        logger.error(msg, exc_info=e, extra=declaration_extra(e.declaration))
        self.diagnostics.report(Severity.ERROR, msg, e.declaration)

    def report_exception(self, e: Exception, declaration) -> None:
        msg = f"Could not generate element for {declaration}: {e}"
        logger.error(msg, exc_info=e, extra=declaration_extra(declaration))
        self.diagnostics.report(Severity.ERROR, msg, declaration)
