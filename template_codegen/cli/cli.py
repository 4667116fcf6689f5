from pathlib import Path
import click

from datetime import date
from rich import pretty
from rich.console import Console
from rich.table import Table

from template_codegen.diagnostics import DiagnosticCollector, Severity
from template_codegen.gen_logging import configure_gen_logging
from template_codegen.language import DeclarationFileProvider, TextXError
from template_codegen.manifest import ManifestLoader
from template_codegen.options import CodegenOptions, GENERATORS_OPTION, OUTPUT_OPTION
from template_codegen.orchestrator import Orchestrator
from template_codegen.sinks import DirectoryResourceSink, DirectorySourceSink

pretty.install()
console = Console()


def _today() -> str:
    return date.today().strftime('%Y-%m-%d')


def parse_option_pairs(pairs) -> dict:
    """`("a=1", "b=x=y")` -> `{"a": "1", "b": "x=y"}`."""
    options = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="-O")
        options[key.strip()] = value
    return options


def build_options(option_pairs, output, generators) -> dict:
    options = parse_option_pairs(option_pairs)
    if output is not None:
        options[OUTPUT_OPTION] = output
    if generators is not None:
        options[GENERATORS_OPTION] = generators
    return options


def print_diagnostics(diagnostics: DiagnosticCollector):
    styles = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.NOTE: "blue"}
    for diagnostic in diagnostics.diagnostics:
        console.print(f"[{_today()}] {diagnostic}", style=styles[diagnostic.severity], markup=False, soft_wrap=True)


def loader_options(function):
    """Search path, option and logging flags shared by every command."""
    decorators = [
        click.option("--search-path", "-s", "search_path", multiple=True,
                     type=click.Path(file_okay=False, path_type=Path),
                     help="Directory holding codegen.json manifests and templates (repeatable)."),
        click.option("--package", "-p", "packages", multiple=True,
                     help="Installed package shipping a codegen.json manifest (repeatable)."),
        click.option("--generators", "generators", default=None,
                     help="Comma-separated generator name patterns (codegen.generators)."),
        click.option("-O", "option_pairs", multiple=True, metavar="KEY=VALUE",
                     help="Extra option passed to the pipeline and templates (repeatable)."),
        click.option("--verbose", "-v", is_flag=True, help="Debug logging."),
        click.option("--quiet", "-q", is_flag=True, help="Warnings and errors only."),
    ]
    for decorator in reversed(decorators):
        function = decorator(function)
    return function


@click.group()
@click.pass_context
def cli(context):
    context.ensure_object(dict)


@cli.command("generators", help="List the generators found on the search path.")
@click.pass_context
@loader_options
def generators_cmd(context, search_path, packages, generators, option_pairs, verbose, quiet):
    configure_gen_logging(verbose=verbose, quiet=quiet)
    options = CodegenOptions.from_options(build_options(option_pairs, None, generators))
    diagnostics = DiagnosticCollector()
    loaded = ManifestLoader(diagnostics, options, search_path=search_path, packages=packages).load()

    table = Table(title="Code generators")
    for column in ("Name", "Kind", "Incremental", "Template", "Path expression"):
        table.add_column(column, no_wrap=column in ("Name", "Kind"))
    for generator in loaded:
        table.add_row(
            generator.name,
            generator.kind,
            "yes" if generator.incremental else "no",
            generator.template_filename,
            generator.path_expr.source,
        )
    console.print(table)
    print_diagnostics(diagnostics)
    context.exit(1 if diagnostics.has_errors else 0)


@cli.command("validate", help="Parse declaration files and report the models found.")
@click.pass_context
@click.argument("model_paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def validate(context, model_paths):
    try:
        models = DeclarationFileProvider(model_paths).models
    except TextXError as e:
        console.print(f"[{_today()}] Validation failed with error(s): {e}", style="red", markup=False, soft_wrap=True)
        context.exit(1)
    else:
        console.print(f"[{_today()}] {len(models)} declaration(s) parsed successfully!", style='green')
        for model in models:
            console.print(f"  {model.kind:<12} {model.fqn}", markup=False, soft_wrap=True)
        context.exit(0)


@cli.command("generate", help="Render every declaration through the loaded generators.")
@click.pass_context
@click.argument("model_paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@loader_options
@click.option("--output", "output", default=None,
              help="Root for plain generated files (codegen.output).")
@click.option("--source-output", default="generated/sources", show_default=True,
              help="Root for generated sources.")
@click.option("--resource-output", default="generated/resources", show_default=True,
              help="Root for generated resources.")
@click.option("--companion-output", default=None,
              help="Second root receiving a copy of every generated resource.")
def generate(context, model_paths, search_path, packages, generators, option_pairs, verbose, quiet,
             output, source_output, resource_output, companion_output):
    configure_gen_logging(verbose=verbose, quiet=quiet)
    diagnostics = DiagnosticCollector()
    try:
        options = build_options(option_pairs, output, generators)
        provider = DeclarationFileProvider(model_paths)
        models = provider.models

        orchestrator = Orchestrator(
            options,
            source_sink=DirectorySourceSink(source_output, known=[m.fqn for m in models]),
            resource_sink=DirectoryResourceSink(resource_output, companion_output),
            diagnostics=diagnostics,
            search_path=search_path,
            packages=packages,
        )
        orchestrator.run(provider)
    except TextXError as e:
        console.print(f"[{_today()}] Generate failed with error(s): {e}", style="red", markup=False, soft_wrap=True)
        context.exit(1)

    print_diagnostics(diagnostics)
    if diagnostics.has_errors:
        console.print(f"[{_today()}] Generation finished with {len(diagnostics.errors)} error(s)", style="red")
        context.exit(1)
    console.print(f"[{_today()}] Generation complete", style="green")
    context.exit(0)


def main():
    cli(prog_name="template-codegen")
