"""CLI entry point for ocp-codegen."""

import logging
from pathlib import Path

import click

from ocp_codegen import __version__
from ocp_codegen.config import GeneratorOptions
from ocp_codegen.errors import CodegenError, ValidationError
from ocp_codegen.generator.writer import ArtifactWriter
from ocp_codegen.pipeline import emit_model
from ocp_codegen.schema.loader import load_document
from ocp_codegen.schema.validator import build_model


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("schema_path", required=False, type=click.Path(path_type=Path))
@click.option("-o", "--output", default=".", show_default=True, envvar="OCP_CODEGEN_OUTPUT", type=click.Path(path_type=Path), help="Output directory; receives the SDK package and a .ocp-manifest file.")
@click.option("-v", "--validate", "validate_only", is_flag=True, help="Validate schema only, don't generate.")
@click.option("--package-name", default=None, envvar="OCP_CODEGEN_PACKAGE", help="Python package name of the generated SDK.")
@click.option("--prune", is_flag=True, help="Delete files from a previous run that this schema no longer generates.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, "--version", prog_name="ocp-codegen", message="%(prog)s v%(version)s")
@click.pass_context
def main(ctx: click.Context, schema_path: Path | None, output: Path, validate_only: bool, package_name: str | None, prune: bool, debug: bool):
    """Open Config Protocol SDK generator.

    Reads an OCP schema (JSON or YAML) and writes a Python client SDK.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if schema_path is None:
        click.echo("Error: No schema file specified\n", err=True)
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)

    options = GeneratorOptions(package_name=package_name, prune=prune)
    schema_path = schema_path.resolve()

    try:
        click.echo(f"Validating {schema_path}...")
        model = build_model(load_document(schema_path))
        click.echo("Schema is valid.")
        if validate_only:
            return

        artifacts = emit_model(model, options)
        output_root = output.resolve()
        written = ArtifactWriter(output_root, prune=options.prune).write(artifacts)
    except ValidationError as e:
        click.echo("Validation errors:", err=True)
        for violation in e.violations:
            click.echo(f"  - {violation}", err=True)
        ctx.exit(1)
    except CodegenError as e:
        raise click.ClickException(str(e)) from e

    for file_path in written:
        click.echo(f"  Created {file_path}")
    click.echo(f"\nSDK generated in {output_root}")
