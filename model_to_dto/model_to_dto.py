import json
import sys
from pathlib import Path

import click

from .cli_utils import collect_source_files, reconstruct_command_line
from .logging import configure_logging, get_logger
from .pipeline import AtomicWriter, DtoGenerator, GeneratorConfig, OutputMode, OutputWriteError

logger = get_logger("cli")


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite the output file if it exists")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every generation step")
@click.option(
    "--fail-on-error",
    is_flag=True,
    default=False,
    help="Exit with status 1 when any declaration produced a diagnostic",
)
@click.argument("sources", nargs=-1, required=True, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
def model_to_dto(config, force, verbose, fail_on_error, sources, output):
    configure_logging(verbose=verbose)

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flag overrides the config file
    if force:
        config.output.mode = OutputMode.FORCE

    output = Path(output)
    if output.is_dir():
        output = output / config.output_file_name

    paths = collect_source_files(sources, output)
    try:
        generator = DtoGenerator(config)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    declarations, diagnostics = generator.read_sources(paths)

    result = generator.run(
        declarations,
        sources=[path.name for path in paths],
        command_line=reconstruct_command_line(model_to_dto),
    )
    diagnostics.extend(result.diagnostics)

    for diagnostic in diagnostics:
        click.echo(diagnostic.format(), err=True)

    writer = AtomicWriter()
    validate = config.output.validate_before_write
    try:
        if config.output.mode == OutputMode.FORCE:
            if config.output.atomic_write:
                writer.write(output, result.source, validate)
            else:
                output.write_text(result.source, encoding="utf-8")
        else:
            writer.write_if_not_exists(output, result.source, validate)
    except (FileExistsError, OutputWriteError) as e:
        raise click.ClickException(str(e)) from e

    logger.info("Wrote %s", output)

    if diagnostics and fail_on_error:
        sys.exit(1)
