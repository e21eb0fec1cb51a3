"""
Covenant Validator CLI.

Commands:
    covenant-validator validate METADATA_FILE INSTANTIATION_FILE

The markdown report goes to stdout, logs go to stderr. The exit code is
non-zero when any check failed or the run could not complete.
"""

import sys
from typing import Optional

import click

from covenant_validator import __version__
from covenant_validator.clients import Collaborators
from covenant_validator.config import get_config
from covenant_validator.errors import CovenantValidatorError
from covenant_validator.logging_setup import configure_logging
from covenant_validator.metadata import load_instantiation, load_metadata
from covenant_validator.report import render_markdown_table
from covenant_validator.runner import validate_covenant


@click.group()
@click.version_option(version=__version__, prog_name="covenant-validator")
def main():
    """Covenant Validator - pre-deployment checks for covenant instantiation messages."""
    pass


@main.command()
@click.argument("metadata_file", type=click.Path(dir_okay=False))
@click.argument("instantiation_file", type=click.Path(dir_okay=False))
@click.option("--release", "-r", help="Covenants release tag whose code ids are expected")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Log level (default from COVENANT_VALIDATOR_LOG_LEVEL)",
)
def validate(
    metadata_file: str,
    instantiation_file: str,
    release: Optional[str],
    log_level: Optional[str],
):
    """Validate a covenant instantiation message against live chain data.

    METADATA_FILE is a TOML file with a [covenant] table; INSTANTIATION_FILE
    is the JSON instantiation message.

    Example:
        covenant-validator validate covenant.toml instantiate.json --release v0.1.1
    """
    config = get_config()
    logger = configure_logging(log_level or config.log_level, config.log_format)

    try:
        metadata = load_metadata(metadata_file)
        payload = load_instantiation(instantiation_file)
        with Collaborators.from_config(config) as services:
            ctx = validate_covenant(
                metadata, payload, services, release_tag=release or config.release_tag
            )
    except CovenantValidatorError as e:
        logger.error("Covenant validation aborted: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(render_markdown_table(ctx), nl=False)
    if ctx.has_errors():
        click.echo("Covenant validation failed", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
