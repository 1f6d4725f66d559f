"""apifaults CLI.

Commands:
    demo    - Serve the demo API with uvicorn
    config  - Show the resolved pipeline options
"""

import logging
import sys
from dataclasses import asdict
from typing import Optional

import click

from . import __version__
from .config import ConfigError, PipelineOptions


def _load_options(env_file: Optional[str]) -> PipelineOptions:
    try:
        return PipelineOptions.load(env_file=env_file)
    except ConfigError as e:
        click.secho(f"Invalid configuration: {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="apifaults")
def cli():
    """Problem details for HTTP APIs."""


@cli.command('demo')
@click.option('--host', default='127.0.0.1', show_default=True, help='Bind host')
@click.option('--port', default=8000, show_default=True, type=int, help='Bind port')
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with APIFAULTS_* options')
@click.option('--log-level', default='info', show_default=True,
              type=click.Choice(['debug', 'info', 'warning', 'error']))
def demo(host: str, port: int, env_file: Optional[str], log_level: str):
    """
    Serve the demo API.

    Examples:
      apifaults demo
      apifaults demo --port 9000 --env-file .env
    """
    import uvicorn

    from .demo import create_app

    options = _load_options(env_file)
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    click.secho(f"apifaults demo on http://{host}:{port} ({options.environment})", fg="cyan")
    uvicorn.run(create_app(options), host=host, port=port, log_level=log_level)


@cli.command('config')
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with APIFAULTS_* options')
def show_config(env_file: Optional[str]):
    """Print the resolved pipeline options."""
    options = _load_options(env_file)
    for key, value in asdict(options).items():
        click.echo(f"{click.style(key, fg='green')}: {value}")


def main():
    cli()


if __name__ == "__main__":
    main()
