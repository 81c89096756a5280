"""
StateToken Command-Line Interface

Provides commands to run the StateToken server and inspect its configuration.
"""

import sys
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import uvicorn
from pydantic import ValidationError

from statetoken import __version__
from statetoken.app import create_app
from statetoken.auth.exceptions import KeyGenerationError
from statetoken.core.config_manager import ConfigManager, StateTokenConfig
from statetoken.core.logging_config import setup_logging


def _load_config(config: Optional[Path], overrides: Dict[str, Any]) -> StateTokenConfig:
    try:
        return ConfigManager().load(
            config_file=str(config) if config else None,
            cli_overrides=overrides,
        )
    except (ValidationError, ValueError, FileNotFoundError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(2)


@click.group()
@click.version_option(version=__version__, prog_name="statetoken")
@click.pass_context
def cli(ctx):
    """
    StateToken - signed state token service

    Issues and validates short-lived tokens bound to this server.
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: from config, 127.0.0.1)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: from config, 8000)")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level",
)
@click.option("--ttl-minutes", default=None, type=float, help="Token lifetime in minutes")
def start(
    host: Optional[str],
    port: Optional[int],
    config: Optional[Path],
    log_level: Optional[str],
    ttl_minutes: Optional[float],
):
    """
    Start the StateToken server.

    Examples:
        statetoken start
        statetoken start --port 8080
        statetoken start --config config.yaml --log-level DEBUG
    """
    overrides: Dict[str, Any] = {}
    if host:
        overrides.setdefault("server", {})["host"] = host
    if port:
        overrides.setdefault("server", {})["port"] = port
    if log_level:
        overrides.setdefault("logging", {})["level"] = log_level.upper()
    if ttl_minutes is not None:
        overrides.setdefault("token", {})["ttl_minutes"] = ttl_minutes

    settings = _load_config(config, overrides)

    setup_logging(settings.logging)
    logger = logging.getLogger("statetoken.cli")

    click.echo(f"Starting StateToken v{__version__}")
    click.echo(f"Host: {settings.server.host}:{settings.server.port}")
    click.echo(f"Issuer: {settings.token.issuer}")
    click.echo()

    try:
        app = create_app(settings)
    except (KeyGenerationError, ValueError) as e:
        logger.critical(f"Cannot start the token service: {e}")
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)

    try:
        uvicorn.run(
            app,
            host=settings.server.host,
            port=settings.server.port,
            log_level=settings.logging.level.lower(),
            access_log=True,
        )
    except KeyboardInterrupt:
        click.echo("\nShutting down StateToken...")


@cli.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
def config(config: Optional[Path]):
    """Show the effective configuration."""
    settings = _load_config(config, {})
    click.echo(json.dumps(settings.model_dump(), indent=2))


@cli.command()
def version():
    """Show StateToken version."""
    click.echo(f"StateToken version {__version__}")


def main():
    """Entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
