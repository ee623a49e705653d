"""Server CLI command for the HTTP API."""

import logging

import typer
import uvicorn

from spawnerskills.api import create_app
from spawnerskills.core.context import SharedContext
from spawnerskills.core.exceptions import SkillError
from spawnerskills.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def server_command(
    ctx: typer.Context,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Start the read-only HTTP API."""
    config = ctx.obj.get("config")

    # Enable console logging for server mode
    setup_logging(config, console_output=True)

    host = host or config.api.host
    port = port or config.api.port

    typer.echo("Starting spawner-skills server...")
    typer.echo(f"Skills path: {config.skills_path}")

    try:
        context = SharedContext(config)
    except SkillError as e:
        typer.secho(f"Failed to load skills: {e}", fg="red", err=True)
        raise typer.Exit(1)

    typer.echo(f"Loaded {len(context.catalog.store)} skill(s)")
    logger.info(f"Serving on http://{host}:{port}")
    uvicorn.run(create_app(context), host=host, port=port, log_config=None)
