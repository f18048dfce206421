"""Main CLI orchestrator for arcgate."""

import getpass
import logging
import sys
from pathlib import Path

import rich_click as click
from loguru import logger as loguru_logger
from rich.console import Console

from ...application.container import ServiceContainer
from ...core.config import ArcgateConfig

# Initialize console for rich output
console = Console()


def _configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")


@click.group(name="arcgate")
@click.version_option(package_name="arcgate")
@click.option("--user", "username", envvar="ARCGATE_USER", default=getpass.getuser,
              show_default="current login", help="Principal to act as")
@click.option("--config-dir", type=click.Path(file_okay=False, path_type=Path),
              envvar="ARCGATE_CONFIG_DIR", help="Directory holding locations, principals and ownership")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, username: str, config_dir: Path, debug: bool):
    """arcgate - archive operations on a permissioned virtual filesystem."""
    _configure_logging(debug)
    config = ArcgateConfig.from_env(config_dir=config_dir)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("container", ServiceContainer(config))
    ctx.obj["username"] = username


def create_main_cli():
    """Create and configure the main CLI with all subcommands."""
    # Import subcommands here to avoid circular imports
    from .archive import archive

    if "archive" not in cli.commands:
        cli.add_command(archive)
    return cli


def main():
    create_main_cli()(obj={})
