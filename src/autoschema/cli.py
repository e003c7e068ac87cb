"""autoschema CLI.

Generates TypeScript declarations, a typed API client and validation schemas
from an application's ORM models, once or continuously while files change.
"""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer

from autoschema.config import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CONFIG_TEMPLATE,
    AutoSchemaSettings,
    load_settings,
)
from autoschema.errors import ConfigurationError
from autoschema.models.result import GenerationResult
from autoschema.models.snapshot import ChangeSet
from autoschema.services.factory import create_generation_service, create_watcher

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=lambda name: structlog.PrintLogger(file=sys.stderr),
    wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
    context_class=dict,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Drop log events below ``level``; quiet runs keep only warnings and errors."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


app = typer.Typer(
    name="autoschema",
    help="""Generate TypeScript types, a typed API client and validation schemas from ORM models.

Examples:

  # Write autoschema.toml and the output directory
  uv run autoschema init

  # Generate everything
  uv run autoschema generate

  # Generate two entities without touching the filesystem
  uv run autoschema generate --model User --model Post --dry-run

  # Regenerate whenever a model changes
  uv run autoschema watch --interval 5""",
    rich_markup_mode="markdown",
)

GITIGNORE_CONTENT = "# Generated by autoschema\n*.bak\n"


def _load(config: Optional[str]) -> AutoSchemaSettings:
    try:
        return load_settings(Path(config) if config else None)
    except FileNotFoundError as e:
        logger.error("config_not_found", error=str(e))
        raise typer.Exit(1)
    except ValueError as e:
        logger.error("config_invalid", error=str(e))
        raise typer.Exit(1)


def _run_generation(
    settings: AutoSchemaSettings,
    models: list[str] | None,
    dry_run: bool,
    force: bool,
) -> GenerationResult:
    try:
        service = create_generation_service(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        raise typer.Exit(1)
    return asyncio.run(service.generate(models or None, dry_run=dry_run, force=force))


def _report(result: GenerationResult, quiet: bool = False) -> None:
    for error in result.errors:
        logger.warning("generation_error", kind=error.kind.value, item=error.item, error=error.message)

    if quiet:
        if result.errors:
            typer.echo(f"Encountered {len(result.errors)} errors", err=True)
        return

    for artifact in result.artifacts:
        typer.echo(f"  {artifact.status.value:<9} {artifact.path}")

    verb = "Planned" if result.dry_run else "Generated"
    typer.echo(
        f"{verb} {len(result.artifacts)} artifacts for {len(result.analyzed)} of "
        f"{len(result.discovered)} entities ({result.request_count} requests)"
    )
    if result.errors:
        typer.echo(f"Encountered {len(result.errors)} errors")


def _install_stop_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Platforms without loop signal support fall back to KeyboardInterrupt.
            pass


def _watch(settings: AutoSchemaSettings, config: Optional[str], interval: int | None, quiet: bool) -> None:
    command = [sys.executable, "-m", "autoschema", "generate", "--force"]
    if quiet:
        command.append("--quiet")
    if config:
        command += ["--config", str(Path(config).resolve())]

    async def regenerate(changes: ChangeSet) -> None:
        logger.info("regenerating", changed=sum(len(paths) for _, paths in changes.items()))
        process = await asyncio.create_subprocess_exec(*command, cwd=str(settings.root))
        return_code = await process.wait()
        if return_code != 0:
            raise RuntimeError(f"generate exited with status {return_code}")

    async def run_watcher() -> None:
        stop_event = asyncio.Event()
        _install_stop_handlers(stop_event)
        watcher = create_watcher(settings, on_change=regenerate, interval=interval, heartbeat=not quiet)
        await watcher.run(stop_event)

    try:
        asyncio.run(run_watcher())
    except KeyboardInterrupt:
        logger.info("watch_interrupted")


@app.command()
def generate(
    model: Optional[list[str]] = typer.Option(
        None,
        "--model",
        "-m",
        help="Entity to generate (repeatable, default: every discovered entity)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing artifacts without taking backups",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be written without writing it",
    ),
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help="Keep running and regenerate when model files change",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only report warnings and errors",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Config file (default: ./{DEFAULT_CONFIG_FILENAME})",
    ),
) -> None:
    """Generate TypeScript artifacts from the application's models."""
    if quiet:
        configure_logging(logging.WARNING)

    settings = _load(config)
    result = _run_generation(settings, model, dry_run=dry_run, force=force)
    _report(result, quiet=quiet)

    if watch and not dry_run:
        _watch(settings, config, interval=None, quiet=quiet)
        return

    if not result.success:
        raise typer.Exit(1)


@app.command()
def watch(
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Seconds between polls (default: watch.interval from config)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only report warnings and errors",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Config file (default: ./{DEFAULT_CONFIG_FILENAME})",
    ),
) -> None:
    """Watch model directories and regenerate on every change."""
    if quiet:
        configure_logging(logging.WARNING)

    settings = _load(config)
    directories = settings.watch_directories
    if not any(directory.is_dir() for directory in directories):
        logger.error("no_watch_directories", directories=[str(d) for d in directories])
        raise typer.Exit(1)

    if not quiet:
        typer.echo(f"Watching {len(directories)} directories. Press Ctrl+C to stop.")
    _watch(settings, config, interval=interval, quiet=quiet)


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing config file",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Config file to write (default: ./{DEFAULT_CONFIG_FILENAME})",
    ),
) -> None:
    """Write a default config file and prepare the output directory."""
    config_path = Path(config) if config else Path.cwd() / DEFAULT_CONFIG_FILENAME

    if config_path.exists() and not force:
        logger.error("config_exists", path=str(config_path))
        typer.echo(f"{config_path} already exists. Use --force to overwrite it.")
        raise typer.Exit(1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    logger.info("config_written", path=str(config_path))

    settings = _load(str(config_path))
    output_dir = settings.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    gitignore = output_dir / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(GITIGNORE_CONTENT, encoding="utf-8")

    typer.echo(f"Wrote {config_path}")
    typer.echo(f"Output directory: {output_dir}")


@app.command()
def version() -> None:
    """Show version information."""
    from autoschema import __version__

    typer.echo(f"autoschema {__version__}")
