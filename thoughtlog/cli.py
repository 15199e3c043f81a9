"""
ThoughtLog CLI Interface
Command line interface implemented using Typer
"""

import json
from pathlib import Path
from typing import Any, Optional

import typer
import uvicorn

from thoughtlog.config.loader import get_config, load_config
from thoughtlog.core.db import get_db, switch_database
from thoughtlog.core.errors import ThoughtLogError
from thoughtlog.core.json_parser import load_json_payload
from thoughtlog.core.logger import get_logger, setup_logging
from thoughtlog.models.segments import ExtractionConfig
from thoughtlog.processing.retry_ledger import RetryLedger
from thoughtlog.processing.storage import get_storage

logger = get_logger(__name__)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(message: str, error: Exception) -> None:
    logger.error(f"{message}: {error}")
    typer.echo(f"Error: {message}: {error}", err=True)
    raise typer.Exit(1)


def select_database(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Database file path"),
):
    """ThoughtLog journal pipeline"""
    if db_path:
        switch_database(db_path)


def serve(
    host: Optional[str] = typer.Option(None, help="Server host address"),
    port: Optional[int] = typer.Option(None, help="Server port"),
    config_file: Optional[str] = typer.Option(None, help="Configuration file path"),
    debug: bool = typer.Option(False, help="Enable debug mode"),
):
    """Start the ThoughtLog API service"""
    load_config(config_file)
    setup_logging()
    config = get_config()

    host = host or config.get("server.host", "127.0.0.1")
    port = port or config.get("server.port", 8000)
    debug = debug or config.get("server.debug", False)

    logger.info("Starting ThoughtLog API service...")
    logger.info(f"Host: {host}, Port: {port}")
    logger.info(f"Debug mode: {debug}")

    uvicorn.run(
        "thoughtlog.app:app",
        host=host,
        port=port,
        reload=debug,
        log_level="debug" if debug else "info",
    )


def init_db():
    """Initialize database"""
    db = get_db()
    typer.echo(f"Database ready: {db.db_path}")


def ingest(
    payload_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Classifier payload JSON file"),
    transcript: Optional[str] = typer.Option(None, help="Transcript, defaults to the payload's transcript"),
    audio_path: Optional[str] = typer.Option(None, help="Audio file reference"),
    date: Optional[str] = typer.Option(None, help="Log date (YYYY-MM-DD), defaults to today"),
):
    """Save a classifier payload as a new log"""
    config = ExtractionConfig.from_config()

    try:
        payload = load_json_payload(
            payload_file.read_text(encoding="utf-8"), repair=config.repair_json
        )
        if transcript is None and isinstance(payload, dict):
            transcript = payload.get("transcript")
        if transcript is None:
            typer.echo("Error: payload has no transcript, pass --transcript", err=True)
            raise typer.Exit(1)

        result = get_storage().save_extraction(
            transcript, payload, config=config, audio_path=audio_path, date=date
        )
    except ThoughtLogError as e:
        _fail(f"Failed to ingest {payload_file}", e)

    typer.echo(f"Saved log {result.id} with {result.segment_count} segments")
    _echo_json(result.model_dump(mode="json"))


def show(log_id: int = typer.Argument(..., help="Log ID")):
    """Show a log with its segments"""
    log = get_storage().get_log_with_segments(log_id)
    if log is None:
        typer.echo(f"Log {log_id} not found", err=True)
        raise typer.Exit(1)

    _echo_json(log.model_dump(mode="json"))


def list_logs(
    limit: int = typer.Option(20, min=1, help="Maximum number of logs"),
    offset: int = typer.Option(0, min=0, help="Number of logs to skip"),
):
    """List logs, newest first"""
    logs = get_storage().get_all_logs_with_segments(limit=limit, offset=offset)
    if not logs:
        typer.echo("No logs")
        return

    for log in logs:
        state = " [pending]" if log.pending_analysis else ""
        typer.echo(
            f"{log.id:>5}  {log.date}  {len(log.todos)} todos, {len(log.ideas)} ideas, "
            f"{len(log.learnings)} learnings, {len(log.accomplishments)} accomplishments{state}"
        )


def delete(
    log_id: int = typer.Argument(..., help="Log ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a log and all of its segments"""
    if not yes:
        typer.confirm(f"Delete log {log_id} and all of its segments?", abort=True)

    try:
        get_storage().delete_log(log_id)
    except ThoughtLogError as e:
        _fail(f"Failed to delete log {log_id}", e)

    typer.echo(f"Deleted log {log_id}")


def pending():
    """List logs awaiting analysis"""
    ledger = RetryLedger(get_storage())
    retryable = ledger.get_pending()
    exhausted = ledger.get_exhausted()

    if not retryable and not exhausted:
        typer.echo("No pending logs")
        return

    for log in retryable:
        typer.echo(
            f"{log.id:>5}  {log.date}  retries {log.retry_count}/{ledger.policy.max_retries}  "
            f"next in {ledger.next_delay(log):.0f}s  {log.last_error or ''}".rstrip()
        )
    for log in exhausted:
        typer.echo(
            f"{log.id:>5}  {log.date}  exhausted after {log.retry_count} retries  "
            f"{log.last_error or ''}".rstrip()
        )


def create_cli() -> typer.Typer:
    """Build the Typer application"""
    app = typer.Typer(no_args_is_help=True)

    app.callback()(select_database)
    app.command()(serve)  # Start FastAPI server
    app.command()(init_db)  # Initialize database
    app.command()(ingest)
    app.command()(show)
    app.command("list")(list_logs)
    app.command()(delete)
    app.command()(pending)

    return app


def main():
    """Main function"""
    create_cli()()


if __name__ == "__main__":
    main()
