"""
Command-line interface for the Dolphin parser client.

Usage:
    dolphin-parser install [--force]
    dolphin-parser parse <pdf_path> [--async] [--label foot] [--tag author]
    dolphin-parser status <job_id>
    dolphin-parser download <job_id> [--keep]
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dolphin_parser import __version__
from dolphin_parser.core.errors import DolphinParserError
from dolphin_parser.logging_utils import configure_logging
from dolphin_parser.models.job import JobResult
from dolphin_parser.services.client import DolphinParserClient

console = Console()

ENV_TEMPLATE = """\
# Dolphin Parser job API (required)
# Format: https://api.runpod.ai/v2/YOUR_ENDPOINT_ID
DOLPHIN_PARSER_ENDPOINT=
DOLPHIN_PARSER_API_KEY=

# Request defaults (comma-separated)
DOLPHIN_PARSER_EXCLUDED_LABELS=foot,header
DOLPHIN_PARSER_EXCLUDED_TAGS=author,meta_pub_date

# The parser POSTs finished jobs here when set
DOLPHIN_PARSER_CALLBACK_URL=

# HTTP client
DOLPHIN_PARSER_TIMEOUT=300
DOLPHIN_PARSER_RETRIES=3
DOLPHIN_PARSER_RETRY_DELAY=2

# Where downloaded archives are stored (disk: local or minio)
DOLPHIN_PARSER_STORAGE_DISK=local
DOLPHIN_PARSER_STORAGE_PATH=dolphin-parser
DOLPHIN_PARSER_STORAGE_ROOT=data/storage

# Storage server holding result archives (optional)
DOLPHIN_STORAGE_ENDPOINT=
DOLPHIN_STORAGE_API_KEY=

# MinIO mirror for the minio disk (optional)
DOLPHIN_PARSER_MINIO_ENDPOINT=http://localhost:9000
DOLPHIN_PARSER_MINIO_ACCESS_KEY=
DOLPHIN_PARSER_MINIO_SECRET_KEY=
DOLPHIN_PARSER_MINIO_BUCKET=dolphin-parser

DOLPHIN_PARSER_LOG_LEVEL=INFO
"""


def _client() -> DolphinParserClient:
    try:
        return DolphinParserClient()
    except DolphinParserError as exc:
        _fail(exc)


def _fail(exc: DolphinParserError) -> None:
    console.print(f"[bold red]✗ {escape(exc.message)}[/]")
    if exc.response is not None:
        console.print_json(data=exc.response)
    sys.exit(1)


def _print_job(job: JobResult) -> None:
    color = "green" if job.is_success() else "red" if job.is_failed() else "yellow"
    table = Table(show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Job", escape(job.job_id or "-"))
    table.add_row("Status", f"[{color}]{escape(job.status)}[/]")
    for label, value in (
        ("Message", job.message),
        ("ZIP URL", job.zip_url),
        ("Pages", f"{job.pages_processed}/{job.pages_total}" if job.pages_total is not None else None),
        ("Figures", job.figures_count),
        ("Callback", job.callback_sent_status),
        ("Callback error", job.callback_error),
        ("Error", job.error),
        ("Worker", job.worker_id),
        ("Execution (ms)", job.execution_time),
    ):
        if value is not None:
            table.add_row(label, escape(str(value)))
    console.print(table)


def _run(action, *args: Any) -> Any:
    try:
        return action(*args)
    except DolphinParserError as exc:
        _fail(exc)


@click.group()
@click.version_option(version=__version__, prog_name="dolphin-parser")
def cli():
    """Dolphin Parser: submit PDFs to the remote parser and manage jobs."""
    pass


@cli.command()
@click.option("--path", "env_path", default=".env", type=click.Path(dir_okay=False), help="File to write")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def install(env_path: str, force: bool):
    """Write a .env template listing every setting."""
    target = Path(env_path)
    if target.exists() and not force:
        console.print(f"[yellow]⚠ {target} already exists, use --force to overwrite[/]")
        sys.exit(1)
    target.write_text(ENV_TEMPLATE, encoding="utf-8")
    console.print(f"[green]✓ Wrote configuration template to {target}[/]")


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--async", "async_mode", is_flag=True, help="Queue the job and return immediately")
@click.option("--label", "labels", multiple=True, help="Excluded label (repeatable)")
@click.option("--tag", "tags", multiple=True, help="Excluded tag (repeatable)")
@click.option("--callback", default=None, help="Callback URL for this job")
def parse(pdf_path: str, async_mode: bool, labels: Tuple[str, ...], tags: Tuple[str, ...], callback: Optional[str]):
    """Parse a PDF file."""
    client = _client()
    options: Dict[str, Any] = {}
    if labels:
        options["excluded_labels"] = list(labels)
    if tags:
        options["excluded_tags"] = list(tags)
    if callback:
        options["callback"] = callback
    action = client.parse_file_async if async_mode else client.parse_file
    _print_job(_run(action, pdf_path, options))


@cli.command()
@click.argument("job_id")
def status(job_id: str):
    """Show the status of a job."""
    _print_job(_run(_client().status, job_id))


@cli.command()
@click.argument("job_id")
def cancel(job_id: str):
    """Stop a running job."""
    console.print_json(data=_run(_client().cancel, job_id))


@cli.command()
@click.argument("job_id")
def result(job_id: str):
    """Fetch the result of a finished job."""
    console.print_json(data=_run(_client().get_result, job_id))


@cli.command()
@click.option("--status", "statuses", multiple=True, help="Filter by status (repeatable)")
@click.option("--limit", type=int, default=None)
@click.option("--offset", type=int, default=None)
def jobs(statuses: Tuple[str, ...], limit: Optional[int], offset: Optional[int]):
    """List parsing jobs."""
    options: Dict[str, Any] = {}
    if statuses:
        options["statuses"] = list(statuses)
    if limit is not None:
        options["limit"] = limit
    if offset is not None:
        options["offset"] = offset
    console.print_json(data=_run(_client().list_jobs, options))


@cli.command()
def health():
    """Show parser worker health."""
    console.print_json(data=_run(_client().health))


@cli.command()
def stats():
    """Show parser statistics."""
    console.print_json(data=_run(_client().stats))


@cli.command("check-storage")
def check_storage():
    """Check the parser's connection to the storage server."""
    console.print_json(data=_run(_client().check_storage))


@cli.command()
@click.argument("job_id")
@click.option("--keep", is_flag=True, help="Keep the archive on the storage server")
def download(job_id: str, keep: bool):
    """Download a job's result archive from the storage server."""
    path = _run(_client().download_from_storage, job_id, keep)
    console.print(f"[green]✓ Saved to {path}[/]")


@cli.command()
def config():
    """Show the resolved configuration (without secrets)."""
    console.print_json(data=_client().get_config())


def main():
    configure_logging()
    cli()


if __name__ == "__main__":
    main()
