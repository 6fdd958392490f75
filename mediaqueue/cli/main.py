"""mediaqueue CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

app = typer.Typer(
    name="mediaqueue",
    help="Upload media files to a web endpoint with bounded concurrency",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def parse_fields(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict."""
    fields: Dict[str, str] = {}
    for value in values or []:
        key, sep, val = value.partition('=')
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{value}'")
        fields[key] = val
    return fields


def _build_config(
    url: str,
    field_name: str,
    token: str,
    concurrency: int,
    ext: Optional[List[str]],
    mime: Optional[List[str]],
    fields: Dict[str, str]
):
    from mediaqueue import QueueConfig

    options = {
        'upload_url': url,
        'file_field_name': field_name,
        'csrf_token': token,
        'concurrent_uploads': concurrency,
    }
    if ext:
        options['allowed_extensions'] = ext
    if mime:
        options['allowed_mime_types'] = mime
    if fields:
        options['extra_data'] = lambda: dict(fields)
    return QueueConfig.from_options(options)


def _print_summary(summary) -> None:
    table = Table(title="Upload summary")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Error", style="red")

    for outcome in summary.results:
        style = "green" if outcome.status.value == 'success' else "red"
        table.add_row(outcome.name, f"[{style}]{outcome.status.value}[/{style}]", outcome.error or "")

    console.print(table)
    console.print(
        f"[green]{summary.success} succeeded[/green], "
        f"[red]{summary.failed} failed[/red], {summary.total} total"
    )


@app.command()
def upload(
    files: List[Path] = typer.Argument(..., help="Files to upload", exists=True, dir_okay=False),
    url: str = typer.Option(..., "--url", "-u", help="Upload endpoint URL"),
    field_name: str = typer.Option("video", "--field-name", help="Multipart field carrying the file"),
    token: str = typer.Option("", "--token", "-t", envvar="MEDIAQUEUE_CSRF_TOKEN", help="Anti-forgery token"),
    concurrency: int = typer.Option(3, "--concurrency", "-c", help="Simultaneous uploads (1-5)"),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="Allowed extension (repeatable)"),
    mime: Optional[List[str]] = typer.Option(None, "--mime", help="Allowed MIME type (repeatable)"),
    field: Optional[List[str]] = typer.Option(None, "--field", "-f", help="Extra form field KEY=VALUE (repeatable)"),
    retry_failed: bool = typer.Option(False, "--retry-failed", help="Retry failed files once"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload files to an endpoint."""
    from mediaqueue import UploadQueue, QueueError, setup_logging

    if verbose:
        logging.basicConfig(level=logging.DEBUG)
        setup_logging(logging.DEBUG)

    config = _build_config(url, field_name, token, concurrency, ext, mime, parse_fields(field))

    async def do_upload():
        async with UploadQueue(config) as queue:
            added = queue.add_files(files)
            for name in added.rejected_files:
                console.print(f"[yellow]Skipped {name}: unsupported format[/yellow]")
            if not added.added:
                console.print("[red]No files to upload[/red]")
                raise typer.Exit(1)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                tasks = {
                    item.id: progress.add_task(item.name, total=100)
                    for item in queue.get_files()
                }

                def on_progress(item, item_progress, overall):
                    progress.update(tasks[item.id], completed=item_progress)

                def on_file_complete(item, succeeded, result_or_error):
                    description = item.name if succeeded else f"[red]{item.name}[/red]"
                    progress.update(tasks[item.id], completed=100, description=description)

                def on_queue_update(items):
                    for item in items:
                        if item.status.value == 'pending':
                            progress.update(tasks[item.id], completed=0, description=item.name)

                queue.on('progress', on_progress)
                queue.on('file_complete', on_file_complete)
                queue.on('queue_update', on_queue_update)

                try:
                    summary = await queue.start_upload()
                    if summary and summary.failed:
                        if retry_failed:
                            summary = await queue.retry_failed()
                except QueueError as e:
                    console.print(f"[red]Upload failed: {e}[/red]")
                    raise typer.Exit(1)

            if summary is None:
                console.print("[yellow]Upload cancelled[/yellow]")
                raise typer.Exit(1)

            _print_summary(summary)
            if summary.failed:
                raise typer.Exit(1)

    try:
        run_async(do_upload())
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Upload cancelled[/yellow]")
        raise typer.Exit(130)


@app.command()
def check(
    files: List[Path] = typer.Argument(..., help="Files to check", exists=True, dir_okay=False),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="Allowed extension (repeatable)"),
    mime: Optional[List[str]] = typer.Option(None, "--mime", help="Allowed MIME type (repeatable)"),
):
    """Show which files the queue would accept."""
    from mediaqueue import CandidateFile, QueueConfig, format_file_size
    from mediaqueue.core.queue import FileValidator

    options = {}
    if ext:
        options['allowed_extensions'] = ext
    if mime:
        options['allowed_mime_types'] = mime
    config = QueueConfig.from_options(options)
    validator = FileValidator(config.allowed_extensions, config.allowed_mime_types)

    table = Table()
    table.add_column("File")
    table.add_column("Type", style="dim")
    table.add_column("Size", justify="right")
    table.add_column("Accepted")

    rejected = 0
    for path in files:
        candidate = CandidateFile.from_path(path)
        accepted = validator.is_valid(candidate)
        rejected += not accepted
        table.add_row(
            candidate.name,
            candidate.mime_type or "-",
            format_file_size(candidate.size),
            "[green]yes[/green]" if accepted else "[red]no[/red]"
        )

    console.print(table)
    if rejected:
        raise typer.Exit(1)


def main():
    app()


if __name__ == "__main__":
    main()
