"""Command-line interface for the mirror backup application."""

import asyncio
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config.settings import MirrorConfig, SyncOptions
from .sync.backup_manager import BackupManager
from .sync.events import COPY, EventBus
from .sync.paths import display_path
from .sync.root import list_backup_roots
from .utils.file_utils import FileHelper
from .utils.logging import setup_logging

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Mirror Backup Tool

    Mirrors a source directory into TARGET/current. Whatever a run would
    overwrite or delete there is first moved into a timestamped backup tree
    under TARGET.
    """
    pass


def _console_bus(verbose: bool, quiet: bool) -> EventBus:
    """Build an event bus printing the live trace to the terminal."""
    bus = EventBus()

    if verbose:
        bus.on_info(lambda event: console.print(
            f"[grey50]{escape(str(event))}[/grey50]", highlight=False))

    if not quiet:
        bus.on_file(lambda event: console.print(
            f"[{'green' if event.action == COPY else 'yellow'}]"
            f"{escape(display_path(event.path))}[/]", highlight=False))
        bus.on_error(lambda event: err_console.print(
            f"[red]{escape(event.message)}[/red]", highlight=False))

    return bus


@cli.command('sync')
@click.argument('source', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument('target', type=click.Path(path_type=Path))
@click.option('--verbose', '-v',
              is_flag=True,
              help='Print the full decision trace')
@click.option('--quiet', '-q',
              is_flag=True,
              help='Print nothing but the final status')
@click.option('--dry-run', '-n',
              is_flag=True,
              help='Show what would be copied and relocated without doing it')
@click.option('--ignore', '-i',
              multiple=True,
              help='Gitignore-style pattern to exclude (repeatable)')
@click.option('--parallel', '-p',
              type=click.IntRange(min=1),
              default=16,
              show_default=True,
              help='Maximum filesystem operations in flight')
@click.option('--log-file',
              type=click.Path(dir_okay=False, path_type=Path),
              help='Write a debug log to this file')
def sync_command(source: Path, target: Path, verbose: bool, quiet: bool, dry_run: bool,
                 ignore: Tuple[str, ...], parallel: int, log_file: Optional[Path]):
    """Mirror SOURCE into TARGET/current."""
    if FileHelper.is_within(target, source):
        err_console.print("❌ Error: TARGET must not be inside SOURCE", style="red bold")
        sys.exit(1)

    setup_logging(log_level="DEBUG" if verbose else "INFO", log_file=log_file, log_to_console=False)

    manager = BackupManager(MirrorConfig(sync_options=SyncOptions(parallel_operations=parallel)))

    if dry_run and not quiet:
        console.print("🔍 DRY RUN MODE - No files will be changed", style="yellow bold")

    result = asyncio.run(manager.run_sync(
        str(source), str(target),
        ignore=ignore,
        dry_run=dry_run,
        bus=_console_bus(verbose, quiet),
    ))

    if result['status'] != 'completed':
        err_console.print(f"❌ Error: {result['errors'][-1]}", style="red bold")
        sys.exit(1)

    if not quiet:
        _display_sync_result(result)


def _display_sync_result(result):
    """Print a one-run summary."""
    rprint(
        f"\n✅ [bold]{result['files_copied']}[/bold] copied "
        f"({FileHelper.format_file_size(result['bytes_copied'])}), "
        f"[bold]{result['files_relocated']}[/bold] relocated "
        f"in {result['duration']:.1f}s"
    )
    if result['files_relocated'] and not result['dry_run']:
        rprint(f"   • Backup: {escape(result['backup_root'])}")
    if result['errors']:
        rprint(f"⚠️ [yellow]{len(result['errors'])} errors occurred[/yellow]")


@cli.command()
@click.option('--config', '-c',
              type=click.Path(exists=True, path_type=Path),
              default=Path('config/config.yaml'),
              help='Path to configuration file')
@click.option('--job', '-j',
              help='Run specific job by name (default: run all enabled jobs)')
@click.option('--dry-run', '-n',
              is_flag=True,
              help='Show what would be copied and relocated without doing it')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Print every copied and relocated path')
def backup(config: Path, job: Optional[str], dry_run: bool, verbose: bool):
    """Run configured mirror jobs."""
    try:
        with console.status("Loading configuration..."):
            mirror_config = MirrorConfig.from_yaml(config)

        console.print(f"✅ Configuration loaded from {config}", style="green")

        options = mirror_config.logging
        setup_logging(
            log_level=options.log_level,
            log_file=options.log_file,
            log_to_console=True,
            max_file_size=options.max_file_size,
            backup_count=options.backup_count
        )

        manager = BackupManager(mirror_config)

        if dry_run:
            console.print("🔍 DRY RUN MODE - No files will be changed", style="yellow bold")

        bus = _console_bus(verbose=False, quiet=not verbose)

        if job:
            job_config = mirror_config.get_job_by_name(job)
            if not job_config:
                console.print(f"❌ Job '{job}' not found", style="red")
                sys.exit(1)
            console.print(f"🚀 Running job: {job}")
            results = [asyncio.run(manager.run_backup_job(job_config, dry_run=dry_run or None, bus=bus))]
        else:
            enabled_jobs = mirror_config.get_enabled_jobs()
            console.print(f"🚀 Running {len(enabled_jobs)} enabled jobs")
            results = asyncio.run(manager.run_all_jobs(dry_run=dry_run or None, bus=bus))

        _display_backup_results(results, manager)

        if any(r['status'] == 'failed' for r in results):
            sys.exit(1)

    except (FileNotFoundError, ValueError) as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)


def _display_backup_results(results, manager):
    """Display run results in a table."""
    table = Table(title="Mirror Results")
    table.add_column("Job Name", style="cyan")
    table.add_column("Status", style="magenta")
    table.add_column("Copied", justify="right", style="green")
    table.add_column("Relocated", justify="right", style="yellow")
    table.add_column("Data Copied", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Errors", justify="right", style="red")

    for result in results:
        status_style = "green" if result['status'] == 'completed' else "red"
        table.add_row(
            result['job_name'],
            f"[{status_style}]{result['status']}[/{status_style}]",
            str(result.get('files_copied', 0)),
            str(result.get('files_relocated', 0)),
            FileHelper.format_file_size(result.get('bytes_copied', 0)),
            f"{result.get('duration', 0):.1f}s",
            str(len(result.get('errors', [])))
        )

    console.print(table)

    summary = manager.get_backup_summary(results)
    rprint(f"\n📊 [bold]Summary:[/bold]")
    rprint(f"   • Total jobs: {summary['total_jobs']}")
    rprint(f"   • Successful: [green]{summary['successful_jobs']}[/green]")
    rprint(f"   • Failed: [red]{summary['failed_jobs']}[/red]")
    rprint(f"   • Files copied: [green]{summary['total_files_copied']}[/green]")
    rprint(f"   • Files relocated: [yellow]{summary['total_files_relocated']}[/yellow]")
    rprint(f"   • Data copied: {FileHelper.format_file_size(summary['total_bytes_copied'])}")

    if summary['total_errors'] > 0:
        rprint(f"\n⚠️ [yellow]{summary['total_errors']} errors occurred:[/yellow]")
        for result in results:
            for error in result.get('errors', []):
                console.print(f"   • {error}", style="red", markup=False)


@cli.command()
@click.option('--config', '-c',
              type=click.Path(path_type=Path),
              default=Path('config/config.yaml'),
              help='Path to save configuration file')
def init(config: Path):
    """Initialize a new configuration file."""
    if config.exists():
        if not click.confirm(f"Configuration file {config} already exists. Overwrite?"):
            return

    console.print("🚀 Creating new configuration file...")

    sample_config = {
        'jobs': [
            {
                'name': 'documents',
                'source': str(Path.home() / 'Documents'),
                'target': '/mnt/backup/documents',
                'ignore': ['*.tmp', '.cache/'],
                'enabled': True
            }
        ],
        'sync_options': {
            'parallel_operations': 16,
            'dry_run': False
        },
        'logging': {
            'log_level': 'INFO',
            'log_file': 'logs/mirror-backup.log'
        }
    }

    mirror_config = MirrorConfig(**sample_config)
    mirror_config.to_yaml(config)

    console.print(f"✅ Configuration saved to {config}", style="green")
    console.print("\n📝 Next steps:")
    console.print("1. Edit the configuration file to match your setup")
    console.print("2. Run 'mirror-backup backup --dry-run' to preview the first run")
    console.print("3. Run 'mirror-backup backup' to start mirroring")


@cli.command()
@click.option('--config', '-c',
              type=click.Path(exists=True, path_type=Path),
              default=Path('config/config.yaml'),
              help='Path to configuration file')
def status(config: Path):
    """Show configured jobs and the backups found for each."""
    try:
        mirror_config = MirrorConfig.from_yaml(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"❌ Error: {e}", style="red bold")
        sys.exit(1)

    console.print("📋 [bold]Mirror Jobs:[/bold]")
    table = Table()
    table.add_column("Job Name", style="cyan")
    table.add_column("Source")
    table.add_column("Target", style="magenta")
    table.add_column("Backups", justify="right")
    table.add_column("Latest Backup")
    table.add_column("Status", style="green")

    for job in mirror_config.jobs:
        roots = list_backup_roots(job.target)
        latest = "/".join(roots[-1]) if roots else "-"
        table.add_row(
            job.name,
            job.source,
            job.target,
            str(len(roots)),
            latest,
            "✅ Enabled" if job.enabled else "❌ Disabled"
        )

    console.print(table)


if __name__ == '__main__':
    cli()
