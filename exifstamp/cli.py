"""CLI interface for exifstamp -- get, scan, show subcommands."""

import json
import logging
import sys
from pathlib import Path

import click

import exifstamp
from exifstamp import log
from exifstamp.config import ScanConfig
from exifstamp.errors import ExifError
from exifstamp.extractor import (
    collect_jpeg_files,
    extract_batch,
    get_timestamp,
    read_entries,
    read_header_bytes,
)
from exifstamp.jpeg import locate_metadata_segment

logger = logging.getLogger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@click.group()
@click.version_option(version=exifstamp.__version__, prog_name='exifstamp')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default='WARNING', show_default=True, help='Diagnostic log level (stderr).')
@click.option('--color/--no-color', default=None,
              help='Force colored output on or off (default: auto).')
def main(log_level, color):
    """exifstamp -- read capture timestamps from JPEG EXIF metadata."""
    logging.basicConfig(level=getattr(logging, log_level.upper()),
                        format='%(levelname)s %(name)s: %(message)s')
    if color is not None:
        log.set_color_enabled(color)


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'fmt', default=None,
              help='strftime pattern for the output (default: ISO 8601).')
def get(path, fmt):
    """Print the capture timestamp of a single JPEG file.

    Prints "none" when the file carries no timestamp.
    """
    try:
        timestamp = get_timestamp(read_header_bytes(Path(path)))
    except ExifError as e:
        click.echo(log.cli_error(f'Error: {e}'), err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(log.cli_error(f'Error: Cannot read file: {e}'), err=True)
        sys.exit(1)

    if timestamp is None:
        click.echo('none')
    elif fmt:
        click.echo(timestamp.strftime(fmt))
    else:
        click.echo(timestamp.isoformat())


@main.command()
@click.argument('path', type=click.Path(exists=True), default='.')
@click.option('--verbose', '-v', is_flag=True, help='Show skipped-entry notes.')
@click.option('--json-out', type=click.Path(), help='Write results as JSON to file.')
@click.option('--log', 'log_file', type=click.File('w', lazy=False),
              help='Write log to file.')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='JSON scan configuration (extensions, recursive, follow_symlinks).')
@click.option('--workers', '-w', type=int, default=1,
              help='Number of parallel workers (default: 1, sequential).')
def scan(path, verbose, json_out, log_file, config_path, workers):
    """Extract timestamps from every JPEG under PATH.

    PATH can be a single file or a directory (default: current directory).
    """
    input_path = Path(path)
    try:
        config = ScanConfig.from_json(config_path) if config_path else ScanConfig.default()
    except ValueError as e:
        click.echo(log.cli_error(f'Error: {e}'), err=True)
        sys.exit(2)

    def log_msg(msg, status='ok'):
        if log_file:
            log_file.write(log.log_line(status, msg) + '\n')
            log_file.flush()

    files = collect_jpeg_files(input_path, config)
    if not files:
        click.echo(f'No JPEG files found in {input_path}')
        log_msg(f'No JPEG files found in {input_path}')
        return

    logger.info("Scanning %s", input_path.resolve())
    click.echo(log.cli_header(f'exifstamp v{exifstamp.__version__}'))
    click.echo(f'Scanning {len(files)} file(s)...')
    log_msg(f'Scanning {len(files)} file(s) in {input_path}')

    def progress(i, total, filepath, result):
        if result.status == 'ok':
            status = result.timestamp.isoformat()
            log_msg(f'{filepath}: {status}', result.status)
        elif result.status == 'missing':
            status = 'no timestamp'
            log_msg(f'{filepath}: {status}', result.status)
        else:
            status = f'ERROR: {result.error}'
            log_msg(f'{filepath}: {result.error}', result.status)

        click.echo(f'  [{i}/{total}] {filepath.name} | '
                   f'{log.cli_status(result.status, status)}')
        if verbose:
            for note in result.warnings:
                click.echo(log.cli_dim(f'    {note}'))

    batch = extract_batch(input_path, config=config,
                          progress_callback=progress, workers=workers)

    click.echo(log.cli_separator())
    click.echo(f'Done in {batch.total_time_seconds:.1f}s')
    click.echo(f'  Total:        {batch.total_files}')
    click.echo(f'  Timestamped:  {batch.files_with_timestamp}')
    click.echo(f'  No timestamp: {batch.files_without_timestamp}')
    click.echo(f'  Errors:       {batch.files_errored}')
    log_msg(f'Done: {batch.total_files} files, {batch.files_with_timestamp} '
            f'timestamped, {batch.files_without_timestamp} without, '
            f'{batch.files_errored} errors')

    if json_out:
        with open(json_out, 'w') as f:
            json.dump([r.to_dict() for r in batch.results], f, indent=2)
        click.echo(f'Results written to {json_out}')

    if batch.files_errored > 0:
        sys.exit(1)


@main.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def show(path):
    """List the IFD0 entries of a JPEG file's EXIF segment."""
    filepath = Path(path)
    diagnostics = []
    try:
        data = read_header_bytes(filepath)
        segment = locate_metadata_segment(data)
        entries = read_entries(data, diagnostics) if segment is not None else []
    except ExifError as e:
        click.echo(log.cli_error(f'Error: {e}'), err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(log.cli_error(f'Error: Cannot read file: {e}'), err=True)
        sys.exit(1)

    click.echo(f'File: {filepath.name}')
    if segment is None:
        click.echo(log.cli_warning('No EXIF segment found.'))
        return

    click.echo(f'Entries: {len(entries)}')
    for entry in entries:
        where = 'inline' if entry.is_inline else 'offset'
        value = f'<{entry.error}>' if entry.error else repr(entry.value)
        line = (f'  0x{entry.tag_id:04x} {entry.tag_name:<20} {entry.type_name:<9} '
                f'x{entry.count:<5} {where:<6} {value}')
        click.echo(log.cli_error(line) if entry.error else line)
    for note in diagnostics:
        click.echo(log.cli_warning(f'  {note}'))


if __name__ == '__main__':
    main()
