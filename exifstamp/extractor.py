"""Timestamp extraction -- single buffers, single files and directory batches.

``get_timestamp`` is the pure core: it takes JPEG bytes and returns a naive
``datetime``, None when no timestamp is present, or raises an ``ExifError``.
The file and batch helpers wrap it with I/O, timing and logging.
"""

import logging
import os
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from exifstamp.config import ScanConfig
from exifstamp.errors import (
    EntryTypeError,
    ExifError,
    TimestampFormatError,
    TruncatedDataError,
)
from exifstamp.jpeg import locate_metadata_segment
from exifstamp.models import BatchResult, TimestampResult
from exifstamp.tiff import (
    ASCII_TYPE,
    DATETIME_TAG,
    IFDEntry,
    find_entry,
    parse_directory,
)

logger = logging.getLogger(__name__)

# SOI + APP1 marker + the largest possible APP1 segment. Nothing past the
# first segment is ever inspected.
MAX_HEADER_READ = 4 + 0xFFFF

# "YYYY:MM:DD HH:MM:SS", zero-padded ASCII digits only
_EXIF_DATETIME_RE = re.compile(
    r'([0-9]{4}):([0-9]{2}):([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})')


def parse_exif_datetime(text: str) -> datetime:
    """Parse an EXIF ``YYYY:MM:DD HH:MM:SS`` string into a naive datetime."""
    match = _EXIF_DATETIME_RE.fullmatch(text)
    if match is None:
        raise TimestampFormatError(
            f'DateTime {text!r} does not match YYYY:MM:DD HH:MM:SS')
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError as e:
        raise TimestampFormatError(f'DateTime {text!r} is out of range: {e}') from e


def _timestamp_from_entry(entry: IFDEntry) -> datetime:
    if entry.dtype != ASCII_TYPE:
        raise EntryTypeError(
            f'DateTime entry contained invalid data format, expected ASCII '
            f'but got {entry.type_name} ({entry.value!r})')
    if entry.error:
        raise TruncatedDataError(f'DateTime entry could not be read: {entry.error}')
    # EXIF ASCII values are NUL-terminated
    return parse_exif_datetime(entry.value.rstrip('\x00'))


def get_timestamp(data, diagnostics: Optional[List[str]] = None) -> Optional[datetime]:
    """Extract the capture timestamp from JPEG bytes.

    Args:
        data: Complete JPEG content, or at least its first segment.
        diagnostics: If given, notes about skipped directory entries are
            appended to it.

    Returns:
        The timestamp, or None if the JPEG has no leading EXIF segment or
        the segment has no DateTime entry.

    Raises:
        ExifError: The buffer is not a JPEG or its metadata is malformed.
    """
    segment = locate_metadata_segment(data)
    if segment is None:
        return None

    entries = parse_directory(segment.directory(), segment.data, diagnostics)
    entry = find_entry(entries, DATETIME_TAG)
    if entry is None:
        return None
    return _timestamp_from_entry(entry)


def read_entries(data, diagnostics: Optional[List[str]] = None) -> List[IFDEntry]:
    """Decode every supported IFD0 entry. Returns [] if there is no EXIF segment."""
    segment = locate_metadata_segment(data)
    if segment is None:
        return []
    return list(parse_directory(segment.directory(), segment.data, diagnostics))


def read_header_bytes(filepath: Path) -> bytes:
    """Read the part of a file that can hold the leading APP1 segment."""
    with open(filepath, 'rb') as f:
        return f.read(MAX_HEADER_READ)


def extract_file(filepath: Path) -> TimestampResult:
    """Extract the timestamp from a single file.

    Format and I/O errors are reported in ``result.error``, not raised.
    """
    filepath = Path(filepath)
    t0 = time.monotonic()
    result = TimestampResult(filepath=filepath)

    try:
        data = read_header_bytes(filepath)
        result.timestamp = get_timestamp(data, result.warnings)
    except ExifError as e:
        result.error = str(e)
        logger.warning("%s: %s", filepath, e)
    except OSError as e:
        result.error = f'Cannot read file: {e}'
        logger.warning("%s: cannot read file: %s", filepath, e)

    for note in result.warnings:
        logger.debug("%s: %s", filepath, note)

    result.extract_time_ms = (time.monotonic() - t0) * 1000
    return result


def collect_jpeg_files(path: Path, config: Optional[ScanConfig] = None) -> List[Path]:
    """Collect all JPEG files from a path (file or directory).

    A single file is returned as-is regardless of its extension.
    """
    path = Path(path)
    config = config or ScanConfig.default()

    if path.is_file():
        return [path]

    files = []
    for root, dirnames, filenames in os.walk(path, followlinks=config.follow_symlinks):
        if not config.recursive:
            dirnames[:] = []
        for fname in filenames:
            if Path(fname).suffix.lower() in config.extensions:
                files.append(Path(root) / fname)
    files.sort()
    return files


def extract_batch(
    input_path: Path,
    config: Optional[ScanConfig] = None,
    progress_callback: Optional[Callable] = None,
    workers: int = 1,
) -> BatchResult:
    """Extract timestamps from every JPEG under a path.

    Args:
        input_path: File or directory containing JPEG files.
        config: File selection options; defaults to ``ScanConfig.default()``.
        progress_callback: Called with (index, total, filepath, result) after each file.
        workers: Number of parallel workers. 1 = sequential (default).

    Returns:
        BatchResult with results in file order and summary counts.
    """
    t0 = time.monotonic()

    files = collect_jpeg_files(input_path, config)
    total = len(files)
    batch = BatchResult(total_files=total)

    if workers > 1 and total > 1:
        results = _batch_parallel(files, workers, progress_callback, batch)
    else:
        results = _batch_sequential(files, progress_callback, batch)

    batch.results = results
    batch.total_time_seconds = time.monotonic() - t0
    return batch


def _batch_sequential(
    files: List[Path],
    progress_callback: Optional[Callable],
    batch: BatchResult,
) -> List[TimestampResult]:
    """Process files sequentially."""
    results = []
    total = len(files)

    for i, filepath in enumerate(files):
        result = extract_file(filepath)
        results.append(result)
        _update_batch_stats(batch, result)

        if progress_callback:
            progress_callback(i + 1, total, filepath, result)

    return results


def _batch_parallel(
    files: List[Path],
    workers: int,
    progress_callback: Optional[Callable],
    batch: BatchResult,
) -> List[TimestampResult]:
    """Process files in a thread pool.

    Progress is reported in completion order; the returned list is in
    submission order.
    """
    total = len(files)
    results = [None] * total
    completed_count = 0

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(extract_file, filepath): (i, filepath)
            for i, filepath in enumerate(files)
        }

        for future in as_completed(futures):
            index, filepath = futures[future]
            result = future.result()
            results[index] = result

            _update_batch_stats(batch, result)
            completed_count += 1
            if progress_callback:
                progress_callback(completed_count, total, filepath, result)

    return results


def _update_batch_stats(batch: BatchResult, result: TimestampResult):
    """Update batch statistics from a single result."""
    if result.error:
        batch.files_errored += 1
    elif result.timestamp is not None:
        batch.files_with_timestamp += 1
    else:
        batch.files_without_timestamp += 1
