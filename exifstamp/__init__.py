"""exifstamp -- capture timestamps from JPEG EXIF metadata, no metadata library needed."""

__version__ = "1.0.0"

from exifstamp.errors import (
    EntryTypeError,
    ExifError,
    ExifHeaderError,
    MarkerError,
    NotJPEGError,
    TIFFHeaderError,
    TimestampFormatError,
    TruncatedDataError,
)
from exifstamp.models import BatchResult, TimestampResult
from exifstamp.config import ScanConfig
from exifstamp.extractor import (
    collect_jpeg_files,
    extract_batch,
    extract_file,
    get_timestamp,
    parse_exif_datetime,
    read_entries,
)

__all__ = [
    "__version__",
    "ExifError",
    "NotJPEGError",
    "MarkerError",
    "ExifHeaderError",
    "TIFFHeaderError",
    "TruncatedDataError",
    "EntryTypeError",
    "TimestampFormatError",
    "TimestampResult",
    "BatchResult",
    "ScanConfig",
    "get_timestamp",
    "parse_exif_datetime",
    "read_entries",
    "extract_file",
    "extract_batch",
    "collect_jpeg_files",
]
