"""Data models for exifstamp file and batch results."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional


@dataclass
class TimestampResult:
    """Result of extracting the timestamp from a single file."""
    filepath: Path
    timestamp: Optional[datetime] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    extract_time_ms: float = 0.0

    @property
    def status(self) -> str:
        """One of "ok", "missing" or "error"."""
        if self.error:
            return "error"
        if self.timestamp is None:
            return "missing"
        return "ok"

    def to_dict(self) -> dict:
        return {
            'file': str(self.filepath),
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'status': self.status,
            'error': self.error,
            'warnings': list(self.warnings),
        }


@dataclass
class BatchResult:
    """Result of a batch extraction run."""
    results: List[TimestampResult] = field(default_factory=list)
    total_files: int = 0
    files_with_timestamp: int = 0
    files_without_timestamp: int = 0
    files_errored: int = 0
    total_time_seconds: float = 0.0
