"""Scan configuration -- which files a directory walk picks up."""

import json
from dataclasses import dataclass, field, fields
from typing import FrozenSet

# File extensions considered JPEG images
JPEG_EXTENSIONS = frozenset({'.jpg', '.jpeg', '.jpe', '.jfif'})


@dataclass
class ScanConfig:
    """Options for collecting files from a directory.

    Extensions are compared case-insensitively and must include the dot.
    """

    extensions: FrozenSet[str] = field(default_factory=lambda: JPEG_EXTENSIONS)
    recursive: bool = True
    follow_symlinks: bool = False

    @classmethod
    def default(cls) -> 'ScanConfig':
        """Return the built-in defaults."""
        return cls()

    @classmethod
    def from_json(cls, path) -> 'ScanConfig':
        """Load options from a JSON file, falling back to defaults.

        JSON format::

            {
              "extensions": [".jpg", ".jpeg"],
              "recursive": true,
              "follow_symlinks": false
            }

        All keys are optional. Unknown keys raise ValueError.
        """
        with open(str(path), 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f'{path}: expected a JSON object')

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f'{path}: unknown config key(s): {", ".join(unknown)}')

        config = cls.default()
        if 'extensions' in data:
            exts = data['extensions']
            if not isinstance(exts, list) or not all(isinstance(e, str) for e in exts):
                raise ValueError(f'{path}: "extensions" must be a list of strings')
            config.extensions = frozenset(_normalize_ext(e) for e in exts)
        if 'recursive' in data:
            config.recursive = bool(data['recursive'])
        if 'follow_symlinks' in data:
            config.follow_symlinks = bool(data['follow_symlinks'])
        return config


def _normalize_ext(ext: str) -> str:
    ext = ext.strip().lower()
    if not ext.startswith('.'):
        ext = '.' + ext
    return ext
