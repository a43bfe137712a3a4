"""Little-endian TIFF directory decoder for EXIF segments -- stdlib only (struct module).

Reads the entries of a single IFD out of an APP1 segment. Values are decoded
through the ``TIFF_TYPES`` table, which keeps each type's byte width next to
its decode function.
"""

import struct
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional

from exifstamp.errors import TruncatedDataError

# 16-bit tag, 16-bit type, 32-bit count, 32-bit value/offset
ENTRY_SIZE = 12
INLINE_THRESHOLD = 4

# Value offsets are relative to the TIFF header, which starts 8 bytes into
# the segment (2 length bytes + 6 bytes of "Exif\0\0").
TIFF_HEADER_OFFSET = 8

# Tag holding the capture timestamp.
DATETIME_TAG = 0x0132


def _unpack(fmt: str) -> Callable[[bytes], object]:
    def decode(raw):
        return struct.unpack_from(fmt, raw)[0]
    return decode


def _decode_ascii(raw) -> str:
    return bytes(raw).decode('utf-8', errors='replace')


def _decode_undefined(raw) -> bytes:
    return bytes(raw)


def _not_decoded(raw) -> None:
    return None


class TIFFType(NamedTuple):
    """Decode rule for one TIFF type code."""
    name: str
    size: int
    decode: Callable[[bytes], object]
    # True when the value spans all `count` components (strings, blobs);
    # numeric types only decode their first component.
    sized: bool = False


# TIFF type definitions: {type_id: TIFFType(name, element_size_bytes, decoder)}
TIFF_TYPES: Dict[int, TIFFType] = {
    1: TIFFType('BYTE', 1, _unpack('<B')),
    2: TIFFType('ASCII', 1, _decode_ascii, sized=True),
    3: TIFFType('SHORT', 2, _unpack('<H')),
    4: TIFFType('LONG', 4, _unpack('<I')),
    5: TIFFType('RATIONAL', 8, _not_decoded),
    6: TIFFType('SBYTE', 1, _unpack('<b')),
    7: TIFFType('UNDEFINED', 1, _decode_undefined, sized=True),
    8: TIFFType('SSHORT', 2, _unpack('<h')),
    9: TIFFType('SLONG', 4, _unpack('<i')),
    10: TIFFType('SRATIONAL', 8, _not_decoded),
    # Big-endian, unlike every other type here. Unverified against real files.
    11: TIFFType('FLOAT', 4, _unpack('>f')),
    12: TIFFType('DOUBLE', 8, _unpack('<d')),
}

ASCII_TYPE = 2

# Well-known IFD0 tag names
TAG_NAMES: Dict[int, str] = {
    254: 'NewSubfileType', 256: 'ImageWidth', 257: 'ImageLength',
    258: 'BitsPerSample', 259: 'Compression', 262: 'PhotometricInterpretation',
    270: 'ImageDescription', 271: 'Make', 272: 'Model',
    274: 'Orientation', 282: 'XResolution', 283: 'YResolution',
    296: 'ResolutionUnit', 305: 'Software', 306: 'DateTime',
    315: 'Artist', 316: 'HostComputer', 531: 'YCbCrPositioning',
    33432: 'Copyright', 34665: 'ExifIFDPointer', 34853: 'GPSIFDPointer',
}


class IFDEntry:
    """A single decoded IFD (Image File Directory) entry.

    ``value`` holds the decoded Python value for the entry's type, or None
    for rationals and for entries whose value could not be read; in the
    latter case ``error`` says why.
    """
    __slots__ = ('tag_id', 'dtype', 'count', 'value', 'is_inline', 'error')

    def __init__(self, tag_id: int, dtype: int, count: int, value: object,
                 is_inline: bool, error: Optional[str] = None):
        self.tag_id = tag_id
        self.dtype = dtype
        self.count = count
        self.value = value
        self.is_inline = is_inline
        self.error = error

    @property
    def tag_name(self) -> str:
        return TAG_NAMES.get(self.tag_id, f'Tag_{self.tag_id}')

    @property
    def type_name(self) -> str:
        return TIFF_TYPES[self.dtype].name

    @property
    def total_size(self) -> int:
        return TIFF_TYPES[self.dtype].size * self.count

    def __repr__(self):
        return (f'IFDEntry(tag=0x{self.tag_id:04x}, type={self.type_name}, '
                f'count={self.count}, value={self.value!r})')


def decode_entry(record, segment_bytes) -> Optional[IFDEntry]:
    """Decode one 12-byte directory record.

    Returns None for unknown type codes. Values of up to 4 bytes are read
    from the record itself; larger ones are read from ``segment_bytes`` at
    the stored offset plus ``TIFF_HEADER_OFFSET``.
    """
    if len(record) < ENTRY_SIZE:
        raise TruncatedDataError(
            f'IFD entry is {len(record)} bytes, expected {ENTRY_SIZE}')

    tag_id, dtype, count = struct.unpack_from('<HHI', record)
    tiff_type = TIFF_TYPES.get(dtype)
    if tiff_type is None:
        return None

    total = tiff_type.size * count
    if total <= INLINE_THRESHOLD:
        raw = record[8:12]
        is_inline = True
    else:
        offset = struct.unpack_from('<I', record, 8)[0] + TIFF_HEADER_OFFSET
        raw = segment_bytes[offset:offset + total]
        is_inline = False
        if len(raw) < total:
            return IFDEntry(
                tag_id, dtype, count, None, is_inline,
                error=(f'{tiff_type.name} value of {total} bytes at segment '
                       f'offset {offset} runs past the end of the segment '
                       f'({len(segment_bytes)} bytes)'))

    if tiff_type.sized:
        raw = raw[:total]
    elif len(raw) < tiff_type.size:
        # Zero-count DOUBLE: the 4 inline bytes cannot hold one component.
        return IFDEntry(tag_id, dtype, count, None, is_inline,
                        error=f'{tiff_type.name} entry has no components')
    return IFDEntry(tag_id, dtype, count, tiff_type.decode(raw), is_inline)


def parse_directory(dir_bytes, segment_bytes,
                    diagnostics: Optional[List[str]] = None) -> Iterator[IFDEntry]:
    """Yield the entries of the IFD at the start of ``dir_bytes``.

    Entries with unknown type codes are skipped and, if ``diagnostics`` is
    given, a note is appended to it. Entries are decoded only as the
    iteration reaches them.
    """
    if len(dir_bytes) < 2:
        raise TruncatedDataError('IFD entry count runs past the end of the segment')

    num_entries = struct.unpack_from('<H', dir_bytes)[0]
    for i in range(num_entries):
        start = 2 + ENTRY_SIZE * i
        record = dir_bytes[start:start + ENTRY_SIZE]
        if len(record) < ENTRY_SIZE:
            raise TruncatedDataError(
                f'IFD entry {i + 1} of {num_entries} runs past the end of the segment')

        entry = decode_entry(record, segment_bytes)
        if entry is None:
            if diagnostics is not None:
                tag_id, dtype = struct.unpack_from('<HH', record)
                diagnostics.append(
                    f'Skipped tag 0x{tag_id:04x}: data format {dtype} not implemented')
            continue
        yield entry


def find_entry(entries, tag_id: int) -> Optional[IFDEntry]:
    """Return the first entry with the given tag, stopping the iteration there."""
    for entry in entries:
        if entry.tag_id == tag_id:
            return entry
    return None
