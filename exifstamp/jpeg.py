"""JPEG container scan -- locate the EXIF APP1 segment after SOI.

Only the marker immediately following SOI is inspected; a JPEG whose first
segment is something other than APP1 (e.g. a JFIF APP0) is treated as
carrying no metadata.
"""

import struct
from typing import Optional

from exifstamp.errors import (
    ExifHeaderError,
    MarkerError,
    NotJPEGError,
    TIFFHeaderError,
    TruncatedDataError,
)
from exifstamp.tiff import TIFF_HEADER_OFFSET

SOI = b'\xff\xd8'
MARKER_PREFIX = 0xFF
APP1 = 0xE1

EXIF_SIGNATURE = b'Exif\x00\x00'
TIFF_LE_SIGNATURE = b'II\x2a\x00'
TIFF_BE_SIGNATURE = b'MM\x00\x2a'

# The APP1 length field starts right after SOI + marker.
SEGMENT_START = 4


class MetadataSegment:
    """The APP1 segment body plus the resolved IFD0 position inside it.

    ``data`` is a memoryview into the caller's buffer starting at the APP1
    length field, so ``data[8]`` is the first byte of the TIFF header.
    """
    __slots__ = ('data', 'start', 'ifd0_offset')

    def __init__(self, data: memoryview, start: int, ifd0_offset: int):
        self.data = data
        self.start = start
        self.ifd0_offset = ifd0_offset

    @property
    def end(self) -> int:
        return self.start + len(self.data)

    @property
    def ifd0_start(self) -> int:
        """Offset of IFD0 within ``data``."""
        return TIFF_HEADER_OFFSET + self.ifd0_offset

    def directory(self) -> memoryview:
        """View of the segment from IFD0 to the end."""
        return self.data[self.ifd0_start:]


def locate_metadata_segment(data) -> Optional[MetadataSegment]:
    """Find the EXIF segment of a JPEG buffer.

    Returns None if the first marker after SOI is not APP1. Raises an
    ``ExifError`` subclass when the buffer is not a JPEG or the segment's
    EXIF/TIFF headers are invalid.
    """
    view = memoryview(data)

    if len(view) < 2 or view[0:2] != SOI:
        raise NotJPEGError('Missing SOI marker')
    if len(view) > 2 and view[2] != MARKER_PREFIX:
        raise MarkerError('Expected start of marker')
    if len(view) < 4:
        raise TruncatedDataError('File ends before the first marker after SOI')
    if view[3] != APP1:
        return None

    if len(view) < SEGMENT_START + 2:
        raise TruncatedDataError('File ends inside the APP1 length field')
    # Big-endian per JPEG; includes the two length bytes themselves.
    segment_length = struct.unpack_from('>H', view, SEGMENT_START)[0]
    segment = view[SEGMENT_START:SEGMENT_START + segment_length]

    if segment[2:8] != EXIF_SIGNATURE:
        raise ExifHeaderError('Invalid exif header')

    tiff_header = segment[8:12]
    if tiff_header == TIFF_BE_SIGNATURE:
        raise TIFFHeaderError(
            'Invalid tiff header: big-endian (MM) byte order is not supported')
    if tiff_header != TIFF_LE_SIGNATURE:
        raise TIFFHeaderError('Invalid tiff header')

    if len(segment) < 16:
        raise TruncatedDataError('APP1 segment ends inside the IFD0 offset')
    ifd0_offset = struct.unpack_from('<I', segment, 12)[0]

    result = MetadataSegment(segment, SEGMENT_START, ifd0_offset)
    if result.ifd0_start + 2 > len(segment):
        raise TruncatedDataError(
            f'IFD0 offset {ifd0_offset} points past the end of the APP1 '
            f'segment ({len(segment)} bytes)')
    return result
