"""Shared test fixtures -- synthetic JPEG files with EXIF APP1 segments."""

import struct
import pytest

SOI = b'\xff\xd8'
EOI = b'\xff\xd9'
DATETIME_TAG = 0x0132

# Stand-in for compressed image data after the metadata segment
_SCAN_DATA = b'\xff\xdb\x00\x04\x00\x00' + b'\x11' * 32


def ascii_entry(tag_id, text, nul=True):
    """Return an (tag_id, type_id, count, value) tuple for an ASCII string."""
    raw = text.encode('ascii') + (b'\x00' if nul else b'')
    return (tag_id, 2, len(raw), raw)


def build_tiff_le(entries, ifd0_offset=8, entry_count=None,
                  tiff_header=b'II\x2a\x00'):
    """Build a little-endian TIFF structure as embedded in an EXIF segment.

    Args:
        entries: List of (tag_id, type_id, count, value) tuples.
            An int is packed as-is into the 4-byte value field (so it can
            also be a raw offset). Bytes of up to 4 are stored inline,
            zero-padded; longer bytes go to the data area after the IFD.
        ifd0_offset: IFD0 offset written into the header. Anything other
            than 8 leaves the IFD at 8 and only lies in the header.
        entry_count: Entry count written into the IFD, if different from
            ``len(entries)``.
        tiff_header: The 4-byte byte order + magic field.

    Returns:
        bytes: TIFF header, IFD0 and data area.
    """
    num_entries = len(entries) if entry_count is None else entry_count
    ifd = struct.pack('<H', num_entries)

    # Out-of-line data starts after: header(8) + ifd_count(2) + entries(12*n) + next_ifd(4)
    data_offset = 8 + 2 + 12 * len(entries) + 4
    data_bytes = b''

    for tag_id, type_id, count, value in entries:
        ifd += struct.pack('<HHI', tag_id, type_id, count)
        if isinstance(value, bytes):
            if len(value) <= 4:
                ifd += value.ljust(4, b'\x00')
            else:
                ifd += struct.pack('<I', data_offset + len(data_bytes))
                data_bytes += value
        else:
            ifd += struct.pack('<I', value)

    ifd += struct.pack('<I', 0)  # No next IFD
    header = tiff_header + struct.pack('<I', ifd0_offset)
    return header + ifd + data_bytes


def build_exif_jpeg(entries=(), marker=0xE1, exif_signature=b'Exif\x00\x00',
                    segment_length=None, **tiff_kwargs):
    """Build a minimal JPEG whose first segment is an EXIF APP1 segment.

    Args:
        entries: IFD0 entries, see ``build_tiff_le``.
        marker: Marker code of the first segment after SOI.
        exif_signature: The 6 bytes following the APP1 length field.
        segment_length: Override for the APP1 length field.
        **tiff_kwargs: Passed to ``build_tiff_le``.

    Returns:
        bytes: Complete JPEG file content.
    """
    body = exif_signature + build_tiff_le(list(entries), **tiff_kwargs)
    if segment_length is None:
        segment_length = len(body) + 2
    segment = bytes([0xFF, marker]) + struct.pack('>H', segment_length) + body
    return SOI + segment + _SCAN_DATA + EOI


def build_jfif_jpeg():
    """Build a JPEG that starts with a JFIF APP0 segment and has no EXIF."""
    app0_body = b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
    app0 = b'\xff\xe0' + struct.pack('>H', len(app0_body) + 2) + app0_body
    return SOI + app0 + _SCAN_DATA + EOI


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_jpeg(tmp_path):
    """A JPEG with DateTime 2023:07:04 10:30:00 among other IFD0 entries."""
    entries = [
        (0x010f, 2, 6, b'Canon\x00'),                  # Make
        (0x0112, 3, 1, 1),                             # Orientation
        ascii_entry(DATETIME_TAG, '2023:07:04 10:30:00'),
        (0x8769, 4, 1, 0),                             # ExifIFDPointer
    ]
    filepath = tmp_path / 'IMG_0001.jpg'
    filepath.write_bytes(build_exif_jpeg(entries))
    return filepath


@pytest.fixture
def tmp_jpeg_no_exif(tmp_path):
    """A JFIF JPEG without an EXIF segment."""
    filepath = tmp_path / 'plain.jpg'
    filepath.write_bytes(build_jfif_jpeg())
    return filepath


@pytest.fixture
def tmp_jpeg_bad_date(tmp_path):
    """A JPEG whose DateTime uses dashes instead of colons."""
    filepath = tmp_path / 'bad_date.jpg'
    filepath.write_bytes(build_exif_jpeg([ascii_entry(DATETIME_TAG, '2023-07-04 10:30:00')]))
    return filepath


@pytest.fixture
def photo_dir(tmp_path):
    """A directory tree with timestamped, plain, broken and non-JPEG files."""
    root = tmp_path / 'photos'
    (root / '2023' / 'july').mkdir(parents=True)

    (root / 'a.jpg').write_bytes(build_exif_jpeg(
        [ascii_entry(DATETIME_TAG, '2021:01:02 03:04:05')]))
    (root / '2023' / 'july' / 'b.JPEG').write_bytes(build_exif_jpeg(
        [ascii_entry(DATETIME_TAG, '2023:07:04 10:30:00')]))
    (root / '2023' / 'c.jpg').write_bytes(build_jfif_jpeg())
    (root / '2023' / 'broken.jpg').write_bytes(b'not a jpeg at all')
    (root / 'notes.txt').write_text('not an image')
    return root
