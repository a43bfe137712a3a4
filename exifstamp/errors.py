"""Exception classes for exifstamp.

Every structural problem found while decoding a JPEG/EXIF buffer is raised
as a subclass of ``ExifError``. Absence of metadata is never an error; the
extractor returns ``None`` for that case.
"""


class ExifError(ValueError):
    """Base exception for all exifstamp decoding errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class NotJPEGError(ExifError):
    """Raised when the buffer does not start with the SOI marker."""
    pass


class MarkerError(ExifError):
    """Raised when the byte after SOI is not a marker prefix."""
    pass


class ExifHeaderError(ExifError):
    """Raised when the APP1 segment lacks the ``Exif\\0\\0`` signature."""
    pass


class TIFFHeaderError(ExifError):
    """Raised for a TIFF header that is not little-endian TIFF."""
    pass


class TruncatedDataError(ExifError):
    """Raised when a header, directory or value runs past the buffer."""
    pass


class EntryTypeError(ExifError):
    """Raised when the DateTime entry is not an ASCII string."""
    pass


class TimestampFormatError(ExifError):
    """Raised when the DateTime string is not ``YYYY:MM:DD HH:MM:SS``."""
    pass
