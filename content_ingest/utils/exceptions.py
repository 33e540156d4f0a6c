"""
Custom exceptions for the application.
"""


class IngestException(Exception):
    """Base exception for all bulk-upload errors."""
    pass


class InvalidUploadError(IngestException):
    """Raised when the upload request itself is malformed."""
    pass


class UnsupportedUploadTypeError(InvalidUploadError):
    """Raised when the upload type is not one of mcq, revision or chapters."""
    pass


class FileDecodeError(InvalidUploadError):
    """Raised when an uploaded file cannot be parsed."""
    pass


class StorageError(IngestException):
    """Raised when the content store fails."""
    pass


class ResetError(StorageError):
    """Raised when a reset-and-reseed step fails."""
    pass


class ChapterIndexError(StorageError):
    """Raised when the chapter index cannot be built."""
    pass
