"""Exceptions raised by the PDF tools pipeline."""


class PdfToolsError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PdfToolsError):
    """The Lambda environment is missing a required setting."""


class ValidationError(PdfToolsError):
    """The request body is missing a field or carries an invalid value.

    The message is meant for the end user and is returned as-is with a 400.
    """


class StorageError(PdfToolsError):
    """Reading from or writing to S3 failed."""

    def __init__(self, message, key=None):
        super().__init__(message)
        self.key = key


class ObjectNotFoundError(StorageError):
    """The requested S3 key does not exist."""


class DocumentDecodeError(PdfToolsError):
    """The source bytes are not a readable PDF document."""
