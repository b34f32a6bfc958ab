class ConversionError(Exception):
    """Base class for every error raised by office2pdf."""

    def __init__(self, message: str, *, cause: Exception = None):
        super().__init__(message)
        self.__cause__ = cause  # Optional chaining for debugging


class UnsupportedFormatError(ConversionError):
    """Raised when the file type cannot be converted."""

    def __init__(self, extension: str, message: str = None, *, cause: Exception = None):
        self.extension = extension
        if message is None:
            message = f"Unsupported format: {extension!r}"
        super().__init__(message, cause=cause)


class ConversionIOError(ConversionError):
    """Raised when the byte source of a conversion cannot be read."""


class ParseError(ConversionError):
    """Raised when the input is not a valid instance of its claimed format."""


class FileEncryptedError(ParseError):
    """Raised when the document is password protected."""

    def __init__(self, message: str = None, *, cause: Exception = None):
        if message is None:
            message = "File is encrypted or password-protected"
        super().__init__(message, cause=cause)


class ZipBombError(ParseError):
    """Raised when a ZIP container looks like a decompression bomb."""


class RenderError(ConversionError):
    """Raised when markup generation or backend compilation fails."""
