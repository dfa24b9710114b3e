#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the fb2md library.

This module defines specialized exception classes for the error conditions
that can abort a single FB2 conversion. Non-fatal problems (an embedded
image that fails to decode or write) are logged as warnings instead of
being raised.

Exception Hierarchy
-------------------
- Fb2MdError (base exception)

  - ValidationError (parameter/option validation)

  - FileError (file access and I/O)
    - InputFileError (input missing or unreadable)
    - AssetDirectoryError (image output directory cannot be created)
    - OutputWriteError (final Markdown cannot be written)

  - FormatError (unsupported input formats)

  - ParsingError (input document parsing failures)
    - UnsupportedEncodingError (unknown declared character encoding)

"""

from typing import Any


class Fb2MdError(Exception):
    """Base exception class for all fb2md-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Fb2MdError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class FileError(Fb2MdError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the problematic file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class InputFileError(FileError):
    """Exception raised when the input document cannot be read."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the input file error."""
        if message is None:
            message = f"Cannot read input file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class AssetDirectoryError(FileError):
    """Exception raised when the image output directory cannot be created."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the asset directory error."""
        if message is None:
            message = f"Failed to create images directory: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class OutputWriteError(FileError):
    """Exception raised when the Markdown output cannot be written.

    Parameters
    ----------
    file_path : str
        Path to the output file that could not be written
    message : str, optional
        Custom error message. If not provided, uses default message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the output write error."""
        if message is None:
            message = f"Failed to write output file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FormatError(Fb2MdError):
    """Exception raised when attempting to convert an unsupported file format.

    Parameters
    ----------
    message : str, optional
        Custom error message
    format_type : str, optional
        The unsupported format type (file extension)
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str | None = None,
        format_type: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the format error."""
        if message is None:
            if format_type:
                message = f"Unsupported format: '{format_type}'"
            else:
                message = "File format is not supported for conversion"
        super().__init__(message, original_error=original_error)
        self.format_type = format_type


class ParsingError(Fb2MdError):
    """Exception raised when document parsing fails.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    Attributes
    ----------
    parsing_stage : str or None
        Where in the parsing process the error occurred

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class UnsupportedEncodingError(ParsingError):
    """Exception raised when the XML declaration names an unknown encoding.

    Parameters
    ----------
    encoding : str
        The declared encoding name
    message : str, optional
        Custom error message. If not provided, uses default message

    """

    def __init__(self, encoding: str, message: str | None = None):
        """Initialize the unsupported encoding error."""
        if message is None:
            message = f"Unsupported encoding: {encoding}"
        super().__init__(message, parsing_stage="encoding_detection")
        self.encoding = encoding


__all__ = [
    "Fb2MdError",
    "ValidationError",
    "FileError",
    "InputFileError",
    "AssetDirectoryError",
    "OutputWriteError",
    "FormatError",
    "ParsingError",
    "UnsupportedEncodingError",
]
