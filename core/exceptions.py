"""
Custom exceptions for Basic File Browser.

This module defines application-specific exceptions that provide
clear error messages and context for different types of failures.
Each exception also carries the stable status and public message that
the request layer reports to clients.
"""

from typing import Optional, Any


class FileBrowserError(Exception):
    """Base exception for all File Browser application errors."""

    http_status = 500
    public_message = "Server error"

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(FileBrowserError):
    """Raised when there are issues with configuration loading or validation."""

    def __init__(self, message: str, config_file: Optional[str] = None, field: Optional[str] = None):
        context = {}
        if config_file:
            context['config_file'] = config_file
        if field:
            context['field'] = field
        super().__init__(message, context)


class NotFoundError(FileBrowserError):
    """Raised when a logical path does not name an existing file or directory."""

    http_status = 404
    public_message = "File not found"

    def __init__(self, message: str, file_path: Optional[str] = None):
        context = {}
        if file_path is not None:
            context['file_path'] = file_path
        super().__init__(message, context)


class PathTraversalError(FileBrowserError):
    """Raised when a path resolves outside the storage root."""

    http_status = 400
    public_message = "Invalid path"

    def __init__(self, message: str, file_path: Optional[str] = None, base_directory: Optional[str] = None):
        context = {}
        if file_path is not None:
            context['file_path'] = file_path
        if base_directory:
            context['base_directory'] = base_directory
        super().__init__(message, context)


class AccessDeniedError(FileBrowserError):
    """Raised when the operating system refuses access to a path."""

    http_status = 403
    public_message = "Permission denied"

    def __init__(self, message: str, file_path: Optional[str] = None):
        context = {}
        if file_path is not None:
            context['file_path'] = file_path
        super().__init__(message, context)


class ParseError(FileBrowserError):
    """Raised when a CSV file has malformed row framing."""

    http_status = 422
    public_message = "Malformed CSV file"

    def __init__(self, message: str, file_path: Optional[str] = None, line: Optional[int] = None):
        context = {}
        if file_path is not None:
            context['file_path'] = file_path
        if line is not None:
            context['line'] = line
        super().__init__(message, context)


class FileReadError(FileBrowserError):
    """Raised when reading a file fails for a reason other than absence or permissions."""

    http_status = 500
    public_message = "Could not read file"

    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None):
        context = {}
        if file_path is not None:
            context['file_path'] = file_path
        if operation:
            context['operation'] = operation
        super().__init__(message, context)


class ReadTimeoutError(FileReadError):
    """Raised when a streaming read does not finish within the configured timeout."""


class DecodeError(FileBrowserError):
    """Raised when an opaque file identifier cannot be decoded."""

    http_status = 404
    public_message = "File not found"

    def __init__(self, message: str, file_id: Optional[str] = None):
        context = {}
        if file_id is not None:
            context['file_id'] = file_id
        super().__init__(message, context)


class ValidationError(FileBrowserError):
    """Raised when request parameters fail validation."""

    http_status = 400
    public_message = "Invalid request"

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        context = {}
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)
        super().__init__(message, context)
