"""
Core infrastructure module for Basic File Browser.

This module provides the foundational components including configuration
management, logging setup, and custom exceptions.
"""

from .config import StorageConfig, CodecConfig, ListingConfig, CsvConfig, LoggingConfig, Config
from .exceptions import (
    FileBrowserError,
    ConfigurationError,
    NotFoundError,
    PathTraversalError,
    AccessDeniedError,
    ParseError,
    FileReadError,
    ReadTimeoutError,
    DecodeError,
    ValidationError,
)
from .logging_config import setup_logging

__all__ = [
    # Configuration
    'StorageConfig',
    'CodecConfig',
    'ListingConfig',
    'CsvConfig',
    'LoggingConfig',
    'Config',

    # Exceptions
    'FileBrowserError',
    'ConfigurationError',
    'NotFoundError',
    'PathTraversalError',
    'AccessDeniedError',
    'ParseError',
    'FileReadError',
    'ReadTimeoutError',
    'DecodeError',
    'ValidationError',

    # Logging
    'setup_logging',
]

# Version info
__version__ = "1.0.0"
