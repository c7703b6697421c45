"""
File handling module for Basic File Browser.

This module provides path addressing, metadata resolution, directory
listing, CSV profiling and column extraction, and the request dispatch
that ties them together.
"""

# Path utilities
from .path_utils import (
    EXTENSION_TYPES,
    classify_extension,
    ensure_real_path_inside,
    ensure_safe_path,
    normalize_logical_path,
    join_logical_path,
    normalize_path_separators,
)

# Identifier codec
from .path_codec import PathCodec, derive_key_and_iv

# Entry models
from .models import (
    CsvProfile,
    ColumnProfile,
    FileEntry,
    DirectoryEntry,
    TabularEntry,
    ScalableImageEntry,
    PlainFileEntry,
)

# CSV utilities
from .csv_utils import (
    CATEGORY_MAX_DISTINCT,
    CsvProfiler,
    CsvColumnExtractor,
    parse_header_line,
    get_csv_profile,
    get_csv_columns,
)

# Metadata and listing
from .listing import DirectoryLister, sort_entries
from .metadata import MetadataResolver

# Request dispatch
from .service import FileService, ServiceResponse

__all__ = [
    # Path utilities
    'EXTENSION_TYPES',
    'classify_extension',
    'ensure_real_path_inside',
    'ensure_safe_path',
    'normalize_logical_path',
    'join_logical_path',
    'normalize_path_separators',

    # Identifier codec
    'PathCodec',
    'derive_key_and_iv',

    # Entry models
    'CsvProfile',
    'ColumnProfile',
    'FileEntry',
    'DirectoryEntry',
    'TabularEntry',
    'ScalableImageEntry',
    'PlainFileEntry',

    # CSV utilities
    'CATEGORY_MAX_DISTINCT',
    'CsvProfiler',
    'CsvColumnExtractor',
    'parse_header_line',
    'get_csv_profile',
    'get_csv_columns',

    # Metadata and listing
    'DirectoryLister',
    'sort_entries',
    'MetadataResolver',

    # Request dispatch
    'FileService',
    'ServiceResponse',
]

# Version info
__version__ = "1.0.0"
