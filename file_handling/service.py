"""
Request dispatch for Basic File Browser.

FileService maps the browser's query surface (view=meta, include_children,
action=download, cols=..., view=headers) onto the metadata resolver and the
CSV readers, and turns every application error into a stable status and
message. It knows nothing about HTTP frameworks; app.py adapts its
ServiceResponse objects to Flask responses.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import pandas as pd

from core.config import Config
from core.exceptions import FileBrowserError, ValidationError
from .csv_utils import CsvColumnExtractor
from .metadata import MetadataResolver
from .path_codec import PathCodec
from .path_utils import ensure_real_path_inside

KIND_JSON = 'json'
KIND_CSV = 'csv'
KIND_FILE = 'file'

TRUTHY_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class ServiceResponse:
    """Framework-neutral response: status code, body kind and body."""
    status: int
    kind: str
    body: Any


def error_response(status: int, message: str) -> ServiceResponse:
    return ServiceResponse(status=status, kind=KIND_JSON, body={'error': {'message': message}})


def is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in TRUTHY_VALUES


def parse_column_indices(cols: str) -> List[int]:
    """
    Parse the ``cols`` query parameter.

    Raises:
        ValidationError: If any comma-separated token is not an integer
    """
    indices = []
    for token in cols.split(','):
        try:
            indices.append(int(token.strip()))
        except ValueError:
            raise ValidationError("Column indices must be integers", field='cols', value=cols)
    return indices


def rows_to_csv(rows: List[tuple]) -> str:
    """Render extracted rows as CSV text; holes become empty fields."""
    buffer = io.StringIO()
    pd.DataFrame(rows).to_csv(buffer, header=False, index=False)
    return buffer.getvalue()


class FileService:
    """Entry point for path- and id-based file requests."""

    def __init__(self, resolver: MetadataResolver, extractor: Optional[CsvColumnExtractor] = None):
        self.resolver = resolver
        self.codec = resolver.codec
        self.profiler = resolver.profiler
        self.extractor = extractor or CsvColumnExtractor(
            chunk_size=resolver.profiler.chunk_size,
            read_timeout=resolver.profiler.read_timeout
        )

    @classmethod
    def from_config(cls, config: Config) -> 'FileService':
        """Build the service, its codec and its readers from configuration."""
        resolver = MetadataResolver.from_config(config, codec=PathCodec(config.codec.secret))
        extractor = CsvColumnExtractor(
            chunk_size=config.csv.chunk_size,
            read_timeout=config.csv.read_timeout_seconds
        )
        return cls(resolver, extractor)

    def get_by_id(self, file_id: str, query: Mapping[str, str]) -> ServiceResponse:
        """Decode an opaque id and serve the path it names."""
        try:
            logical_path = self.codec.decode(file_id)
        except FileBrowserError as e:
            return self._handle_error(e)
        return self.get_by_path(logical_path, query)

    def get_by_path(self, logical_path: str, query: Mapping[str, str]) -> ServiceResponse:
        """Serve a logical path according to its query parameters."""
        try:
            return self._dispatch(logical_path, query)
        except FileBrowserError as e:
            return self._handle_error(e)

    def _dispatch(self, logical_path: str, query: Mapping[str, str]) -> ServiceResponse:
        view = query.get('view')

        if view == 'meta':
            entry = self.resolver.resolve(
                logical_path,
                include_children=is_truthy(query.get('include_children'))
            )
            return ServiceResponse(status=200, kind=KIND_JSON, body=entry.to_dict())

        abs_path = self.resolver.to_filesystem_path(logical_path)
        entry = self.resolver.resolve_child(logical_path)

        if entry.is_directory:
            # Directories are only served through the meta view
            return error_response(400, 'Invalid path')

        # Content is only served from files whose resolved location is in the root
        ensure_real_path_inside(abs_path, self.resolver.root_dir)

        if query.get('action') == 'download':
            return ServiceResponse(status=200, kind=KIND_FILE, body=abs_path)

        if entry.entry_type == 'tabular':
            if query.get('cols'):
                indices = parse_column_indices(query['cols'])
                rows = self.extractor.extract(abs_path, indices)
                return ServiceResponse(status=200, kind=KIND_CSV, body=rows_to_csv(rows))
            if view == 'headers':
                profile = self.profiler.profile(abs_path)
                return ServiceResponse(status=200, kind=KIND_JSON, body=profile.to_dict())
            return error_response(400, 'Invalid path')

        if view == 'headers':
            # Profiles exist for tabular files only
            return error_response(400, 'Invalid path')

        # Images and other files are passed through as raw bytes
        return ServiceResponse(status=200, kind=KIND_FILE, body=abs_path)

    def _handle_error(self, error: FileBrowserError) -> ServiceResponse:
        if error.http_status >= 500:
            logging.error(f"Request failed: {error}")
        else:
            logging.info(f"Request rejected ({error.http_status}): {error}")
        return error_response(error.http_status, error.public_message)
