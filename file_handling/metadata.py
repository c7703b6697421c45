"""
File metadata resolution for Basic File Browser.

This module turns a logical path into a classified FileEntry. Directory
entries can carry their listed children, and CSV entries carry a column
profile unless they are resolved as part of a directory listing.
"""

import logging
import os
import stat
from typing import Optional

from core.config import Config
from core.exceptions import AccessDeniedError, FileReadError, NotFoundError
from .csv_utils import CsvProfiler
from .listing import DirectoryLister, ORDER_DIRECTORIES_FIRST
from .models import ENTRY_CLASSES, FileEntry
from .path_codec import PathCodec
from .path_utils import classify_extension, ensure_safe_path, logical_basename, normalize_logical_path


class MetadataResolver:
    """Resolves logical paths under a fixed storage root into FileEntry records."""

    def __init__(
        self,
        root_dir: str,
        codec: PathCodec,
        profiler: Optional[CsvProfiler] = None,
        profile_on_resolve: bool = True,
        listing_order: str = ORDER_DIRECTORIES_FIRST,
        hidden_prefix: str = '.',
        max_workers: int = 8
    ):
        self.root_dir = os.path.abspath(root_dir)
        self.codec = codec
        self.profiler = profiler or CsvProfiler()
        self.profile_on_resolve = profile_on_resolve
        self.lister = DirectoryLister(
            self,
            order=listing_order,
            hidden_prefix=hidden_prefix,
            max_workers=max_workers
        )

    @classmethod
    def from_config(cls, config: Config, codec: Optional[PathCodec] = None) -> 'MetadataResolver':
        """Build a resolver from the application configuration."""
        return cls(
            root_dir=config.storage.get_root_path(),
            codec=codec or PathCodec(config.codec.secret),
            profiler=CsvProfiler(
                chunk_size=config.csv.chunk_size,
                read_timeout=config.csv.read_timeout_seconds
            ),
            profile_on_resolve=config.csv.profile_on_resolve,
            listing_order=config.listing.order,
            hidden_prefix=config.listing.hidden_prefix,
            max_workers=config.listing.max_workers
        )

    def to_filesystem_path(self, logical_path: str) -> str:
        """Map a logical path to its absolute location under the storage root."""
        return ensure_safe_path(normalize_logical_path(logical_path), self.root_dir)

    def _lstat(self, logical_path: str, abs_path: str) -> os.stat_result:
        try:
            return os.lstat(abs_path)
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError("File not found", file_path=logical_path)
        except PermissionError:
            raise AccessDeniedError("Permission denied", file_path=logical_path)
        except OSError as e:
            raise FileReadError(f"Could not stat file: {e}", file_path=logical_path, operation="stat")

    def resolve(self, logical_path: str, include_children: bool = False, child: bool = False) -> FileEntry:
        """
        Build the FileEntry for a logical path.

        Args:
            logical_path: Root-relative path of the file or directory
            include_children: Attach the directory listing (directories only)
            child: Abbreviated mode used inside listings; skips CSV profiling

        Returns:
            The entry variant matching the path's type

        Raises:
            PathTraversalError: If the path resolves outside the storage root
            NotFoundError: If nothing exists at the path
            AccessDeniedError: If the path cannot be stat'ed
            ParseError: If CSV profiling finds malformed rows
            FileReadError: If stat or profiling fails otherwise
        """
        normalized = normalize_logical_path(logical_path)
        abs_path = ensure_safe_path(normalized, self.root_dir)
        stats = self._lstat(normalized, abs_path)

        file_name = logical_basename(normalized)
        if stat.S_ISDIR(stats.st_mode):
            entry_type = 'directory'
        elif stat.S_ISLNK(stats.st_mode):
            # Links are reported, never profiled through
            entry_type = 'file'
        else:
            entry_type = classify_extension(file_name)

        entry = ENTRY_CLASSES[entry_type](
            file_path=normalized,
            file_name=file_name,
            id=self.codec.encode(normalized),
            size=stats.st_size
        )

        if entry_type == 'directory' and include_children:
            entry.children = self.lister.list(normalized)
        elif entry_type == 'tabular' and not child and self.profile_on_resolve:
            entry.profile = self.profiler.profile(abs_path)

        logging.debug(f"Resolved {normalized} as {entry_type}")
        return entry

    def resolve_child(self, logical_path: str) -> FileEntry:
        """Abbreviated resolution used for directory listings."""
        return self.resolve(logical_path, child=True)
