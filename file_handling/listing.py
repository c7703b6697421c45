"""
Directory listing for Basic File Browser.

Children are resolved concurrently in abbreviated mode. A child that fails
to resolve is logged and left out, so one unreadable entry never fails the
whole listing. The result is sorted after all children are in, which makes
repeated listings of an unchanged directory identical.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, List, Tuple

from core.exceptions import AccessDeniedError, FileBrowserError, FileReadError, NotFoundError
from .models import FileEntry
from .path_utils import ensure_safe_path, join_logical_path, normalize_logical_path

if TYPE_CHECKING:
    from .metadata import MetadataResolver

ORDER_DIRECTORIES_FIRST = 'directories_first'
ORDER_ALPHABETICAL = 'alphabetical'


def name_collation_key(name: str) -> Tuple[str, str]:
    """
    Case-sensitive, locale-style collation key.

    Names compare case-insensitively first; names equal up to case put the
    lowercase spelling first ('a.txt' before 'A.txt').
    """
    return name.casefold(), name.swapcase()


def sort_entries(entries: List[FileEntry], order: str = ORDER_DIRECTORIES_FIRST) -> List[FileEntry]:
    """Sort entries by the configured listing policy."""
    if order == ORDER_ALPHABETICAL:
        return sorted(entries, key=lambda entry: name_collation_key(entry.file_name))
    return sorted(entries, key=lambda entry: (not entry.is_directory, name_collation_key(entry.file_name)))


class DirectoryLister:
    """Lists the visible immediate children of a directory."""

    def __init__(self, resolver: 'MetadataResolver', order: str = ORDER_DIRECTORIES_FIRST,
                 hidden_prefix: str = '.', max_workers: int = 8):
        self.resolver = resolver
        self.order = order
        self.hidden_prefix = hidden_prefix
        self.max_workers = max_workers

    def _read_names(self, logical_path: str) -> List[str]:
        abs_path = ensure_safe_path(logical_path, self.resolver.root_dir)
        try:
            return os.listdir(abs_path)
        except (FileNotFoundError, NotADirectoryError):
            raise NotFoundError("Directory not found", file_path=logical_path)
        except PermissionError:
            raise AccessDeniedError("Permission denied listing directory", file_path=logical_path)
        except OSError as e:
            raise FileReadError(f"Error listing directory: {e}", file_path=logical_path, operation="list_directory")

    def list(self, dir_path: str) -> List[FileEntry]:
        """
        List a directory's children.

        Args:
            dir_path: Logical path of the directory

        Returns:
            Sorted list of abbreviated entries, hidden names excluded

        Raises:
            NotFoundError: If the directory does not exist
            AccessDeniedError: If the directory cannot be read
            PathTraversalError: If the path is outside the storage root
        """
        logical_path = normalize_logical_path(dir_path)
        names = [name for name in self._read_names(logical_path) if not name.startswith(self.hidden_prefix)]
        if not names:
            return []

        entries = []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names)), thread_name_prefix='listing') as executor:
            futures = [
                (name, executor.submit(self.resolver.resolve_child, join_logical_path(logical_path, name)))
                for name in names
            ]
            for name, future in futures:
                try:
                    entries.append(future.result())
                except (FileBrowserError, OSError) as e:
                    logging.warning(f"Could not get stats for file {name}: {e}")

        return sort_entries(entries, self.order)
