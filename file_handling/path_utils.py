"""
Path utilities for Basic File Browser.

This module provides utilities for logical path normalization, safe
resolution against the storage root, and the extension table used to
classify files.
"""

import os
import posixpath

from core.exceptions import NotFoundError, PathTraversalError

ROOT_LOGICAL_PATH = '.'

# Extension table. Directory stats take precedence over anything listed here.
EXTENSION_TYPES = {
    '.csv': 'tabular',
    '.png': 'scalable_image',
    '.jpg': 'scalable_image',
    '.dzi': 'scalable_image',
}


def normalize_path_separators(path: str) -> str:
    """
    Normalize path separators to forward slashes for cross-platform compatibility.

    Args:
        path: Path string to normalize

    Returns:
        Path with normalized separators
    """
    return path.replace('\\', '/')


def normalize_logical_path(logical_path: str) -> str:
    """
    Normalize a client-supplied path into a root-relative logical path.

    Leading slashes are dropped, separators are made POSIX-style and
    '.'/'..' segments are collapsed. The storage root itself is '.'.

    Raises:
        NotFoundError: If the path contains a null byte
        PathTraversalError: If the path climbs above the root
    """
    if '\x00' in logical_path:
        raise NotFoundError("Illegal character in path", file_path=repr(logical_path))

    normalized = posixpath.normpath(normalize_path_separators(logical_path).lstrip('/'))

    if normalized == '..' or normalized.startswith('../'):
        raise PathTraversalError(f"Path traversal detected: {logical_path}", file_path=logical_path)

    return normalized


def join_logical_path(parent_path: str, name: str) -> str:
    """Join a child name onto a normalized logical path."""
    if parent_path == ROOT_LOGICAL_PATH:
        return name
    return posixpath.join(parent_path, name)


def logical_basename(logical_path: str) -> str:
    """Return the display name of a logical path; the root has an empty name."""
    if logical_path == ROOT_LOGICAL_PATH:
        return ''
    return posixpath.basename(logical_path)


def ensure_safe_path(logical_path: str, base_directory: str) -> str:
    """
    Resolve a normalized logical path to a filesystem path inside base_directory.

    Symlinked parent directories are resolved and must stay inside the
    root. The final component is left alone, so a link inside the root is
    addressed as the link itself; see ensure_real_path_inside.

    Args:
        logical_path: Normalized, root-relative path
        base_directory: Storage root that must contain the path

    Returns:
        Absolute filesystem path

    Raises:
        PathTraversalError: If the resolved path is outside the base directory
    """
    abs_base_dir = os.path.abspath(base_directory)
    abs_file_path = os.path.normpath(os.path.join(abs_base_dir, logical_path))

    if os.path.commonpath([abs_base_dir, abs_file_path]) != abs_base_dir:
        raise PathTraversalError(
            f"Path outside base directory: {logical_path}",
            file_path=logical_path,
            base_directory=base_directory
        )

    if abs_file_path != abs_base_dir:
        real_parent = os.path.realpath(os.path.dirname(abs_file_path))
        if not _is_within(real_parent, os.path.realpath(abs_base_dir)):
            raise PathTraversalError(
                f"Path escapes base directory through a link: {logical_path}",
                file_path=logical_path,
                base_directory=base_directory
            )

    return abs_file_path


def ensure_real_path_inside(abs_file_path: str, base_directory: str) -> str:
    """
    Check that a file's fully resolved location is inside base_directory.

    Used before any file content is read or sent, so a link in the final
    path component cannot serve a target outside the root.

    Raises:
        PathTraversalError: If the resolved target is outside the base directory
    """
    real_path = os.path.realpath(abs_file_path)
    if not _is_within(real_path, os.path.realpath(base_directory)):
        raise PathTraversalError(
            f"Link target outside base directory: {abs_file_path}",
            file_path=abs_file_path,
            base_directory=base_directory
        )
    return real_path


def _is_within(path: str, directory: str) -> bool:
    return os.path.commonpath([directory, path]) == directory


def classify_extension(file_name: str) -> str:
    """
    Classify a non-directory file by its extension.

    The comparison is case-sensitive: 'data.CSV' is a plain file.
    """
    _, ext = posixpath.splitext(file_name)
    return EXTENSION_TYPES.get(ext, 'file')
