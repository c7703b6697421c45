"""
Entry models for Basic File Browser.

FileEntry is a tagged union: each variant fixes its own ``type`` tag and
its own set of supported views. CsvProfile is the schema summary the CSV
profiler produces for tabular files.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from typing_extensions import TypedDict

STATUS_READY = 'ready'
STATUS_UPLOADING = 'uploading'
STATUS_PREPROCESSING = 'preprocessing'

METADATA_VERSION = 1


class ColumnProfile(TypedDict):
    """Header name and inferred kind of one CSV column."""
    header: str
    type: str  # 'category' or 'numeric'


def initial_metadata() -> Dict[str, Any]:
    """Fresh metadata mapping in its initial versioned shape."""
    return {'version': METADATA_VERSION, 'namespaces': {}}


@dataclass
class CsvProfile:
    """Column headers, per-column classification and data row count."""
    columns: List[ColumnProfile]
    rows: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'columns': [dict(column) for column in self.columns],
            'rows': self.rows,
        }


@dataclass
class FileEntry:
    """Metadata record shared by every entry variant."""
    file_path: str
    file_name: str
    id: str
    size: int
    metadata: Dict[str, Any] = field(default_factory=initial_metadata)
    status: str = STATUS_READY

    entry_type = 'file'

    def _variant_views(self) -> Dict[str, Any]:
        return {}

    @property
    def is_directory(self) -> bool:
        return self.entry_type == 'directory'

    @property
    def supported_views(self) -> Dict[str, Any]:
        views: Dict[str, Any] = {
            'meta': None,
            'raw': {'size': self.size},
        }
        views.update(self._variant_views())
        return views

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape."""
        return {
            'file_path': self.file_path,
            'file_name': self.file_name,
            'id': self.id,
            'supported_views': self.supported_views,
            'type': self.entry_type,
            'metadata': self.metadata,
            'status': self.status,
        }


@dataclass
class DirectoryEntry(FileEntry):
    """A directory, optionally carrying its listed children."""
    children: Optional[List[FileEntry]] = None

    entry_type = 'directory'

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.children is not None:
            data['children'] = [child.to_dict() for child in self.children]
        return data


@dataclass
class TabularEntry(FileEntry):
    """A CSV file; ``profile`` is filled only outside directory listings."""
    profile: Optional[CsvProfile] = None

    entry_type = 'tabular'

    def _variant_views(self) -> Dict[str, Any]:
        return {'tabular': self.profile.to_dict() if self.profile is not None else {}}


@dataclass
class ScalableImageEntry(FileEntry):
    """An image that can be served through the tiled image view."""

    entry_type = 'scalable_image'

    def _variant_views(self) -> Dict[str, Any]:
        return {'scalable_image': {}}


@dataclass
class PlainFileEntry(FileEntry):
    """Any other file; only the raw view is offered."""

    entry_type = 'file'


ENTRY_CLASSES = {
    'directory': DirectoryEntry,
    'tabular': TabularEntry,
    'scalable_image': ScalableImageEntry,
    'file': PlainFileEntry,
}
