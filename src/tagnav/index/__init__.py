"""Component indexing: extraction, the tag index and workspace scanning."""

from tagnav.index.models import ComponentRecord, Span
from tagnav.index.scanner import ScanStats, WorkspaceScanner
from tagnav.index.tag_index import IndexDelta, TagIndex

__all__ = [
    "ComponentRecord",
    "IndexDelta",
    "ScanStats",
    "Span",
    "TagIndex",
    "WorkspaceScanner",
]
