"""archive sub-package — snapshots, the local snapshot store, comparison and export."""

from drmaturity.archive.snapshot import AssessmentSnapshot, SnapshotBuilder, build_snapshot
from drmaturity.archive.store import LocalSnapshotStore
from drmaturity.archive.comparison import classify_change, compare_snapshots
from drmaturity.archive.export import snapshot_to_frame, summary_frame

__all__ = [
    "AssessmentSnapshot",
    "SnapshotBuilder",
    "build_snapshot",
    "LocalSnapshotStore",
    "classify_change",
    "compare_snapshots",
    "snapshot_to_frame",
    "summary_frame",
]
