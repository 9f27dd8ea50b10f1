# Snapshot cache module

from cache.snapshot import CriticalAlert, LoadOutcome, Snapshot, SnapshotView

__all__ = [
    "CriticalAlert",
    "LoadOutcome",
    "Snapshot",
    "SnapshotView",
]
