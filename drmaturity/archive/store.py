"""
archive/store.py
----------------
Local, append-only, file-based archive of assessment snapshots.

Snapshots are written as JSON under ``~/.drmaturity/snapshots/``, one file per
site.  Records are only ever appended: an existing snapshot is never rewritten,
and saving a snapshot whose id is already stored is a no-op.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from drmaturity.archive.snapshot import AssessmentSnapshot

logger = logging.getLogger(__name__)

# Root directory for all archived snapshots
_DEFAULT_STORE_ROOT = Path.home() / ".drmaturity" / "snapshots"


def _site_filename(site_id: int) -> str:
    return f"site-{site_id}.json"


class LocalSnapshotStore:
    """
    Persists and retrieves :class:`~drmaturity.archive.snapshot.AssessmentSnapshot`
    records as JSON files on the local filesystem.

    Store layout::

        <store_root>/
            site-1.json   # snapshots for site 1, oldest first
            site-2.json
            …

    Each JSON file has the structure::

        {
            "site_id": 1,
            "snapshots": [ { ...snapshot dict... }, ... ]
        }

    Args:
        store_root: Directory in which to create snapshot files.
                    Defaults to ``~/.drmaturity/snapshots/``.
    """

    def __init__(self, store_root: Optional[Path] = None) -> None:
        self._root: Path = Path(store_root) if store_root else _DEFAULT_STORE_ROOT

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(self, snapshot: AssessmentSnapshot) -> Path:
        """
        Append a snapshot to its site's archive file.

        Returns:
            The :class:`~pathlib.Path` of the archive file.

        Raises:
            ValueError: If the snapshot has no site id, or the existing
                        archive file cannot be read.
        """
        if snapshot.site_id is None:
            raise ValueError("Cannot archive a snapshot without a site id.")

        self._ensure_root()
        store_path = self._store_path(snapshot.site_id)
        payload = self._load_raw(store_path, snapshot.site_id, strict=True)

        existing_ids = {s.get("snapshot_id") for s in payload["snapshots"]}
        if snapshot.snapshot_id not in existing_ids:
            payload["snapshots"].append(snapshot.to_dict())
            self._write_raw(store_path, payload)
            logger.debug(
                "Archived snapshot %s for site %s to %s",
                snapshot.snapshot_id, snapshot.site_id, store_path,
            )
        else:
            logger.debug(
                "Snapshot %s already archived; skipping duplicate write.",
                snapshot.snapshot_id,
            )

        return store_path

    def load_all(self, site_id: int) -> List[AssessmentSnapshot]:
        """Return all snapshots for *site_id*, oldest first."""
        store_path = self._store_path(site_id)
        if not store_path.exists():
            return []

        payload = self._load_raw(store_path, site_id)
        snapshots: List[AssessmentSnapshot] = []
        for raw in payload["snapshots"]:
            try:
                snapshots.append(AssessmentSnapshot.from_dict(raw))
            except (KeyError, ValueError, TypeError) as exc:
                logger.warning("Skipping corrupt snapshot entry in %s: %s", store_path, exc)
        return snapshots

    def load_latest(self, site_id: int) -> Optional[AssessmentSnapshot]:
        snapshots = self.load_all(site_id)
        return snapshots[-1] if snapshots else None

    def get(self, site_id: int, snapshot_id: str) -> Optional[AssessmentSnapshot]:
        for snapshot in self.load_all(site_id):
            if snapshot.snapshot_id == snapshot_id:
                return snapshot
        return None

    def score_trend(self, site_id: int) -> List[float]:
        """
        Overall scores for a site in chronological order.

        Example::

            store.score_trend(1)
            # [2.8, 3.1, 3.6]
        """
        return [s.overall_value for s in self.load_all(site_id)]

    def list_sites(self) -> List[int]:
        """Site ids that have at least one archive file."""
        if not self._root.exists():
            return []
        site_ids = []
        for path in self._root.glob("site-*.json"):
            try:
                site_ids.append(int(path.stem.split("-", 1)[1]))
            except ValueError:
                logger.warning("Ignoring unexpected archive file %s", path)
        return sorted(site_ids)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _store_path(self, site_id: int) -> Path:
        return self._root / _site_filename(site_id)

    def _ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def _load_raw(self, path: Path, site_id: int, strict: bool = False) -> Dict:
        """
        Load the raw JSON payload from *path*.

        Missing files yield an empty payload.  Corrupted files yield an empty
        payload for reads; with ``strict`` (used before writing) they raise
        ``ValueError`` so an unreadable archive is never overwritten.
        """
        if not path.exists():
            return {"site_id": site_id, "snapshots": []}

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("Root element is not a dict.")
            if not isinstance(data.get("snapshots"), list):
                raise ValueError("Missing or invalid 'snapshots' list.")
            return data
        except (json.JSONDecodeError, ValueError, OSError) as exc:
            if strict:
                raise ValueError(f"Refusing to overwrite unreadable archive {path}: {exc}") from exc
            logger.warning(
                "Corrupt snapshot archive at %s; treating as empty. Reason: %s",
                path, exc,
            )
            return {"site_id": site_id, "snapshots": []}

    @staticmethod
    def _write_raw(path: Path, payload: Dict) -> None:
        """Write *payload* to a temp file, then rename it over *path*."""
        tmp_path = path.with_suffix(".tmp")
        try:
            tmp_path.write_text(
                json.dumps(payload, indent=2, default=str),
                encoding="utf-8",
            )
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"LocalSnapshotStore(root={self._root!r})"
