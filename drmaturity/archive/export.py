"""
archive/export.py
-----------------
Flattening of snapshots into tabular form for spreadsheet export.

The nested dimension → asset → parameter tree becomes one row per recorded
parameter.  An unrated parameter exports a ``ParameterScore`` of ``0``; a
missing value, note or timestamp is rendered as ``"N/A"``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from drmaturity.archive.snapshot import AssessmentSnapshot
from drmaturity.scoring.calculator import round_score

DETAIL_COLUMNS = [
    "Dimension",
    "DimensionScore",
    "AssetName",
    "AssetType",
    "AssetScore",
    "ParameterName",
    "ParameterScore",
    "ParameterValue",
    "Notes",
    "LastUpdated",
]

SUMMARY_COLUMNS = [
    "SnapshotId",
    "Site",
    "Date",
    "Score",
    "AssessedBy",
    "AssessedOn",
    "Status",
]


def _format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def snapshot_to_frame(snapshot: AssessmentSnapshot) -> pd.DataFrame:
    """
    Return a DataFrame with one row per (dimension, asset, parameter).

    Columns are listed in :data:`DETAIL_COLUMNS`.  Unscored parameters export
    a ``ParameterScore`` of ``0``.
    """
    rows: List[Dict[str, Any]] = []
    for dimension in snapshot.dimensions:
        for asset in dimension.assets:
            for param in asset.parameters:
                rows.append({
                    "Dimension": dimension.name,
                    "DimensionScore": round_score(dimension.score),
                    "AssetName": asset.name,
                    "AssetType": asset.type,
                    "AssetScore": asset.score,
                    "ParameterName": param.name,
                    "ParameterScore": param.score if param.score is not None else 0,
                    "ParameterValue": param.value or "N/A",
                    "Notes": param.notes or "N/A",
                    "LastUpdated": _format_timestamp(param.last_updated),
                })
    return pd.DataFrame(rows, columns=DETAIL_COLUMNS)


def summary_frame(snapshots: Iterable[AssessmentSnapshot]) -> pd.DataFrame:
    """Return a DataFrame with one summary row per snapshot."""
    rows = [
        {
            "SnapshotId": s.snapshot_id,
            "Site": s.site_name,
            "Date": s.date.strftime("%Y-%m-%d"),
            "Score": s.overall_score,
            "AssessedBy": s.auditor,
            "AssessedOn": s.assessed_on,
            "Status": s.status,
        }
        for s in snapshots
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def export_filename(snapshot: AssessmentSnapshot, suffix: str = ".csv") -> str:
    """Return e.g. ``assessment-head-office-2025-03-04.csv``."""
    slug = "-".join(snapshot.site_name.split()).lower() or f"site-{snapshot.site_id}"
    return f"assessment-{slug}-{snapshot.date:%Y-%m-%d}{suffix}"
