"""
archive/comparison.py
---------------------
Trend comparison between two archived snapshots of the same site.

Change Scale
------------
+----------+----------------------------------+
| Level    | Condition (overall score delta)  |
+==========+==================================+
| stable   | |delta| < 0.2                    |
+----------+----------------------------------+
| minor    | 0.2 ≤ |delta| < 0.5              |
+----------+----------------------------------+
| moderate | 0.5 ≤ |delta| < 1.0              |
+----------+----------------------------------+
| major    | |delta| ≥ 1.0                    |
+----------+----------------------------------+

Dimensions and services that were not scored in one of the two snapshots
(score ``0`` or absent) have no delta: "not rated" is not a score of zero.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from drmaturity.archive.snapshot import AssessmentSnapshot

logger = logging.getLogger(__name__)


def classify_change(score_delta: float) -> str:
    """
    Map an overall score delta to a change label.

    Returns:
        One of ``"stable"``, ``"minor"``, ``"moderate"``, ``"major"``.
    """
    abs_delta = abs(score_delta)
    if abs_delta < 0.2:
        return "stable"
    if abs_delta < 0.5:
        return "minor"
    if abs_delta < 1.0:
        return "moderate"
    return "major"


def _scored_deltas(current: Dict[int, float], previous: Dict[int, float]) -> Dict[int, float]:
    shared = {
        key for key in set(current) & set(previous)
        if current[key] > 0 and previous[key] > 0
    }
    return {key: round(current[key] - previous[key], 4) for key in sorted(shared)}


def compare_snapshots(
    current: AssessmentSnapshot,
    previous: AssessmentSnapshot,
) -> Dict[str, Any]:
    """
    Produce a delta report between two snapshots.

    Args:
        current:  The newer snapshot.
        previous: The baseline snapshot.

    Returns:
        A dict with keys ``"previous_score"``, ``"current_score"``,
        ``"score_delta"``, ``"change"``, ``"dimension_deltas"`` (dimension id
        -> delta), ``"service_deltas"`` (service id -> delta),
        ``"previous_snapshot_id"`` and ``"current_snapshot_id"``.

    Raises:
        ValueError: If the snapshots belong to different sites.
    """
    if current.site_id != previous.site_id:
        raise ValueError(
            f"Cannot compare snapshots of different sites "
            f"({previous.site_id} vs {current.site_id})"
        )

    score_delta = round(current.overall_value - previous.overall_value, 4)
    dimension_deltas = _scored_deltas(
        {d.dimension_id: d.score for d in current.dimensions},
        {d.dimension_id: d.score for d in previous.dimensions},
    )
    service_deltas = _scored_deltas(
        {s.service_id: s.score for s in current.services},
        {s.service_id: s.score for s in previous.services},
    )
    logger.debug(
        "Compared snapshot %s against %s: delta=%s",
        current.snapshot_id, previous.snapshot_id, score_delta,
    )

    return {
        "previous_score": previous.overall_value,
        "current_score": current.overall_value,
        "score_delta": score_delta,
        "change": classify_change(score_delta),
        "dimension_deltas": dimension_deltas,
        "service_deltas": service_deltas,
        "previous_snapshot_id": previous.snapshot_id,
        "current_snapshot_id": current.snapshot_id,
    }
