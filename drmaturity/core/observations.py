"""
core/observations.py
--------------------
Recorded values for ``(asset, parameter)`` pairs.

An :class:`Observation` with ``score=None`` is *unscored*: it may still carry a
free-form value or notes, but it never contributes to any score or to progress.
:class:`ObservationSet` is the mutable container owned by an assessment
session; the scoring engine only reads from it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional

MIN_SCORE = 1
MAX_SCORE = 5


class ObservationError(ValueError):
    """Raised when an observation carries an invalid score."""


class ObservationKey(NamedTuple):
    asset_id: int
    parameter_id: int


@dataclass(frozen=True)
class Observation:
    """
    The recorded score / value / notes for one asset-parameter pair.

    Attributes:
        score:        Maturity score 1-5, or ``None`` when not yet rated.
        value:        Free-form observed value (e.g. ``"99.9"`` or a URL).
        notes:        Auditor notes.
        last_updated: ISO-8601 timestamp of the last change.
    """

    score: Optional[int] = None
    value: str = ""
    notes: str = ""
    last_updated: Optional[str] = None

    @property
    def is_scored(self) -> bool:
        return self.score is not None

    @property
    def has_content(self) -> bool:
        """``True`` if the observation carries a score, a value or notes."""
        return self.is_scored or bool(self.value) or bool(self.notes)


def validate_score(score: Any) -> int:
    """
    Coerce *score* to an ``int`` in 1-5.

    Raises:
        ObservationError: If *score* is not a whole number between 1 and 5.
    """
    if isinstance(score, bool):
        raise ObservationError(f"Score must be a number, got {score!r}")
    try:
        numeric = float(score)
    except (TypeError, ValueError):
        raise ObservationError(f"Score must be a number, got {score!r}") from None
    if not numeric.is_integer() or not MIN_SCORE <= numeric <= MAX_SCORE:
        raise ObservationError(
            f"Score must be a whole number between {MIN_SCORE} and {MAX_SCORE}, got {score!r}"
        )
    return int(numeric)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


class ObservationSet:
    """
    Mutable mapping of :class:`ObservationKey` -> :class:`Observation`.

    Every mutation replaces the stored (immutable) observation and stamps
    ``last_updated``.  The scoring engine only ever calls :meth:`get` and
    iterates, so it never alters the set.

    Args:
        observations: Optional initial mapping.
        clock:        Callable returning the current UTC time (for tests).

    Example::

        obs = ObservationSet()
        obs.record_score(asset_id=1, parameter_id=10, score=4)
        obs.batch_score(parameter_id=11, asset_ids=[1, 2, 3], score=3)
    """

    def __init__(
        self,
        observations: Optional[Dict[ObservationKey, Observation]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._data: Dict[ObservationKey, Observation] = dict(observations or {})
        self._clock = clock

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get(self, asset_id: int, parameter_id: int) -> Optional[Observation]:
        return self._data.get(ObservationKey(asset_id, parameter_id))

    def score(self, asset_id: int, parameter_id: int) -> Optional[int]:
        observation = self.get(asset_id, parameter_id)
        return observation.score if observation is not None else None

    def items(self) -> Iterator:
        return iter(self._data.items())

    def __iter__(self) -> Iterator[ObservationKey]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _update(self, asset_id: int, parameter_id: int, **changes: Any) -> Observation:
        key = ObservationKey(asset_id, parameter_id)
        current = self._data.get(key, Observation())
        updated = replace(current, last_updated=self._clock().isoformat(), **changes)
        self._data[key] = updated
        return updated

    def record_score(self, asset_id: int, parameter_id: int, score: Any) -> Observation:
        return self._update(asset_id, parameter_id, score=validate_score(score))

    def clear_score(self, asset_id: int, parameter_id: int) -> Observation:
        """Mark a pair as unscored again, keeping its value and notes."""
        return self._update(asset_id, parameter_id, score=None)

    def record_value(self, asset_id: int, parameter_id: int, value: str) -> Observation:
        return self._update(asset_id, parameter_id, value=value)

    def record_notes(self, asset_id: int, parameter_id: int, notes: str) -> Observation:
        return self._update(asset_id, parameter_id, notes=notes)

    def batch_score(self, parameter_id: int, asset_ids: Iterable[int], score: Any) -> int:
        """
        Apply the same score to one parameter across many assets.

        The score is validated once, before any observation changes.

        Returns:
            Number of observations updated.
        """
        valid = validate_score(score)
        count = 0
        for asset_id in asset_ids:
            self._update(asset_id, parameter_id, score=valid)
            count += 1
        return count

    def batch_value(self, parameter_id: int, asset_ids: Iterable[int], value: str) -> int:
        count = 0
        for asset_id in asset_ids:
            self._update(asset_id, parameter_id, value=value)
            count += 1
        return count

    # ------------------------------------------------------------------
    # Record conversion (sheet columns)
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        rows: Iterable[Dict[str, Any]],
        clock: Callable[[], datetime] = _utc_now,
    ) -> "ObservationSet":
        """
        Build a set from sheet rows with columns ``AssetId``, ``ParameterId``,
        ``Score``, ``Value``, ``Notes`` and ``LastUpdated``.

        Rows without both ids are skipped.  A blank or ``0`` score means the
        pair is unscored; any other score must be valid.

        Raises:
            ObservationError: If a row carries an invalid score.
        """
        data: Dict[ObservationKey, Observation] = {}
        for row in rows:
            asset_id = row.get("AssetId")
            parameter_id = row.get("ParameterId")
            if _is_blank(asset_id) or _is_blank(parameter_id):
                continue

            raw_score = row.get("Score")
            score: Optional[int] = None
            if not _is_blank(raw_score) and raw_score != 0:
                score = validate_score(raw_score)

            last_updated = row.get("LastUpdated")
            key = ObservationKey(int(asset_id), int(parameter_id))
            data[key] = Observation(
                score=score,
                value="" if _is_blank(row.get("Value")) else str(row["Value"]),
                notes="" if _is_blank(row.get("Notes")) else str(row["Notes"]),
                last_updated=(
                    clock().isoformat() if _is_blank(last_updated) else str(last_updated)
                ),
            )
        return cls(data, clock=clock)

    def to_records(self) -> List[Dict[str, Any]]:
        """Return one sheet row per observation, ordered by key."""
        return [
            {
                "AssetId": key.asset_id,
                "ParameterId": key.parameter_id,
                "Score": obs.score,
                "Value": obs.value,
                "Notes": obs.notes,
                "LastUpdated": obs.last_updated,
            }
            for key, obs in sorted(self._data.items())
        ]

    def __repr__(self) -> str:
        scored = sum(1 for o in self._data.values() if o.is_scored)
        return f"ObservationSet(entries={len(self._data)}, scored={scored})"
