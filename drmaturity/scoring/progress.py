"""
scoring/progress.py
-------------------
Completion tracking for an in-progress assessment.

A *parameter instance* is one scorable parameter on one in-scope asset.  A
dimension's completed fraction is the share of its instances that have a
recorded score, so dimensions with different parameter counts are directly
comparable.  Progress is a read-only view: it never changes observations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from drmaturity.core.catalog import Asset, Catalog, Dimension
from drmaturity.core.config import FormulaSettings
from drmaturity.core.observations import ObservationSet
from drmaturity.scoring.aggregation import AggregationEngine


@dataclass(frozen=True)
class DimensionProgress:
    """
    Attributes:
        dimension_id:              Dimension identifier.
        name:                      Dimension name.
        completed_parameters:      Scored parameter instances across assets.
        total_parameters:          ``assets × scorable parameters``.
        total_scorable_parameters: Scorable parameters in the dimension.
        score:                     Dimension average over scored assets.
    """

    dimension_id: int
    name: str
    completed_parameters: int
    total_parameters: int
    total_scorable_parameters: int
    score: float

    @property
    def completed_fraction(self) -> float:
        """Completed share in ``[0, 1]``."""
        if self.total_parameters == 0:
            return 0.0
        return self.completed_parameters / self.total_parameters

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension_id": self.dimension_id,
            "name": self.name,
            "completed_fraction": round(self.completed_fraction, 4),
            "completed_parameters": self.completed_parameters,
            "total_parameters": self.total_parameters,
            "total_scorable_parameters": self.total_scorable_parameters,
            "score": self.score,
        }


@dataclass(frozen=True)
class AssessmentProgress:
    per_dimension: List[DimensionProgress] = field(default_factory=list)

    @property
    def completed_parameters(self) -> int:
        return sum(d.completed_parameters for d in self.per_dimension)

    @property
    def total_parameters(self) -> int:
        return sum(d.total_parameters for d in self.per_dimension)

    @property
    def overall_percent(self) -> float:
        """Completed parameter instances as a percentage; ``0.0`` if there are none."""
        total = self.total_parameters
        if total == 0:
            return 0.0
        return self.completed_parameters / total * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_dimension": [d.to_dict() for d in self.per_dimension],
            "overall_percent": round(self.overall_percent, 2),
            "completed_parameters": self.completed_parameters,
            "total_parameters": self.total_parameters,
        }


class ProgressTracker:
    """
    Measures how much of an assessment has been scored.

    Args:
        catalog:  Reference data.
        settings: Formula settings used for the per-dimension score column.

    Example::

        tracker = ProgressTracker(catalog, settings)
        progress = tracker.progress(catalog.assets_for_site(1), obs)
        progress.overall_percent  # 37.5
    """

    def __init__(self, catalog: Catalog, settings: Optional[FormulaSettings] = None) -> None:
        self.catalog = catalog
        self._engine = AggregationEngine(catalog, settings)

    def dimension_progress(
        self, dimension: Dimension, assets: Sequence[Asset], observations: ObservationSet
    ) -> DimensionProgress:
        scorable = dimension.scorable_parameters
        completed = sum(
            1
            for asset in assets
            for param in scorable
            if observations.score(asset.id, param.id) is not None
        )
        return DimensionProgress(
            dimension_id=dimension.id,
            name=dimension.name,
            completed_parameters=completed,
            total_parameters=len(assets) * len(scorable),
            total_scorable_parameters=len(scorable),
            score=self._engine.dimension_average(dimension, assets, observations),
        )

    def progress(
        self,
        assets: Sequence[Asset],
        observations: ObservationSet,
        dimensions: Optional[Sequence[Dimension]] = None,
    ) -> AssessmentProgress:
        """
        Compute per-dimension and overall completion over the assets in scope.

        Args:
            assets:       Assets currently in scope (site, or site + service).
            observations: Current observation set.
            dimensions:   Dimensions to report on (defaults to the catalog's).
        """
        dims = self.catalog.dimensions if dimensions is None else dimensions
        return AssessmentProgress(
            per_dimension=[self.dimension_progress(d, assets, observations) for d in dims]
        )
