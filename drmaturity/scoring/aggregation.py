"""
scoring/aggregation.py
----------------------
Roll-up of Dimension Scores to asset, service and site level.

Exclusion rule
--------------
A Dimension Score of ``0.0`` means "nothing scored yet".  Such a
``(dimension, asset)`` pair is left out of every average (numerator *and*
denominator) instead of being counted as a zero.

The overall score is dimension-centric: each dimension is first averaged over
the assets that have a score for it, then those per-dimension averages are
averaged over the dimensions that have at least one scored asset.

Sums use :func:`math.fsum`, which is exact and therefore independent of the
order in which assets or dimensions are supplied.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Optional, Sequence

from drmaturity.core.catalog import Asset, Catalog, Dimension
from drmaturity.core.config import DEFAULT_FORMULA_SETTINGS, FormulaSettings
from drmaturity.core.observations import ObservationSet
from drmaturity.scoring.calculator import ScoreCalculator


def mean_of_scored(scores: Iterable[float]) -> float:
    """Average the non-zero scores; ``0.0`` if none are non-zero."""
    scored = [s for s in scores if s > 0]
    if not scored:
        return 0.0
    return math.fsum(scored) / len(scored)


class AggregationEngine:
    """
    Computes asset, service and overall maturity scores from observations.

    The engine holds only the read-only catalog and the formula settings;
    observations are passed on every call, so repeated calls with unchanged
    inputs always return identical results.  Each asset's own criticality is
    looked up and forwarded to the :class:`ScoreCalculator`.

    Args:
        catalog:  Reference data (dimensions, assets, services).
        settings: Formula settings (uses DEFAULT_FORMULA_SETTINGS if omitted).

    Example::

        engine = AggregationEngine(catalog, settings)
        engine.asset_score(asset_id=1, observations=obs)
        engine.overall_score(catalog.assets_for_site(1), obs)
    """

    def __init__(self, catalog: Catalog, settings: Optional[FormulaSettings] = None) -> None:
        self.catalog = catalog
        self.settings = settings or DEFAULT_FORMULA_SETTINGS
        self._calculator = ScoreCalculator(self.settings)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dimension_score(
        self, asset: Asset, dimension: Dimension, observations: ObservationSet
    ) -> float:
        return self._calculator.score(asset, dimension, observations)

    def asset_dimension_scores(
        self, asset: Asset, observations: ObservationSet
    ) -> Dict[int, float]:
        """Dimension id -> Dimension Score for one asset (including zeros)."""
        return {
            dimension.id: self.dimension_score(asset, dimension, observations)
            for dimension in self.catalog.dimensions
        }

    def asset_score(self, asset_id: int, observations: ObservationSet) -> float:
        """
        Average of the asset's non-zero Dimension Scores.

        Raises:
            KeyError: If *asset_id* is not in the catalog.
        """
        asset = self.catalog.asset(asset_id)
        return mean_of_scored(self.asset_dimension_scores(asset, observations).values())

    def service_score(
        self, service_id: int, site_id: int, observations: ObservationSet
    ) -> float:
        """
        Average asset score over the service's assets at a site.

        Every asset of the service counts in the denominator, whether or not
        it has been scored.  Returns ``0.0`` when the service has no assets
        at the site.
        """
        assets = self.catalog.assets_for_site(site_id, service_id=service_id)
        if not assets:
            return 0.0
        return math.fsum(self.asset_score(a.id, observations) for a in assets) / len(assets)

    def dimension_average(
        self, dimension: Dimension, assets: Sequence[Asset], observations: ObservationSet
    ) -> float:
        """Average of a dimension's score over the assets that have one."""
        return mean_of_scored(
            self.dimension_score(asset, dimension, observations) for asset in assets
        )

    def dimension_averages(
        self, assets: Sequence[Asset], observations: ObservationSet
    ) -> Dict[int, float]:
        """Dimension id -> :meth:`dimension_average` over *assets*."""
        return {
            dimension.id: self.dimension_average(dimension, assets, observations)
            for dimension in self.catalog.dimensions
        }

    def overall_score(self, assets: Sequence[Asset], observations: ObservationSet) -> float:
        """
        Site-level score: the mean of per-dimension averages, skipping
        dimensions that no asset has a score for.
        """
        if not assets:
            return 0.0
        return mean_of_scored(self.dimension_averages(assets, observations).values())
