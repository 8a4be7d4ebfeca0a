"""
scoring/calculator.py
---------------------
Dimension Score computation for a single asset.

Formula
-------
With weightage enabled, scores are normalised by the sum of the weightages of
the parameters that were actually scored (not by a fixed 100)::

    score = Σ (score_p × weightage_p) / Σ weightage_p × dimension_weightage_multiplier

With weightage disabled the plain mean of the recorded scores is used.  When
criticality is enabled the result is multiplied by the asset's criticality
multiplier.  The result is rounded half-up to one decimal place.

"Not yet assessed" is the normal state early in an assessment, so degenerate
inputs (no scored parameters, zero total weightage) resolve to ``0.0``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, NamedTuple, Optional, Sequence

from drmaturity.core.catalog import Asset, Dimension
from drmaturity.core.config import DEFAULT_FORMULA_SETTINGS, FormulaSettings
from drmaturity.core.observations import ObservationSet


class ParameterScore(NamedTuple):
    """One recorded score together with its parameter's weightage."""

    score: float
    weightage: float


def round_score(value: float) -> float:
    """
    Round *value* half-up to one decimal place.

    The exact binary value of the float is rounded, so ``1.25`` becomes ``1.3``
    while ``1.05`` (stored as 1.0499…) becomes ``1.0``.
    """
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def dimension_score(
    parameter_scores: Sequence[ParameterScore],
    settings: FormulaSettings,
    asset_criticality: Optional[str] = None,
) -> float:
    """
    Compute one dimension's score for one asset.

    Args:
        parameter_scores:  Scores recorded for the scorable parameters of the
                           dimension.  Unscored parameters must not be passed.
        settings:          Formula settings for this calculation.
        asset_criticality: The asset's criticality tier (``"High"``,
                           ``"Medium"``, ``"Low"``) or ``None``.

    Returns:
        The score rounded to one decimal, or ``0.0`` when there is nothing
        to score.

    Raises:
        ConfigurationError: If criticality weighting is enabled and the tier
            is missing from the multiplier table.

    Examples::

        s = FormulaSettings()
        dimension_score([ParameterScore(5, 80), ParameterScore(1, 20)], s)  # 4.2
        s.use_dimension_weightage = False
        dimension_score([ParameterScore(5, 80), ParameterScore(1, 20)], s)  # 3.0
    """
    if not parameter_scores:
        return 0.0

    if settings.use_dimension_weightage:
        total_weight = sum(p.weightage for p in parameter_scores)
        if total_weight == 0:
            return 0.0
        score = sum(p.score * p.weightage for p in parameter_scores) / total_weight
        score *= settings.dimension_weightage_multiplier
    else:
        score = sum(p.score for p in parameter_scores) / len(parameter_scores)

    if settings.use_asset_criticality and asset_criticality:
        score *= settings.multiplier_for(asset_criticality)

    return round_score(score)


class ScoreCalculator:
    """
    Gathers an asset's recorded scores for a dimension and scores them.

    Args:
        settings: Formula settings (uses DEFAULT_FORMULA_SETTINGS if omitted).

    Example::

        calculator = ScoreCalculator(settings)
        calculator.score(asset, dimension, observations)  # e.g. 3.7
    """

    def __init__(self, settings: Optional[FormulaSettings] = None) -> None:
        self.settings = settings or DEFAULT_FORMULA_SETTINGS

    @staticmethod
    def parameter_scores(
        asset_id: int, dimension: Dimension, observations: ObservationSet
    ) -> List[ParameterScore]:
        """Return the scored, scorable parameters of *dimension* for an asset."""
        scores: List[ParameterScore] = []
        for param in dimension.scorable_parameters:
            score = observations.score(asset_id, param.id)
            if score is not None:
                scores.append(ParameterScore(score, param.effective_weightage))
        return scores

    def score(self, asset: Asset, dimension: Dimension, observations: ObservationSet) -> float:
        return dimension_score(
            self.parameter_scores(asset.id, dimension, observations),
            self.settings,
            asset.criticality,
        )
