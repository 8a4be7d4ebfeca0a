"""scoring sub-package — dimension scores, aggregation, progress and maturity levels."""

from drmaturity.scoring.calculator import ParameterScore, ScoreCalculator, dimension_score, round_score
from drmaturity.scoring.aggregation import AggregationEngine, mean_of_scored
from drmaturity.scoring.progress import AssessmentProgress, DimensionProgress, ProgressTracker
from drmaturity.scoring.levels import MATURITY_LEVELS, band_for_score, label_for_score, level_for_score

__all__ = [
    "ParameterScore",
    "ScoreCalculator",
    "dimension_score",
    "round_score",
    "AggregationEngine",
    "mean_of_scored",
    "AssessmentProgress",
    "DimensionProgress",
    "ProgressTracker",
    "MATURITY_LEVELS",
    "band_for_score",
    "label_for_score",
    "level_for_score",
]
