import pytest

from drmaturity.core.config import ConfigurationError, FormulaSettings
from drmaturity.scoring.calculator import (
    ParameterScore,
    ScoreCalculator,
    dimension_score,
    round_score,
)


def test_no_scores_is_zero():
    assert dimension_score([], FormulaSettings()) == 0.0


def test_weighted_score():
    settings = FormulaSettings()
    # (4*50 + 2*50) / 100 = 3.0
    assert dimension_score([ParameterScore(4, 50), ParameterScore(2, 50)], settings) == 3.0
    # (5*80 + 1*20) / 100 = 4.2
    assert dimension_score([ParameterScore(5, 80), ParameterScore(1, 20)], settings) == 4.2


def test_weighted_score_normalises_by_scored_weight():
    # only one of the two parameters scored: its weight is the whole denominator
    assert dimension_score([ParameterScore(4, 30)], FormulaSettings()) == 4.0


def test_unweighted_score_is_plain_mean():
    settings = FormulaSettings(use_dimension_weightage=False)
    assert dimension_score([ParameterScore(5, 80), ParameterScore(1, 20)], settings) == 3.0


def test_zero_total_weight_is_zero():
    assert dimension_score([ParameterScore(5, 0), ParameterScore(3, 0)], FormulaSettings()) == 0.0


def test_global_multiplier():
    settings = FormulaSettings(dimension_weightage_multiplier=0.5)
    assert dimension_score([ParameterScore(4, 1)], settings) == 2.0


def test_criticality_multiplier():
    settings = FormulaSettings(use_asset_criticality=True)
    assert dimension_score([ParameterScore(4, 1)], settings, "High") == 4.8
    assert dimension_score([ParameterScore(4, 1)], settings, "Low") == 3.2
    # no criticality on the asset: unscaled
    assert dimension_score([ParameterScore(4, 1)], settings, None) == 4.0


def test_criticality_ignored_when_disabled():
    assert dimension_score([ParameterScore(4, 1)], FormulaSettings(), "High") == 4.0


def test_unknown_criticality_raises():
    settings = FormulaSettings(use_asset_criticality=True)
    with pytest.raises(ConfigurationError):
        dimension_score([ParameterScore(4, 1)], settings, "Critical")


def test_round_half_up():
    assert round_score(1.25) == 1.3
    assert round_score(2.75) == 2.8
    assert round_score(3.0) == 3.0
    assert round_score(10 / 3) == 3.3


def test_score_calculator_skips_unscored_and_non_scorable(catalog, observations):
    calculator = ScoreCalculator()
    redundancy = catalog.dimensions[0]

    scores = calculator.parameter_scores(1, redundancy, observations)
    assert scores == [ParameterScore(4, 75.0), ParameterScore(2, 25.0)]
    # (4*75 + 2*25) / 100
    assert calculator.score(catalog.asset(1), redundancy, observations) == 3.5
    assert calculator.score(catalog.asset(3), redundancy, observations) == 0.0


def test_default_weightage_applies(catalog, observations):
    calculator = ScoreCalculator()
    backup = catalog.dimensions[1]
    observations.record_score(1, 21, 5)
    # both Backup parameters default to weight 1
    assert calculator.score(catalog.asset(1), backup, observations) == 4.0


def test_score_calculator_uses_asset_criticality(catalog, observations):
    calculator = ScoreCalculator(FormulaSettings(use_asset_criticality=True))
    redundancy = catalog.dimensions[0]
    # High: 3.5 * 1.2
    assert calculator.score(catalog.asset(1), redundancy, observations) == 4.2
