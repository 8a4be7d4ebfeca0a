import math
from dataclasses import FrozenInstanceError

import pytest

from drmaturity.core.observations import (
    Observation,
    ObservationError,
    ObservationKey,
    ObservationSet,
    validate_score,
)


@pytest.mark.parametrize("score", [1, 3, 5, 4.0, "2"])
def test_validate_score_accepts(score):
    assert validate_score(score) in {1, 2, 3, 4, 5}


@pytest.mark.parametrize("score", [0, 6, 2.5, -1, "high", None, True])
def test_validate_score_rejects(score):
    with pytest.raises(ObservationError):
        validate_score(score)


def test_record_and_read(clock):
    obs = ObservationSet(clock=clock)
    obs.record_score(1, 10, 4)
    obs.record_value(1, 10, "99.9")
    obs.record_notes(1, 10, "checked")

    observation = obs.get(1, 10)
    assert observation == Observation(
        score=4, value="99.9", notes="checked", last_updated=clock().isoformat()
    )
    assert obs.score(1, 10) == 4
    assert obs.score(1, 11) is None
    assert ObservationKey(1, 10) in obs
    assert len(obs) == 1


def test_invalid_score_leaves_set_unchanged():
    obs = ObservationSet()
    obs.record_score(1, 10, 4)
    with pytest.raises(ObservationError):
        obs.record_score(1, 10, 7)
    assert obs.score(1, 10) == 4


def test_clear_score_keeps_value():
    obs = ObservationSet()
    obs.record_score(1, 10, 4)
    obs.record_value(1, 10, "dual")
    obs.clear_score(1, 10)

    observation = obs.get(1, 10)
    assert observation.score is None
    assert observation.is_scored is False
    assert observation.has_content is True


def test_batch_score():
    obs = ObservationSet()
    assert obs.batch_score(10, [1, 2, 3], 3) == 3
    assert [obs.score(a, 10) for a in (1, 2, 3)] == [3, 3, 3]

    with pytest.raises(ObservationError):
        obs.batch_score(11, [1, 2], 9)
    assert obs.get(1, 11) is None


def test_batch_value():
    obs = ObservationSet()
    assert obs.batch_value(12, [1, 2], "Carrier A") == 2
    assert obs.get(2, 12).value == "Carrier A"
    assert obs.get(2, 12).is_scored is False


def test_observation_is_immutable():
    observation = Observation(score=3)
    with pytest.raises(FrozenInstanceError):
        observation.score = 4


def test_from_records_treats_blank_and_zero_as_unscored(clock):
    rows = [
        {"AssetId": 1, "ParameterId": 10, "Score": 4, "Value": "", "Notes": ""},
        {"AssetId": 1, "ParameterId": 11, "Score": 0, "Value": "x", "Notes": ""},
        {"AssetId": 1, "ParameterId": 12, "Score": math.nan, "Value": "", "Notes": "n"},
        {"AssetId": None, "ParameterId": 13, "Score": 5},
    ]
    obs = ObservationSet.from_records(rows, clock=clock)

    assert len(obs) == 3
    assert obs.score(1, 10) == 4
    assert obs.score(1, 11) is None
    assert obs.get(1, 11).value == "x"
    assert obs.get(1, 12).notes == "n"
    assert obs.get(1, 12).last_updated == clock().isoformat()


def test_from_records_invalid_score():
    with pytest.raises(ObservationError):
        ObservationSet.from_records([{"AssetId": 1, "ParameterId": 10, "Score": 8}])


def test_to_records_sorted(clock):
    obs = ObservationSet(clock=clock)
    obs.record_score(2, 10, 1)
    obs.record_score(1, 11, 5)

    records = obs.to_records()
    assert [(r["AssetId"], r["ParameterId"]) for r in records] == [(1, 11), (2, 10)]
    assert records[0]["Score"] == 5
