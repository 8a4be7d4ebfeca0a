import pytest

from drmaturity.core.observations import ObservationSet
from drmaturity.scoring.progress import AssessmentProgress, ProgressTracker


def test_partial_progress(catalog, observations):
    progress = ProgressTracker(catalog).progress(catalog.assets_for_site(1), observations)

    redundancy, backup = progress.per_dimension
    # 3 assets x 2 scorable parameters each
    assert redundancy.total_parameters == 6
    assert redundancy.completed_parameters == 3
    assert redundancy.completed_fraction == 0.5
    assert redundancy.total_scorable_parameters == 2
    assert redundancy.score == pytest.approx(4.25)

    assert backup.completed_parameters == 1
    assert progress.completed_parameters == 4
    assert progress.total_parameters == 12
    assert progress.overall_percent == pytest.approx(100 / 3)


def test_non_scorable_and_unscored_do_not_count(catalog):
    obs = ObservationSet()
    obs.record_value(1, 12, "Carrier A")
    obs.record_notes(1, 10, "pending")

    progress = ProgressTracker(catalog).progress(catalog.assets_for_site(1), obs)
    assert progress.completed_parameters == 0
    assert progress.overall_percent == 0.0


def test_complete_assessment(catalog):
    obs = ObservationSet()
    assets = catalog.assets_for_site(1, service_id=1)
    for dimension in catalog.dimensions:
        for param in dimension.scorable_parameters:
            obs.batch_score(param.id, [a.id for a in assets], 4)

    progress = ProgressTracker(catalog).progress(assets, obs)
    assert progress.overall_percent == 100.0
    assert all(d.completed_fraction == 1.0 for d in progress.per_dimension)


def test_empty_scope(catalog, observations):
    progress = ProgressTracker(catalog).progress([], observations)
    assert progress.total_parameters == 0
    assert progress.overall_percent == 0.0
    assert AssessmentProgress().overall_percent == 0.0


def test_dimension_subset(catalog, observations):
    progress = ProgressTracker(catalog).progress(
        catalog.assets_for_site(1), observations, dimensions=catalog.dimensions[1:]
    )
    assert [d.name for d in progress.per_dimension] == ["Backup"]


def test_progress_to_dict(catalog, observations):
    data = ProgressTracker(catalog).progress(catalog.assets_for_site(1), observations).to_dict()
    assert data["overall_percent"] == 33.33
    assert data["per_dimension"][0]["completed_fraction"] == 0.5
    assert data["per_dimension"][0]["name"] == "Redundancy"
