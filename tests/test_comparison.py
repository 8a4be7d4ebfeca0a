from datetime import datetime, timezone

import pytest

from drmaturity.archive.comparison import classify_change, compare_snapshots
from drmaturity.archive.snapshot import SnapshotBuilder
from drmaturity.core.observations import ObservationSet


def _build(catalog, observations, day, site_id=1):
    when = datetime(2025, 3, day, tzinfo=timezone.utc)
    builder = SnapshotBuilder(catalog, clock=lambda: when)
    return builder.build(
        catalog.site(site_id), "J. Doe", catalog.assets_for_site(site_id), observations
    )


@pytest.mark.parametrize(
    "delta, change",
    [(0.0, "stable"), (-0.1, "stable"), (0.3, "minor"), (-0.6, "moderate"), (1.0, "major"), (-2.5, "major")],
)
def test_classify_change(delta, change):
    assert classify_change(delta) == change


def test_compare_snapshots(catalog, observations):
    previous = _build(catalog, observations, day=1)
    observations.record_score(1, 20, 5)
    observations.record_score(1, 21, 5)
    current = _build(catalog, observations, day=8)

    report = compare_snapshots(current, previous)
    assert report["previous_score"] == 3.6
    # Redundancy 4.25, Backup 5.0
    assert report["current_score"] == 4.6
    assert report["score_delta"] == pytest.approx(1.0)
    assert report["change"] == "major"
    assert report["dimension_deltas"] == {1: 0.0, 2: pytest.approx(2.0)}
    assert report["service_deltas"] == {1: pytest.approx(0.5)}
    assert report["current_snapshot_id"] == current.snapshot_id
    assert report["previous_snapshot_id"] == previous.snapshot_id


def test_unrated_dimensions_have_no_delta(catalog, observations):
    sparse = ObservationSet()
    sparse.record_score(1, 10, 3)
    previous = _build(catalog, sparse, day=1)
    current = _build(catalog, observations, day=8)

    report = compare_snapshots(current, previous)
    assert 2 not in report["dimension_deltas"]
    assert 1 in report["dimension_deltas"]


def test_different_sites_rejected(catalog, observations):
    with pytest.raises(ValueError, match="different sites"):
        compare_snapshots(_build(catalog, observations, 1), _build(catalog, observations, 2, site_id=2))
