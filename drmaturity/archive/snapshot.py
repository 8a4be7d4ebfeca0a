"""
archive/snapshot.py
-------------------
Immutable archival record of a completed assessment.

An :class:`AssessmentSnapshot` freezes the dimension → asset → parameter tree
together with the computed scores at the moment an assessment is completed.
All records are frozen dataclasses holding tuples, so a snapshot cannot be
changed after it is built.  Completing the same site again produces a new,
distinct snapshot.

The detail tree is sparse:

* a dimension lists only assets with at least one recorded observation in it;
* an asset lists only parameters that carry a score, a value or notes;
* ``services`` lists only services with a non-zero score at the site.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from drmaturity.core.catalog import Asset, Catalog, Dimension, Service, Site
from drmaturity.core.config import DEFAULT_FORMULA_SETTINGS, FormulaSettings
from drmaturity.core.config_hashing import compute_settings_hash
from drmaturity.core.observations import ObservationSet
from drmaturity.scoring.aggregation import AggregationEngine, mean_of_scored
from drmaturity.scoring.calculator import round_score

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParameterRecord:
    parameter_id: int
    name: str
    score: Optional[int]
    value: str = ""
    notes: str = ""
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter_id": self.parameter_id,
            "name": self.name,
            "score": self.score,
            "value": self.value,
            "notes": self.notes,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterRecord":
        return cls(
            parameter_id=data["parameter_id"],
            name=data["name"],
            score=data.get("score"),
            value=data.get("value", ""),
            notes=data.get("notes", ""),
            last_updated=data.get("last_updated"),
        )


@dataclass(frozen=True)
class AssetRecord:
    """One asset's Dimension Score and its recorded parameters."""

    asset_id: int
    name: str
    type: str
    score: float
    parameters: Tuple[ParameterRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "type": self.type,
            "score": self.score,
            "parameters": [p.to_dict() for p in self.parameters],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetRecord":
        return cls(
            asset_id=data["asset_id"],
            name=data["name"],
            type=data.get("type", ""),
            score=float(data["score"]),
            parameters=tuple(ParameterRecord.from_dict(p) for p in data.get("parameters", [])),
        )


@dataclass(frozen=True)
class DimensionRecord:
    dimension_id: int
    name: str
    score: float
    assets: Tuple[AssetRecord, ...] = ()

    def recompute_score(self) -> float:
        """Recompute the dimension average from the embedded asset scores."""
        return mean_of_scored(a.score for a in self.assets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension_id": self.dimension_id,
            "name": self.name,
            "score": self.score,
            "assets": [a.to_dict() for a in self.assets],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DimensionRecord":
        return cls(
            dimension_id=data["dimension_id"],
            name=data["name"],
            score=float(data["score"]),
            assets=tuple(AssetRecord.from_dict(a) for a in data.get("assets", [])),
        )


@dataclass(frozen=True)
class ServiceRecord:
    service_id: int
    name: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"service_id": self.service_id, "name": self.name, "score": self.score}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceRecord":
        return cls(
            service_id=data["service_id"], name=data["name"], score=float(data["score"])
        )


@dataclass(frozen=True)
class AssessmentSnapshot:
    """
    Archival record of a completed assessment.

    Attributes:
        snapshot_id:    Deterministic short hex id (site, timestamp, auditor, content).
        site_id:        Assessed site.
        site_name:      Site name at completion time.
        date:           UTC completion timestamp.
        auditor:        Person who performed the assessment.
        overall_score:  Overall score formatted to one decimal, e.g. ``"3.7"``.
        dimensions:     Per-dimension detail tree (catalog order).
        services:       Per-service scores (services with a score only).
        settings_hash:  SHA-256 of the formula settings used.
        status:         Always ``"completed"``.
        schema_version: Snapshot serialisation schema version.
    """

    snapshot_id: str
    site_id: int
    site_name: str
    date: datetime
    auditor: str
    overall_score: str
    dimensions: Tuple[DimensionRecord, ...]
    services: Tuple[ServiceRecord, ...]
    settings_hash: str
    status: str = "completed"
    schema_version: str = SCHEMA_VERSION

    @property
    def overall_value(self) -> float:
        return float(self.overall_score)

    @property
    def assessed_on(self) -> str:
        """Human-readable completion date, e.g. ``"Mar 4, 2025"``."""
        return f"{self.date:%b} {self.date.day}, {self.date.year}"

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshot_id": self.snapshot_id,
            "site_id": self.site_id,
            "site_name": self.site_name,
            "date": self.date.isoformat(),
            "assessed_on": self.assessed_on,
            "auditor": self.auditor,
            "overall_score": self.overall_score,
            "status": self.status,
            "settings_hash": self.settings_hash,
            "schema_version": self.schema_version,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "services": [s.to_dict() for s in self.services],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentSnapshot":
        """
        Reconstruct a snapshot from :meth:`to_dict` output.

        Raises:
            KeyError / ValueError: If required fields are missing or malformed.
        """
        return cls(
            snapshot_id=data["snapshot_id"],
            site_id=data["site_id"],
            site_name=data.get("site_name", ""),
            date=datetime.fromisoformat(data["date"]),
            auditor=data["auditor"],
            overall_score=str(data["overall_score"]),
            dimensions=tuple(DimensionRecord.from_dict(d) for d in data.get("dimensions", [])),
            services=tuple(ServiceRecord.from_dict(s) for s in data.get("services", [])),
            settings_hash=data.get("settings_hash", ""),
            status=data.get("status", "completed"),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
        )

    def __repr__(self) -> str:
        return (
            f"AssessmentSnapshot(id={self.snapshot_id!r}, site={self.site_name!r}, "
            f"score={self.overall_score}, date={self.date:%Y-%m-%d})"
        )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _make_snapshot_id(site_id: int, date: datetime, auditor: str, content: Dict[str, Any]) -> str:
    content_json = json.dumps(content, sort_keys=True, default=str)
    payload = f"{site_id}|{date.isoformat()}|{auditor}|{content_json}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()[:16]


class SnapshotBuilder:
    """
    Freezes the current assessment state into an :class:`AssessmentSnapshot`.

    Args:
        catalog:  Reference data; service scores use all of the site's
                  assets for each service, as the live service score does.
        settings: Formula settings used for every score in the snapshot.
        clock:    Callable returning the completion timestamp (for tests).
    """

    def __init__(
        self,
        catalog: Catalog,
        settings: Optional[FormulaSettings] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or DEFAULT_FORMULA_SETTINGS
        self._engine = AggregationEngine(catalog, self.settings)
        self._clock = clock

    def _asset_record(
        self, asset: Asset, dimension: Dimension, observations: ObservationSet
    ) -> Optional[AssetRecord]:
        parameters = []
        for param in dimension.parameters:
            observation = observations.get(asset.id, param.id)
            if observation is None or not observation.has_content:
                continue
            parameters.append(
                ParameterRecord(
                    parameter_id=param.id,
                    name=param.name,
                    score=observation.score,
                    value=observation.value,
                    notes=observation.notes,
                    last_updated=observation.last_updated,
                )
            )
        if not parameters:
            return None
        return AssetRecord(
            asset_id=asset.id,
            name=asset.name,
            type=asset.type,
            score=self._engine.dimension_score(asset, dimension, observations),
            parameters=tuple(parameters),
        )

    def _dimension_record(
        self, dimension: Dimension, assets: Sequence[Asset], observations: ObservationSet
    ) -> DimensionRecord:
        records = []
        for asset in assets:
            record = self._asset_record(asset, dimension, observations)
            if record is not None:
                records.append(record)
        return DimensionRecord(
            dimension_id=dimension.id,
            name=dimension.name,
            score=self._engine.dimension_average(dimension, assets, observations),
            assets=tuple(records),
        )

    def build(
        self,
        site: Site,
        auditor: str,
        assets: Sequence[Asset],
        observations: ObservationSet,
    ) -> AssessmentSnapshot:
        """
        Build the snapshot for *site* over the assets in scope.

        Site and auditor are taken as given; callers reject incomplete
        completion requests before calling this.
        """
        date = self._clock()
        overall = self._engine.overall_score(assets, observations)

        dimensions = tuple(
            self._dimension_record(d, assets, observations) for d in self.catalog.dimensions
        )

        services = []
        for service in self.catalog.services:
            score = self._engine.service_score(service.id, site.id, observations)
            if score > 0:
                services.append(ServiceRecord(service.id, service.name, score))

        overall_score = f"{round_score(overall):.1f}"
        content = {
            "overall_score": overall_score,
            "dimensions": [d.to_dict() for d in dimensions],
            "services": [s.to_dict() for s in services],
        }
        snapshot = AssessmentSnapshot(
            snapshot_id=_make_snapshot_id(site.id, date, auditor, content),
            site_id=site.id,
            site_name=site.name,
            date=date,
            auditor=auditor,
            overall_score=overall_score,
            dimensions=dimensions,
            services=tuple(services),
            settings_hash=compute_settings_hash(self.settings),
        )
        logger.debug(
            "Built snapshot %s for site %r: overall=%s, %d asset(s) in scope",
            snapshot.snapshot_id, site.name, overall_score, len(assets),
        )
        return snapshot


def build_snapshot(
    site: Site,
    auditor: str,
    assets: Sequence[Asset],
    dimensions: Sequence[Dimension],
    observations: ObservationSet,
    settings: FormulaSettings,
    services: Sequence[Service] = (),
    clock: Callable[[], datetime] = _utc_now,
) -> AssessmentSnapshot:
    """
    Build a snapshot from explicit reference data.

    Service scores are computed over the supplied *assets* only.  Use
    :class:`SnapshotBuilder` with a full :class:`Catalog` to score services
    over every asset of the site while narrowing the detail tree.
    """
    catalog = Catalog(
        dimensions=list(dimensions),
        assets=list(assets),
        services=list(services),
        sites=[site],
    )
    return SnapshotBuilder(catalog, settings, clock=clock).build(
        site, auditor, assets, observations
    )
