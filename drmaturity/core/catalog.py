"""
core/catalog.py
---------------
Reference data for an assessment: dimensions and their parameters, assets,
services and sites.

The catalog is supplied externally (typically a YAML file) and is read-only
for the scoring engine.  Parameter ids are unique across the whole catalog
because observations are keyed by ``(asset_id, parameter_id)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import yaml

from drmaturity.core.config import CRITICALITY_LEVELS, ConfigurationError

logger = logging.getLogger(__name__)

#: Weightage used for a scorable parameter that declares none.
DEFAULT_WEIGHTAGE: float = 1.0


@dataclass(frozen=True)
class Parameter:
    """A single measurable attribute within a dimension."""

    id: int
    name: str
    scorable: bool = True
    weightage: Optional[float] = None
    value_type: str = "text"
    unit: Optional[str] = None

    @property
    def effective_weightage(self) -> float:
        """Weightage used in scoring; parameters without one count as 1."""
        return DEFAULT_WEIGHTAGE if self.weightage is None else float(self.weightage)


@dataclass(frozen=True)
class Dimension:
    """A named grouping of parameters, e.g. ``Redundancy``."""

    id: int
    name: str
    parameters: Tuple[Parameter, ...] = ()
    description: str = ""

    @property
    def scorable_parameters(self) -> Tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.scorable)


@dataclass(frozen=True)
class Asset:
    """A piece of infrastructure being scored."""

    id: int
    name: str
    site_id: int
    criticality: str
    service_id: Optional[int] = None
    type: str = ""


@dataclass(frozen=True)
class Service:
    id: int
    name: str


@dataclass(frozen=True)
class Site:
    id: int
    name: str


@dataclass
class Catalog:
    """
    Container for all reference data used by an assessment.

    Attributes:
        dimensions: Ordered dimensions (order is preserved in snapshots).
        assets:     All known assets across every site.
        services:   Service groupings.
        sites:      Physical / organisational locations.
    """

    dimensions: List[Dimension] = field(default_factory=list)
    assets: List[Asset] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    sites: List[Site] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._check_unique("dimension", (d.id for d in self.dimensions))
        self._check_unique(
            "parameter", (p.id for d in self.dimensions for p in d.parameters)
        )
        self._check_unique("asset", (a.id for a in self.assets))
        self._check_unique("service", (s.id for s in self.services))
        self._check_unique("site", (s.id for s in self.sites))

        for asset in self.assets:
            if asset.criticality not in CRITICALITY_LEVELS:
                raise ConfigurationError(
                    f"Asset {asset.id} has unknown criticality {asset.criticality!r}"
                )
        for dimension in self.dimensions:
            for param in dimension.parameters:
                if param.weightage is not None and not 0 <= param.weightage <= 100:
                    raise ConfigurationError(
                        f"Parameter {param.id} weightage {param.weightage} is outside 0-100"
                    )

    @staticmethod
    def _check_unique(kind: str, ids: Iterable[int]) -> None:
        seen = set()
        for item_id in ids:
            if item_id in seen:
                raise ConfigurationError(f"Duplicate {kind} id {item_id!r} in catalog")
            seen.add(item_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def asset(self, asset_id: int) -> Asset:
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        raise KeyError(f"Unknown asset id {asset_id!r}")

    def site(self, site_id: int) -> Site:
        for site in self.sites:
            if site.id == site_id:
                return site
        raise KeyError(f"Unknown site id {site_id!r}")

    def dimension_of(self, parameter_id: int) -> Optional[Dimension]:
        """Return the dimension owning *parameter_id*, or ``None``."""
        for dimension in self.dimensions:
            if any(p.id == parameter_id for p in dimension.parameters):
                return dimension
        return None

    def assets_for_site(
        self, site_id: int, service_id: Optional[int] = None
    ) -> List[Asset]:
        """
        Return the assets in scope for a site, optionally narrowed to one service.
        """
        return [
            a for a in self.assets
            if a.site_id == site_id and (service_id is None or a.service_id == service_id)
        ]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        """
        Build a catalog from a plain mapping (the parsed YAML document).

        Raises:
            ConfigurationError: If a required key is missing.
        """
        try:
            dimensions = [
                Dimension(
                    id=int(d["id"]),
                    name=str(d["name"]),
                    description=str(d.get("description", "")),
                    parameters=tuple(
                        Parameter(
                            id=int(p["id"]),
                            name=str(p["name"]),
                            scorable=bool(p.get("scorable", True)),
                            weightage=(
                                float(p["weightage"]) if p.get("weightage") is not None else None
                            ),
                            value_type=str(p.get("type", "text")),
                            unit=p.get("unit"),
                        )
                        for p in d.get("parameters") or []
                    ),
                )
                for d in data.get("dimensions") or []
            ]
            assets = [
                Asset(
                    id=int(a["id"]),
                    name=str(a["name"]),
                    site_id=int(a["site_id"]),
                    criticality=str(a["criticality"]),
                    service_id=int(a["service_id"]) if a.get("service_id") is not None else None,
                    type=str(a.get("type", "")),
                )
                for a in data.get("assets") or []
            ]
            services = [
                Service(id=int(s["id"]), name=str(s["name"]))
                for s in data.get("services") or []
            ]
            sites = [
                Site(id=int(s["id"]), name=str(s["name"]))
                for s in data.get("sites") or []
            ]
        except KeyError as exc:
            raise ConfigurationError(f"Catalog entry missing required key {exc}") from exc

        return cls(dimensions=dimensions, assets=assets, services=services, sites=sites)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a :class:`Catalog` from a YAML file.

    Expected YAML structure::

        sites:    [{id: 1, name: Head Office}]
        services: [{id: 1, name: Core Network}]
        dimensions:
          - id: 1
            name: Redundancy
            parameters:
              - {id: 10, name: Secondary backup, scorable: true, weightage: 100}
        assets:
          - {id: 1, name: Core Switch, site_id: 1, service_id: 1, criticality: High}
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse catalog YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Catalog file must be a YAML dictionary.")

    catalog = Catalog.from_dict(data)
    logger.debug(
        "Loaded catalog from %s: %d dimension(s), %d asset(s), %d site(s)",
        catalog_path, len(catalog.dimensions), len(catalog.assets), len(catalog.sites),
    )
    return catalog
