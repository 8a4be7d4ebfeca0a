from datetime import datetime, timezone

import pytest

from drmaturity.core.catalog import Asset, Catalog, Dimension, Parameter, Service, Site
from drmaturity.core.observations import ObservationSet


def fixed_clock():
    return datetime(2025, 3, 4, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def catalog():
    redundancy = Dimension(
        id=1,
        name="Redundancy",
        parameters=(
            Parameter(id=10, name="Secondary link", weightage=75),
            Parameter(id=11, name="Failover tested", weightage=25),
            Parameter(id=12, name="Link provider", scorable=False),
        ),
    )
    backup = Dimension(
        id=2,
        name="Backup",
        parameters=(
            Parameter(id=20, name="Backup frequency"),
            Parameter(id=21, name="Restore drill"),
        ),
    )
    return Catalog(
        dimensions=[redundancy, backup],
        assets=[
            Asset(id=1, name="Core Switch", site_id=1, criticality="High", service_id=1, type="Switch"),
            Asset(id=2, name="Edge Router", site_id=1, criticality="Medium", service_id=1, type="Router"),
            Asset(id=3, name="File Server", site_id=1, criticality="Low", service_id=2, type="Server"),
            Asset(id=4, name="Branch Switch", site_id=2, criticality="Low", service_id=1, type="Switch"),
        ],
        services=[Service(id=1, name="Core Network"), Service(id=2, name="File Services")],
        sites=[Site(id=1, name="Head Office"), Site(id=2, name="Branch")],
    )


@pytest.fixture
def observations():
    obs = ObservationSet(clock=fixed_clock)
    obs.record_score(1, 10, 4)
    obs.record_score(1, 11, 2)
    obs.record_value(1, 12, "Carrier A")
    obs.record_score(1, 20, 3)
    obs.record_score(2, 10, 5)
    obs.record_notes(3, 21, "Drill pending")
    return obs


CATALOG_YAML = """\
sites:
  - {id: 1, name: Head Office}
services:
  - {id: 1, name: Core Network}
dimensions:
  - id: 1
    name: Redundancy
    parameters:
      - {id: 10, name: Secondary link, weightage: 75}
      - {id: 11, name: Failover tested, weightage: 25}
  - id: 2
    name: Backup
    parameters:
      - {id: 20, name: Backup frequency}
assets:
  - {id: 1, name: Core Switch, site_id: 1, service_id: 1, criticality: High, type: Switch}
  - {id: 2, name: Edge Router, site_id: 1, service_id: 1, criticality: Medium, type: Router}
"""

SHEET_CSV = """\
SiteId,Auditor,AssetId,ParameterId,Score,Value,Notes,LastUpdated
1,J. Doe,,,,,,
,,1,10,4,,Dual uplinks,2025-03-04T10:00:00+00:00
,,1,11,2,,,2025-03-04T10:00:00+00:00
,,1,20,3,,,2025-03-04T10:00:00+00:00
,,2,10,5,99.9,,2025-03-04T10:00:00+00:00
"""


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(CATALOG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def sheet_file(tmp_path):
    path = tmp_path / "site-1.csv"
    path.write_text(SHEET_CSV, encoding="utf-8")
    return path
