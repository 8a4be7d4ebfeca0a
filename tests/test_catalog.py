import pytest

from drmaturity.core.catalog import Asset, Catalog, Dimension, Parameter, load_catalog
from drmaturity.core.config import ConfigurationError


def test_parameter_default_weightage():
    assert Parameter(id=1, name="p").effective_weightage == 1.0
    assert Parameter(id=1, name="p", weightage=40).effective_weightage == 40.0
    assert Parameter(id=1, name="p", weightage=0).effective_weightage == 0.0


def test_scorable_parameters(catalog):
    redundancy = catalog.dimensions[0]
    assert [p.id for p in redundancy.scorable_parameters] == [10, 11]


def test_lookups(catalog):
    assert catalog.asset(2).name == "Edge Router"
    assert catalog.site(2).name == "Branch"
    assert catalog.dimension_of(21).name == "Backup"
    assert catalog.dimension_of(999) is None
    with pytest.raises(KeyError):
        catalog.asset(999)


def test_assets_for_site(catalog):
    assert [a.id for a in catalog.assets_for_site(1)] == [1, 2, 3]
    assert [a.id for a in catalog.assets_for_site(1, service_id=1)] == [1, 2]
    assert catalog.assets_for_site(3) == []


def test_duplicate_parameter_ids_rejected():
    dims = [
        Dimension(id=1, name="A", parameters=(Parameter(id=10, name="x"),)),
        Dimension(id=2, name="B", parameters=(Parameter(id=10, name="y"),)),
    ]
    with pytest.raises(ConfigurationError, match="parameter"):
        Catalog(dimensions=dims)


def test_invalid_criticality_rejected():
    with pytest.raises(ConfigurationError, match="criticality"):
        Catalog(assets=[Asset(id=1, name="a", site_id=1, criticality="Critical")])


def test_weightage_out_of_range_rejected():
    dims = [Dimension(id=1, name="A", parameters=(Parameter(id=10, name="x", weightage=150),))]
    with pytest.raises(ConfigurationError, match="weightage"):
        Catalog(dimensions=dims)


def test_load_catalog(catalog_file):
    catalog = load_catalog(catalog_file)

    assert [d.name for d in catalog.dimensions] == ["Redundancy", "Backup"]
    assert catalog.dimensions[0].parameters[0].weightage == 75.0
    assert catalog.dimensions[1].parameters[0].weightage is None
    assert catalog.asset(1).criticality == "High"
    assert catalog.asset(2).service_id == 1


def test_load_catalog_missing_key(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text("assets:\n  - {id: 1, name: x, criticality: High}\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="site_id"):
        load_catalog(path)


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog(tmp_path / "nope.yaml")
