import pytest

from drmaturity.core.config import (
    ConfigurationError,
    FormulaSettings,
    load_formula_settings,
)
from drmaturity.core.config_hashing import compute_settings_hash


def test_default_settings():
    settings = FormulaSettings()
    settings.validate()

    assert settings.use_dimension_weightage is True
    assert settings.use_asset_criticality is False
    assert settings.dimension_weightage_multiplier == 1.0
    assert settings.criticality_multipliers == {"High": 1.2, "Medium": 1.0, "Low": 0.8}


def test_multiplier_for_unknown_criticality_raises():
    with pytest.raises(ConfigurationError, match="Critical"):
        FormulaSettings().multiplier_for("Critical")


@pytest.mark.parametrize("multiplier", [0, -1.0, float("inf"), float("nan")])
def test_invalid_global_multiplier(multiplier):
    settings = FormulaSettings(dimension_weightage_multiplier=multiplier)
    with pytest.raises(ConfigurationError):
        settings.validate()


def test_criticality_table_must_be_complete():
    settings = FormulaSettings(criticality_multipliers={"High": 1.2, "Low": 0.8})
    with pytest.raises(ConfigurationError, match="Medium"):
        settings.validate()


def test_from_dict_merges_partial_table():
    settings = FormulaSettings.from_dict({
        "use_asset_criticality": True,
        "criticality_multipliers": {"High": 1.5},
    })
    assert settings.use_asset_criticality is True
    assert settings.criticality_multipliers == {"High": 1.5, "Medium": 1.0, "Low": 0.8}


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigurationError, match="weightage_mode"):
        FormulaSettings.from_dict({"weightage_mode": "fixed"})


def test_to_dict_round_trip():
    settings = FormulaSettings(use_dimension_weightage=False, dimension_weightage_multiplier=0.9)
    assert FormulaSettings.from_dict(settings.to_dict()) == settings


def test_load_formula_settings(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "use_asset_criticality: true\n"
        "dimension_weightage_multiplier: 1.1\n"
        "criticality_multipliers:\n"
        "  Low: 0.5\n",
        encoding="utf-8",
    )
    settings = load_formula_settings(path)
    assert settings.use_asset_criticality is True
    assert settings.dimension_weightage_multiplier == pytest.approx(1.1)
    assert settings.criticality_multipliers["Low"] == 0.5


def test_load_formula_settings_empty_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")
    assert load_formula_settings(path) == FormulaSettings()


def test_load_formula_settings_invalid(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_formula_settings(path)

    with pytest.raises(FileNotFoundError):
        load_formula_settings(tmp_path / "missing.yaml")


def test_settings_hash():
    hash1 = compute_settings_hash(FormulaSettings())
    hash2 = compute_settings_hash(FormulaSettings(use_asset_criticality=True))

    assert hash1 == compute_settings_hash(FormulaSettings())
    assert hash1 != hash2
    assert len(hash1) == 64
    # integer and float multipliers hash alike
    assert compute_settings_hash(FormulaSettings(dimension_weightage_multiplier=1)) == hash1


@pytest.mark.parametrize("value", ["false", "yes", 0, None])
def test_from_dict_rejects_non_boolean_flags(value):
    with pytest.raises(ConfigurationError, match="use_dimension_weightage"):
        FormulaSettings.from_dict({"use_dimension_weightage": value})


@pytest.mark.parametrize(
    "data",
    [
        {"dimension_weightage_multiplier": "high"},
        {"dimension_weightage_multiplier": None},
        {"dimension_weightage_multiplier": True},
        {"criticality_multipliers": {"High": "x"}},
    ],
)
def test_from_dict_rejects_non_numeric_multipliers(data):
    with pytest.raises(ConfigurationError, match="must be a number"):
        FormulaSettings.from_dict(data)


def test_load_formula_settings_quoted_flag(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text('use_dimension_weightage: "false"\n', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_formula_settings(path)
