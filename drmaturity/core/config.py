"""
core/config.py
--------------
Formula configuration for the maturity scoring engine.

A :class:`FormulaSettings` instance is passed explicitly into every scoring
call.  The engine never reads settings from shared state, so recomputing with
the same observations and the same settings is always deterministic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

#: Criticality tiers an asset may declare.
CRITICALITY_LEVELS = ("High", "Medium", "Low")


class ConfigurationError(ValueError):
    """Raised for malformed formula settings or reference data."""


def _as_flag(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{key} must be true or false, got {value!r}")
    return value


def _as_number(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None


@dataclass
class FormulaSettings:
    """
    Scoring policy shared by all calculations of an assessment session.

    Attributes:
        use_dimension_weightage:        Weight parameter scores by their
                                        weightage instead of a plain mean.
        use_asset_criticality:          Scale dimension scores by the asset's
                                        criticality multiplier.
        dimension_weightage_multiplier: Global factor applied to weighted scores.
        criticality_multipliers:        Criticality tier -> multiplier.
    """

    use_dimension_weightage: bool = True
    use_asset_criticality: bool = False
    dimension_weightage_multiplier: float = 1.0

    criticality_multipliers: Dict[str, float] = field(default_factory=lambda: {
        "High": 1.2,
        "Medium": 1.0,
        "Low": 0.8,
    })

    def validate(self) -> None:
        """Validate that the settings can be used for scoring."""
        multiplier = self.dimension_weightage_multiplier
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ConfigurationError(
                f"dimension_weightage_multiplier must be a positive number, got {multiplier!r}"
            )
        if set(self.criticality_multipliers) != set(CRITICALITY_LEVELS):
            raise ConfigurationError(
                "criticality_multipliers must define exactly "
                f"{', '.join(CRITICALITY_LEVELS)}; got {sorted(self.criticality_multipliers)}"
            )
        for level, value in self.criticality_multipliers.items():
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    f"Criticality multiplier for {level!r} must be positive, got {value!r}"
                )

    def multiplier_for(self, criticality: str) -> float:
        """
        Return the multiplier for a criticality tier.

        Raises:
            ConfigurationError: If the tier is not in the multiplier table.
                This means the asset catalog is inconsistent, so it is never
                silently defaulted.
        """
        try:
            return self.criticality_multipliers[criticality]
        except KeyError:
            raise ConfigurationError(
                f"Unknown asset criticality {criticality!r}; expected one of "
                f"{sorted(self.criticality_multipliers)}"
            ) from None

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_dimension_weightage": self.use_dimension_weightage,
            "use_asset_criticality": self.use_asset_criticality,
            "dimension_weightage_multiplier": self.dimension_weightage_multiplier,
            "criticality_multipliers": dict(self.criticality_multipliers),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormulaSettings":
        """
        Build settings from a plain mapping, filling omitted keys with defaults.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        known = set(cls().to_dict())
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown formula setting(s): {', '.join(sorted(unknown))}"
            )

        settings = cls()
        for key in ("use_dimension_weightage", "use_asset_criticality"):
            if key in data:
                setattr(settings, key, _as_flag(key, data[key]))
        if "dimension_weightage_multiplier" in data:
            settings.dimension_weightage_multiplier = _as_number(
                "dimension_weightage_multiplier", data["dimension_weightage_multiplier"]
            )
        if "criticality_multipliers" in data:
            table = data["criticality_multipliers"]
            if not isinstance(table, dict):
                raise ConfigurationError("criticality_multipliers must be a mapping.")
            merged = dict(settings.criticality_multipliers)
            merged.update(
                {str(k): _as_number(f"criticality_multipliers.{k}", v) for k, v in table.items()}
            )
            settings.criticality_multipliers = merged

        settings.validate()
        return settings


def load_formula_settings(path: Union[str, Path]) -> FormulaSettings:
    """
    Load :class:`FormulaSettings` from a YAML file.

    Expected YAML structure::

        use_dimension_weightage: true
        use_asset_criticality: true
        dimension_weightage_multiplier: 1.0
        criticality_multipliers:
          High: 1.2
          Medium: 1.0
          Low: 0.8

    Raises:
        FileNotFoundError:  If the file does not exist.
        ConfigurationError: If the YAML is unreadable or invalid.
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Formula settings file not found: {settings_path}")

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data: Optional[Any] = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse formula settings YAML: {exc}") from exc

    if data is None:
        return FormulaSettings()
    if not isinstance(data, dict):
        raise ConfigurationError("Formula settings file must be a YAML dictionary.")
    return FormulaSettings.from_dict(data)


# Default policy: weightage on, criticality off.  Callers pass their own instance.
DEFAULT_FORMULA_SETTINGS = FormulaSettings()
