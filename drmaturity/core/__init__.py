"""core sub-package — reference catalog, observations, formula settings and hashing."""

from drmaturity.core.catalog import Asset, Catalog, Dimension, Parameter, Service, Site, load_catalog
from drmaturity.core.config import (
    DEFAULT_FORMULA_SETTINGS,
    ConfigurationError,
    FormulaSettings,
    load_formula_settings,
)
from drmaturity.core.config_hashing import compute_settings_hash
from drmaturity.core.observations import Observation, ObservationError, ObservationKey, ObservationSet

__all__ = [
    "Asset",
    "Catalog",
    "Dimension",
    "Parameter",
    "Service",
    "Site",
    "load_catalog",
    "FormulaSettings",
    "DEFAULT_FORMULA_SETTINGS",
    "ConfigurationError",
    "load_formula_settings",
    "compute_settings_hash",
    "Observation",
    "ObservationError",
    "ObservationKey",
    "ObservationSet",
]
