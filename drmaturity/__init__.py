"""
drmaturity — Disaster-recovery maturity assessment SDK v0.1
"""

__version__ = "0.1.0"
__author__ = "drmaturity"

from drmaturity.core.catalog import Catalog, load_catalog
from drmaturity.core.config import FormulaSettings, DEFAULT_FORMULA_SETTINGS
from drmaturity.core.observations import ObservationSet

__all__ = [
    "Catalog",
    "load_catalog",
    "FormulaSettings",
    "DEFAULT_FORMULA_SETTINGS",
    "ObservationSet",
    "__version__",
]
