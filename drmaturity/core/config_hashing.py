"""
core/config_hashing.py
----------------------
Deterministic hashing of :class:`~drmaturity.core.config.FormulaSettings` so
that an archived snapshot records exactly which formula produced its scores.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict

from drmaturity.core.config import FormulaSettings


def _settings_to_serialisable(settings: FormulaSettings) -> Dict[str, Any]:
    """
    Convert settings to a JSON-serialisable dict with sorted keys at every level.

    Multipliers are normalised to floats so that ``1`` and ``1.0`` hash alike.
    """
    raw = settings.to_dict()
    raw["dimension_weightage_multiplier"] = float(raw["dimension_weightage_multiplier"])
    raw["criticality_multipliers"] = {
        k: float(v) for k, v in sorted(raw["criticality_multipliers"].items())
    }
    return {k: raw[k] for k in sorted(raw)}


def compute_settings_hash(settings: FormulaSettings) -> str:
    """
    Compute a deterministic SHA-256 hash of a :class:`FormulaSettings` instance.

    Returns:
        Lowercase hex digest string (64 characters).

    Example::

        h = compute_settings_hash(FormulaSettings())
        # h == compute_settings_hash(FormulaSettings())  # always True
    """
    canonical_json = json.dumps(
        _settings_to_serialisable(settings), sort_keys=True, separators=(",", ":")
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
