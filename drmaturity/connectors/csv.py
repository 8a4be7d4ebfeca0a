"""
connectors/csv.py
-----------------
Loads an observation sheet from a CSV file.

The sheet uses the columns ``AssetId``, ``ParameterId``, ``Score``, ``Value``,
``Notes`` and ``LastUpdated``.  A leading metadata row (``SiteId``,
``Auditor``) is allowed; rows without both ids are ignored.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import pandas as pd

from drmaturity.connectors.base import BaseConnector
from drmaturity.core.catalog import Catalog
from drmaturity.core.observations import ObservationSet

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("AssetId", "ParameterId")


class ObservationCSVConnector(BaseConnector):
    """
    Reads an observation sheet CSV into a DataFrame or an
    :class:`~drmaturity.core.observations.ObservationSet`.

    Args:
        filepath:  Path to the CSV file.
        encoding:  File encoding (default: ``'utf-8-sig'`` handles BOM).
        delimiter: Column delimiter (default: ``','``).

    Example::

        connector = ObservationCSVConnector("site-1.csv")
        connector.connect()
        observations = connector.load_observations(catalog)
    """

    def __init__(
        self,
        filepath: str,
        encoding: str = "utf-8-sig",
        delimiter: str = ",",
    ) -> None:
        self.filepath = filepath
        self.encoding = encoding
        self.delimiter = delimiter
        self._connected: bool = False

    # ------------------------------------------------------------------
    # BaseConnector interface
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError:        If the path points to a directory.
        """
        if not os.path.exists(self.filepath):
            raise FileNotFoundError(f"Observation sheet not found: {self.filepath!r}")
        if os.path.isdir(self.filepath):
            raise ValueError(f"Expected a file path, got a directory: {self.filepath!r}")
        self._connected = True

    def fetch(self) -> pd.DataFrame:
        """
        Read the CSV file.

        Raises:
            RuntimeError: If :meth:`connect` was not called first.
            ValueError:   If a required column is missing.
        """
        if not self._connected:
            raise RuntimeError("Call connect() before fetch().")

        try:
            df = pd.read_csv(
                self.filepath,
                encoding=self.encoding,
                sep=self.delimiter,
                dtype={"Value": str, "Notes": str},
                keep_default_na=False,
                na_values={"AssetId": [""], "ParameterId": [""], "Score": [""]},
            )
        except UnicodeDecodeError:
            logger.warning("UTF-8 decode failed for %r; retrying with latin-1.", self.filepath)
            df = pd.read_csv(
                self.filepath,
                encoding="latin-1",
                sep=self.delimiter,
                dtype={"Value": str, "Notes": str},
                keep_default_na=False,
                na_values={"AssetId": [""], "ParameterId": [""], "Score": [""]},
            )

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(
                f"Observation sheet {self.filepath!r} is missing column(s): {', '.join(missing)}"
            )
        return df

    # ------------------------------------------------------------------
    # Observation helpers
    # ------------------------------------------------------------------

    def read_header(self) -> Dict[str, Any]:
        """
        Return the sheet's metadata row (``SiteId``, ``Auditor``) if present.
        """
        df = self.fetch()
        header: Dict[str, Any] = {}
        if df.empty:
            return header
        first = df.iloc[0]
        if "SiteId" in df.columns and pd.notna(first.get("SiteId")) and first["SiteId"] != "":
            header["site_id"] = int(first["SiteId"])
        if "Auditor" in df.columns and first.get("Auditor"):
            header["auditor"] = str(first["Auditor"])
        return header

    def load_observations(self, catalog: Optional[Catalog] = None) -> ObservationSet:
        """
        Convert the sheet into an :class:`ObservationSet`.

        When a *catalog* is given, rows for unknown assets or parameters are
        dropped with a warning.

        Raises:
            ObservationError: If a row carries an invalid score.
        """
        df = self.fetch()
        observations = ObservationSet.from_records(df.to_dict(orient="records"))
        if catalog is None:
            return observations

        asset_ids = {a.id for a in catalog.assets}
        parameter_ids = {p.id for d in catalog.dimensions for p in d.parameters}
        kept = {}
        for key, observation in observations.items():
            if key.asset_id in asset_ids and key.parameter_id in parameter_ids:
                kept[key] = observation
            else:
                logger.warning(
                    "Ignoring observation for unknown asset %s / parameter %s in %r",
                    key.asset_id, key.parameter_id, self.filepath,
                )
        return ObservationSet(kept)

    def __repr__(self) -> str:
        return f"ObservationCSVConnector(filepath={self.filepath!r}, connected={self._connected})"
