"""connectors sub-package — observation sheet sources."""

from drmaturity.connectors.base import BaseConnector
from drmaturity.connectors.csv import ObservationCSVConnector

__all__ = ["BaseConnector", "ObservationCSVConnector"]
