"""
connectors/base.py
------------------
Abstract base class for observation sheet connectors.
"""

from abc import ABC, abstractmethod

import pandas as pd


class BaseConnector(ABC):
    """
    Abstract interface for sources of observation sheets.

    Subclasses must implement :meth:`connect` and :meth:`fetch`.  The
    recommended usage pattern is::

        connector = SomeConnector(...)
        connector.connect()
        df = connector.fetch()
    """

    @abstractmethod
    def connect(self) -> None:
        """
        Validate that the source is reachable.

        Should raise a meaningful exception (e.g. ``FileNotFoundError``) if
        it is not.
        """

    @abstractmethod
    def fetch(self) -> pd.DataFrame:
        """
        Return the sheet as a DataFrame.

        Raises:
            RuntimeError: If :meth:`connect` has not been called first.
        """

    def connect_and_fetch(self) -> pd.DataFrame:
        self.connect()
        return self.fetch()
