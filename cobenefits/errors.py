"""Error taxonomy for loading and querying a co-benefit dataset.

Per-field anomalies (bad numbers, short rows) never show up here: they are
recovered locally by the parser. Only structural and query-level problems are
raised. An unknown area is not an error either; lookups return ``None``.
"""

from __future__ import annotations


class CoBenefitsError(Exception):
    """Base class for all dashboard errors."""


class MalformedInput(CoBenefitsError, ValueError):
    """The input text has no header line."""


class LoadFailed(CoBenefitsError):
    """The dataset could not be fetched or read."""


class EmptySelection(CoBenefitsError):
    """A selection-dependent aggregate was requested with no benefits selected."""


class DatasetLoading(CoBenefitsError):
    """A query arrived while a dataset load is still in flight."""
