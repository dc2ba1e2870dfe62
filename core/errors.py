from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors the dashboard surfaces to the user."""


class DataUnavailableError(DashboardError):
    """None of the candidate data files could be loaded."""


class InvalidDateRangeError(DashboardError):
    """A filter was applied without both a start and an end date."""
