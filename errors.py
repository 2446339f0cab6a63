"""
Error taxonomy for the macro data pipeline.

Per-series errors (UpstreamUnavailable, EmptySeries, MalformedValue) are
contained at the fetch boundary and turn into null metrics. CriticalDataMissing
and ConfigurationMissing escalate to a failed HTTP response.
"""

from typing import Optional


class MacroDataError(Exception):
    """Base class for all macro data errors."""

    code = "MACRO_DATA_ERROR"

    def __init__(self, message: str, series_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.series_id = series_id


class UpstreamUnavailable(MacroDataError):
    """Network failure, timeout or non-2xx response from the provider."""

    code = "UPSTREAM_UNAVAILABLE"


class EmptySeries(MacroDataError):
    """Provider answered but returned zero observations."""

    code = "EMPTY_SERIES"


class MalformedValue(MacroDataError):
    """An observation value could not be parsed as a finite decimal."""

    code = "MALFORMED_VALUE"


class CriticalDataMissing(MacroDataError):
    """Both critical series (price index and policy rate) are unusable."""

    code = "CRITICAL_DATA_MISSING"


class ConfigurationMissing(MacroDataError):
    """Required configuration (the upstream credential) is absent."""

    code = "CONFIGURATION_MISSING"
