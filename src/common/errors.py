# ABOUTME: Declares the error types raised by grade record sources and configuration.
# ABOUTME: Unrecognized categories and empty categories are handled in-band and have no class here.


class GradeSourceError(RuntimeError):
    """Base class for failures of a grade record source."""


class SourceUnavailable(GradeSourceError):
    """The record source could not return data."""


class ConfigError(ValueError):
    """A configuration value is missing or not one of the accepted names."""
