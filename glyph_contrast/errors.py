"""Exceptions raised when callers hand the analysis malformed input."""
from __future__ import annotations


class ContractViolation(ValueError):
    """The screenshot and text mask do not form a well-formed page."""


class ConfigurationError(ValueError):
    """An analysis setting is outside its accepted range."""
