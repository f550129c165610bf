"""
Error definitions for the cluster simulator.

Unplaceable jobs are not errors: a job that fits on no node is dropped
and shows up in the result's ``jobs_dropped`` count.
"""

from typing import Any, Dict, Optional


class SimulationError(Exception):
    """Base exception class for all simulator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(SimulationError):
    """Raised for an unknown policy name or an invalid pool configuration."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        details = {}
        if field is not None:
            details["field"] = field
            details["value"] = value
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidJobDescriptor(SimulationError, ValueError):
    """Raised when a job is built from out-of-range or malformed fields."""

    def __init__(self, message: str, job_id: Any = None, field: Optional[str] = None):
        details = {}
        if job_id is not None:
            details["job_id"] = job_id
        if field is not None:
            details["field"] = field
        super().__init__(message, details)
        self.job_id = job_id
        self.field = field
