"""
PolySms Errors - Exceptions raised outside the send path

Send operations report failures through SmsResult. Exceptions are
reserved for configuration problems and transport-level failures that
adapters convert before they reach the caller.
"""

from typing import Optional


class PolySmsError(Exception):
    """Base class for all PolySms exceptions."""


class ConfigError(PolySmsError):
    """Raised when configuration is missing or malformed."""


class TransportError(PolySmsError):
    """Raised by a transport when a request cannot be completed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
