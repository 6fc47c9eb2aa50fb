"""Exception taxonomy for the parcel resolution engine."""
from __future__ import annotations

from typing import Any, Dict, Optional


class ResolutionError(RuntimeError):
    """Base class for failures raised while talking to the registry."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class InputValidationError(ResolutionError, ValueError):
    """Raised when a point is malformed; rejected before any network activity."""


class UpstreamFunctionalError(ResolutionError):
    """The registry answered but reported an error through its status code."""

    def __init__(self, code: Optional[int], description: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"{description} (code {code if code is not None else 'N/A'})", context)
        self.code = code
        self.description = description


class UpstreamTransportError(ResolutionError):
    """Network failure, timeout, unexpected HTTP status or an unparseable body."""


class ParcelNotFound(ResolutionError):
    """The registry's own not-found signal for a coordinate."""


class InternalFault(ResolutionError):
    """Unexpected exception inside the engine; the only error surfaced to callers."""
