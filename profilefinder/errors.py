"""
Error taxonomy for profile lookups.

Everything below ResolutionTimeout is swallowed at the adapter boundary and
turned into an empty result; ResolutionTimeout is the only error a caller of
the engine sees.
"""

from typing import Optional, Sequence


class ProfileLookupError(Exception):
    """Base class for a failed lookup against one source."""

    def __init__(self, message: str, service: Optional[str] = None):
        super().__init__(message)
        self.service = service


class SourceUnavailable(ProfileLookupError):
    """Transport failure or a non-success status from the source."""

    cause = "unavailable"


class UnparseableResponse(ProfileLookupError):
    """The source answered, but the body was not valid XML/JSON."""

    cause = "unparseable"


class ProfileNotFound(ProfileLookupError):
    """Well-formed response without the service's defining field."""

    cause = "not_found"


class LookupCancelled(ProfileLookupError):
    """The invocation was abandoned by the engine between steps."""

    cause = "cancelled"


class ResolutionTimeout(Exception):
    """The overall deadline passed before every adapter finished.

    ``partial`` holds the merged records from adapters that did finish;
    ``pending`` names the services that were still running.
    """

    def __init__(self, message: str, partial, pending: Sequence[str] = ()):
        super().__init__(message)
        self.partial = partial
        self.pending = tuple(pending)
