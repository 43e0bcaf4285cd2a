"""
profilefinder: resolve an email address into public profiles.

The main entry point is find_by_email(), which queries every configured source
and returns a read-only mapping of service name to ProfileRecord.
"""

__version__ = "0.3.0"

from .engine import ResolutionEngine, find_by_email, merge_results
from .errors import ResolutionTimeout
from .profile import ProfileRecord, ServiceMention, result_to_dict
from .secondary import SecondaryServiceResolver

__all__ = [
    "ProfileRecord",
    "ResolutionEngine",
    "ResolutionTimeout",
    "SecondaryServiceResolver",
    "ServiceMention",
    "find_by_email",
    "merge_results",
    "result_to_dict",
]
