"""
Normalized profile records and the result mapping returned by a resolution.
"""

from dataclasses import asdict, dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple

from .schema import validate_profile

PROFILE_FIELDS = ("user_id", "user_name", "display_name", "portrait_url", "location")


@dataclass(frozen=True)
class ProfileRecord:
    """One person's presence on one named service.

    Every field is a string; an empty string means the source did not supply it.
    """

    user_id: str = ""
    user_name: str = ""
    display_name: str = ""
    portrait_url: str = ""
    location: str = ""

    def __post_init__(self):
        # Sources hand back None or numbers for missing/numeric ids
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                object.__setattr__(self, f.name, "")
            elif not isinstance(value, str):
                object.__setattr__(self, f.name, str(value))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileRecord":
        errors = validate_profile(data)
        if errors:
            raise ValueError("Invalid profile: " + "; ".join(errors))
        return cls(**{name: data[name] for name in PROFILE_FIELDS})


class ServiceMention(NamedTuple):
    """A conglomerator's claim that the user also has an account elsewhere."""

    service_name: str
    user_name: str = ""
    user_id: str = ""
    profile_url: str = ""


ResolutionResult = Mapping[str, ProfileRecord]

EMPTY_RESULT: ResolutionResult = MappingProxyType({})


def freeze_result(records: Mapping[str, ProfileRecord]) -> ResolutionResult:
    """Return a read-only copy of a service-name -> record mapping."""
    if not records:
        return EMPTY_RESULT
    return MappingProxyType(dict(records))


def result_to_dict(result: ResolutionResult) -> Dict[str, Dict[str, str]]:
    """Render a result as plain dicts, ready for json.dumps."""
    return {service: record.to_dict() for service, record in result.items()}
