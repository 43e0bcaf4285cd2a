from typing import Any, List, Mapping
from urllib.parse import urlparse

REQUIRED_STR_FIELDS = ["user_id", "user_name", "display_name", "portrait_url", "location"]


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme in ("http", "https") and p.netloc)
    except Exception:
        return False


def validate_profile(data: Mapping[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    A valid profile carries all five fields as strings; empty strings are allowed.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string")

    # Portrait shape if present
    portrait = data.get("portrait_url")
    if isinstance(portrait, str) and portrait.strip():
        if not _valid_url(portrait):
            errors.append("Field 'portrait_url' must be an absolute http(s) URL")

    return errors


def validate_result(result: Mapping[str, Any]) -> List[str]:
    """Validate a service-name -> profile mapping, prefixing errors with the service."""
    errors: List[str] = []
    for service, profile in result.items():
        if not isinstance(service, str) or not service.strip():
            errors.append(f"Invalid service key: {service!r}")
            continue
        data = profile.to_dict() if hasattr(profile, "to_dict") else profile
        if not isinstance(data, Mapping):
            errors.append(f"{service}: profile must be a mapping")
            continue
        errors.extend(f"{service}: {e}" for e in validate_profile(data))
    return errors
