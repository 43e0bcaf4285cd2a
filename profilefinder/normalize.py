import re
from typing import Collection, Iterable


def normalize_text(s: str) -> str:
    return " ".join((s or "").strip().split())


def normalize_service_name(name: str) -> str:
    return normalize_text(name).lower()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def email_domain(email: str) -> str:
    """Domain part of an address, lower-cased; empty when there is no '@'."""
    _, sep, domain = (email or "").strip().rpartition("@")
    return domain.lower() if sep else ""


def email_local_part(email: str) -> str:
    local, sep, _ = (email or "").strip().rpartition("@")
    return local if sep else ""


def scrub_sentinel(url: str, sentinels: Collection[str]) -> str:
    """Blank a portrait URL when it is one of a source's placeholder images."""
    url = (url or "").strip()
    if url in sentinels:
        return ""
    return url


def join_location(parts: Iterable[str]) -> str:
    return ", ".join(p.strip() for p in parts if p and p.strip())


def join_name(*parts: str) -> str:
    return normalize_text(" ".join(p for p in parts if p))


_SITE_RE = re.compile(r"(.*)\.com")


def service_from_site(site: str) -> str:
    """Turn a membership site such as 'twitter.com' into a service key."""
    m = _SITE_RE.match(site or "")
    if m:
        return normalize_service_name(m.group(1))
    return normalize_service_name(site)
