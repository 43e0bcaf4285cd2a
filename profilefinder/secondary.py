"""
Normalization of secondary-service mentions.

Conglomerator sources (FriendFeed, Rapleaf, DandyID) report that a user also
has accounts on other services, usually as some partial combination of a
service id, a user name, a numeric id and a profile URL. Each known service
has a rule here that turns such a mention into a ProfileRecord, or returns
None when the service is unknown or the mention carries nothing identifying.
"""

import re
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import quote_plus

from .config import DEFAULT_AVATAR_PROXY_URL
from .logger import get_logger
from .normalize import normalize_service_name
from .profile import ProfileRecord, ServiceMention

logger = get_logger()

Rule = Callable[[ServiceMention, "SecondaryServiceResolver"], Optional[ProfileRecord]]

FACEBOOK_ID_RE = re.compile(r"id=([0-9]+)")
LINKEDIN_NAME_RE = re.compile(r"/in/([^/?#]+)")
MYSPACE_ID_RE = re.compile(r"friendid=([0-9]+)", re.IGNORECASE)


def _from_url(pattern, url: str) -> str:
    m = pattern.search(url or "")
    return m.group(1) if m else ""


def _named_only(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    if not mention.user_name:
        return None
    return ProfileRecord(user_name=mention.user_name)


def _twitter(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    if not mention.user_name:
        return None
    return ProfileRecord(
        user_name=mention.user_name,
        portrait_url=resolver.avatar_url(mention.user_name, "twitter"),
    )


def _facebook(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    user_name, user_id = mention.user_name, mention.user_id
    if not user_name and not user_id:
        user_id = _from_url(FACEBOOK_ID_RE, mention.profile_url)
    if not user_name and not user_id:
        return None

    # DandyID reports the numeric Facebook id in its user-name field
    if user_name.isdigit():
        user_id, user_name = user_name, ""

    handle = user_name if user_name else f"#{user_id}"
    portrait_url = resolver.probed_avatar_url(handle, "facebook")
    return ProfileRecord(user_id=user_id, user_name=user_name, portrait_url=portrait_url)


def _linkedin(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    user_name, user_id = mention.user_name, mention.user_id
    if not user_name and not user_id:
        user_name = _from_url(LINKEDIN_NAME_RE, mention.profile_url)
    if not user_name and not user_id:
        return None
    return ProfileRecord(user_id=user_id, user_name=user_name)


def _digg(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    if not mention.user_name:
        return None
    return ProfileRecord(
        user_name=mention.user_name,
        portrait_url=resolver.probed_avatar_url(mention.user_name, "digg"),
    )


def _myspace(mention: ServiceMention, resolver) -> Optional[ProfileRecord]:
    user_name, user_id = mention.user_name, mention.user_id
    if not user_name and not user_id:
        user_id = _from_url(MYSPACE_ID_RE, mention.profile_url)
    if not user_name and not user_id:
        return None
    return ProfileRecord(user_id=user_id, user_name=user_name)


DEFAULT_RULES: Dict[str, Rule] = {
    "twitter": _twitter,
    "facebook": _facebook,
    "linkedin": _linkedin,
    "delicious": _named_only,
    "intensedebate": _named_only,
    "disqus": _named_only,
    "digg": _digg,
    "aim": _named_only,
    "myspace": _myspace,
}


class SecondaryServiceResolver:
    """Registry of per-service rules for secondary mentions.

    Rules are looked up by case-insensitive service id. The resolver holds no
    per-call state: ``probe`` (usually ``HttpTransport.exists``) is the only
    collaborator, used to check synthesized avatar URLs.
    """

    def __init__(
        self,
        probe: Optional[Callable[[str], bool]] = None,
        avatar_proxy_url: str = DEFAULT_AVATAR_PROXY_URL,
        rules: Optional[Dict[str, Rule]] = None,
    ):
        self.probe = probe
        self.avatar_proxy_url = avatar_proxy_url if avatar_proxy_url.endswith("/") else avatar_proxy_url + "/"
        self._rules: Dict[str, Rule] = dict(DEFAULT_RULES if rules is None else rules)

    def register(self, service_name: str, rule: Rule) -> None:
        self._rules[normalize_service_name(service_name)] = rule

    def registered_services(self) -> List[str]:
        return list(self._rules)

    def is_recognized(self, service_name: str) -> bool:
        return normalize_service_name(service_name) in self._rules

    def avatar_url(self, user_name: str, service: str) -> str:
        """Avatar-proxy URL for ``user_name@service``."""
        return self.avatar_proxy_url + quote_plus(f"{user_name}@{service}")

    def probed_avatar_url(self, user_name: str, service: str) -> str:
        """Avatar-proxy URL that 404s for unknown users; empty when the probe fails."""
        url = self.avatar_url(user_name, service) + "/default/404"
        if self.probe is None or not self.probe(url):
            return ""
        return url

    def resolve(self, mention: ServiceMention) -> Optional[ProfileRecord]:
        """Normalize one mention, or None when it should be dropped."""
        key = normalize_service_name(mention.service_name)
        rule = self._rules.get(key)
        if rule is None:
            logger.debug("Dropping unrecognized service mention", service=key)
            return None
        cleaned = ServiceMention(
            service_name=key,
            user_name=(mention.user_name or "").strip(),
            user_id=(mention.user_id or "").strip(),
            profile_url=(mention.profile_url or "").strip(),
        )
        record = rule(cleaned, self)
        if record is None:
            logger.debug("Dropping mention without identifying fields", service=key)
        return record

    def resolve_mentions(self, mentions: Iterable[ServiceMention]) -> Dict[str, ProfileRecord]:
        """Resolve many mentions; a later mention of a service replaces an earlier one."""
        resolved: Dict[str, ProfileRecord] = {}
        for mention in mentions:
            record = self.resolve(mention)
            if record is not None:
                resolved[normalize_service_name(mention.service_name)] = record
        return resolved
