import hashlib

from ..errors import ProfileNotFound
from ..normalize import normalize_email
from ..profile import ProfileRecord
from .base import ServiceAdapter

# default=404 makes Gravatar answer 404 instead of serving its placeholder image
PORTRAIT_URL = "https://www.gravatar.com/avatar/{digest}?default=404&size=40"


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(normalize_email(email).encode("utf-8")).hexdigest()
    return PORTRAIT_URL.format(digest=digest)


class GravatarAdapter(ServiceAdapter):
    """Avatar-hash lookup; the only thing Gravatar tells us is the portrait."""

    service_name = "gravatar"

    def find(self, email, fetch):
        portrait_url = gravatar_url(email)
        if not fetch.exists(portrait_url):
            raise ProfileNotFound("no avatar registered for address", self.service_name)
        return self.own(ProfileRecord(portrait_url=portrait_url))
