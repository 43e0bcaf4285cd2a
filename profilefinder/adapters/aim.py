from ..documents import JsonDocument
from ..errors import ProfileNotFound
from ..profile import ProfileRecord
from .base import ServiceAdapter

PRESENCE_URL = "http://api.oscar.aol.com/presence/get"


class AimAdapter(ServiceAdapter):
    """AIM presence lookup by email; a user without a buddy icon counts as not found."""

    service_name = "aim"
    credential_name = "aim"
    required_credentials = ("key",)

    def find(self, email, fetch):
        doc = fetch.get_json(PRESENCE_URL, {
            "f": "json",
            "k": self.credential(),
            "t": email,
            "emailLookup": 1,
            "notFound": 1,
        })
        user = doc.get("response", "data", "users", 0)
        if not isinstance(user, dict):
            raise ProfileNotFound("presence response lists no users", self.service_name)
        user = JsonDocument(user)

        return self.own(ProfileRecord(
            user_name=user.get_str("aimId"),
            portrait_url=self.require(user.get_str("buddyIcon"), "buddyIcon"),
        ))
