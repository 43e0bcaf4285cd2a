from ..documents import JsonDocument
from ..errors import ProfileNotFound
from ..normalize import email_domain, email_local_part, scrub_sentinel
from ..profile import ProfileRecord
from .base import ServiceAdapter

YQL_URL = "https://query.yahooapis.com/v1/public/yql"

# Placeholder served for profiles without a picture
NO_PICTURE_URLS = ("http://l.yimg.com/us.yimg.com/i/identity/nopic_192.gif",)

PROFILE_QUERY = (
    "select * from social.profile where guid in "
    "(select guid from yahoo.identity where yid='{yid}')"
)


class YahooAdapter(ServiceAdapter):
    """Yahoo social directory; only applies to @yahoo.com addresses.

    The Yahoo ID is the local part of the address.
    """

    service_name = "yahoo"
    credential_name = "yahoo"
    required_credentials = ("key",)

    def find(self, email, fetch):
        if email_domain(email) != "yahoo.com":
            raise ProfileNotFound("not a yahoo.com address", self.service_name)
        user_name = email_local_part(email)
        if not user_name or "'" in user_name:
            raise ProfileNotFound("no usable Yahoo ID in address", self.service_name)

        doc = fetch.get_json(YQL_URL, {
            "q": PROFILE_QUERY.format(yid=user_name),
            "format": "json",
            "appid": self.credential(),
        })
        profile = doc.get("query", "results", "profile")
        if not isinstance(profile, dict):
            raise ProfileNotFound("query returned no profile", self.service_name)
        profile = JsonDocument(profile)

        return self.own(ProfileRecord(
            user_id=self.require(profile.get_str("guid"), "guid"),
            user_name=user_name,
            portrait_url=scrub_sentinel(profile.get_str("image", "imageUrl"), NO_PICTURE_URLS),
            location=profile.get_str("location"),
        ))
