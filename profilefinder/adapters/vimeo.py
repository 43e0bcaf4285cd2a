from ..normalize import scrub_sentinel
from ..profile import ProfileRecord
from .base import ServiceAdapter

API_URL = "http://vimeo.com/api/rest/v2"

DEFAULT_PORTRAITS = ("http://bitcast.vimeo.com/vimeo/portraits/defaults/d.30.jpg",)


class VimeoAdapter(ServiceAdapter):
    """Three calls: find the user id, fetch the profile, fetch the portraits."""

    service_name = "vimeo"
    credential_name = "vimeo"
    required_credentials = ("key",)

    def _call(self, fetch, method: str, **params):
        return fetch.get_xml(API_URL, {"method": method, "api_key": self.credential(), **params})

    def find(self, email, fetch):
        found = self._call(fetch, "vimeo.people.findByEmail", find_email=email)
        user_id = self.require(found.first_attribute("user", "id", None), "user id")

        info = self._call(fetch, "vimeo.people.getInfo", user_id=user_id)
        user_name = self.require(info.first_value("username", None), "username")

        portraits = self._call(fetch, "vimeo.people.getPortraitUrls", user_id=user_id)
        portrait_url = scrub_sentinel(portraits.first_value("portrait"), DEFAULT_PORTRAITS)

        return self.own(ProfileRecord(
            user_id=user_id,
            user_name=user_name,
            display_name=info.first_value("displayname"),
            portrait_url=portrait_url,
            location=info.first_value("location"),
        ))
