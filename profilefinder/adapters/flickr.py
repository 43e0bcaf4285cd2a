from urllib.parse import quote_plus

from ..profile import ProfileRecord
from .base import ServiceAdapter

API_URL = "https://api.flickr.com/services/rest/"


def buddy_icon_url(user_id: str, icon_server: str, icon_farm: str) -> str:
    """Build the buddy icon URL from the person's iconserver/iconfarm attributes.

    An iconserver of 0 means the user never uploaded one.
    """
    try:
        server = int(icon_server or 0)
    except ValueError:
        server = 0
    if server <= 0:
        return ""
    return f"http://farm{icon_farm or 0}.static.flickr.com/{icon_server}/buddyicons/{quote_plus(user_id)}.jpg"


class FlickrAdapter(ServiceAdapter):
    service_name = "flickr"
    credential_name = "flickr"
    required_credentials = ("key",)

    def find(self, email, fetch):
        found = fetch.get_xml(API_URL, {
            "method": "flickr.people.findByEmail",
            "api_key": self.credential(),
            "find_email": email,
        })
        user_id = self.require(found.first_attribute("user", "id", None), "user id")

        info = fetch.get_xml(API_URL, {
            "method": "flickr.people.getInfo",
            "api_key": self.credential(),
            "user_id": user_id,
        })
        user_name = self.require(info.first_value("username", None), "username")
        portrait_url = buddy_icon_url(
            user_id,
            info.first_attribute("person", "iconserver", "0"),
            info.first_attribute("person", "iconfarm", "0"),
        )

        return self.own(ProfileRecord(
            user_id=user_id,
            user_name=user_name,
            display_name=info.first_value("realname"),
            portrait_url=portrait_url,
            location=info.first_value("location"),
        ))
