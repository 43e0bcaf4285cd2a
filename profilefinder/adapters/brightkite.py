from ..normalize import scrub_sentinel
from ..profile import ProfileRecord
from .base import ServiceAdapter

SEARCH_URL = "http://brightkite.com/people/search.xml"

DEFAULT_AVATARS = ("http://brightkite.com/images/default_user_avatar_small.png",)


class BrightkiteAdapter(ServiceAdapter):
    service_name = "brightkite"

    def find(self, email, fetch):
        doc = fetch.get_xml(SEARCH_URL, {"query": email})
        return self.own(ProfileRecord(
            user_name=self.require(doc.first_value("login", None), "login"),
            display_name=doc.first_value("fullname"),
            portrait_url=scrub_sentinel(doc.first_value("small_avatar_url"), DEFAULT_AVATARS),
            location=doc.first_value("display_location"),
        ))
