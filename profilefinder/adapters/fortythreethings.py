from ..profile import ProfileRecord
from .base import ServiceAdapter

SEARCH_URL = "http://www.43things.com/service/search_people_by_email"


class FortyThreeThingsAdapter(ServiceAdapter):
    service_name = "43things"
    credential_name = "43things"
    required_credentials = ("key",)

    def find(self, email, fetch):
        doc = fetch.get_xml(SEARCH_URL, {"api_key": self.credential(), "q": email})
        return self.own(ProfileRecord(
            user_name=self.require(doc.first_value("username", None), "username"),
            display_name=doc.first_value("name"),
            portrait_url=doc.first_value("profile_image_url"),
        ))
