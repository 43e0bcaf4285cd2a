from urllib.parse import quote_plus

from ..normalize import join_location, join_name
from ..profile import ProfileRecord, ServiceMention
from .base import ServiceAdapter

PROFILE_URL = "http://www.dandyid.org/api/return_profile/{key}/{email}/public"
SERVICES_URL = "http://www.dandyid.org/api/return_services/{key}/{email}/public"


class DandyIdAdapter(ServiceAdapter):
    """DandyID profile plus the list of services the user has claimed.

    Both calls must succeed; a failed services call drops the whole lookup.
    """

    service_name = "dandyid"
    credential_name = "dandyid"
    required_credentials = ("key",)
    conglomerator = True

    def _url(self, template: str, email: str) -> str:
        return template.format(key=quote_plus(self.credential()), email=quote_plus(email))

    def find(self, email, fetch):
        doc = fetch.get_xml(self._url(PROFILE_URL, email))
        user_id = self.require(doc.first_value("userid", None), "userId")

        records = self.own(ProfileRecord(
            user_id=user_id,
            user_name=doc.first_value("nickname"),
            display_name=join_name(doc.first_value("firstname"), doc.first_value("lastname")),
            location=join_location([
                doc.first_value("street"),
                doc.first_value("city"),
                doc.first_value("region"),
                doc.first_value("country"),
            ]),
        ))

        services = fetch.get_xml(self._url(SERVICES_URL, email))
        mentions = [
            ServiceMention(
                service_name=service.child_text("svcid"),
                user_name=service.child_text("usrsvcid"),
                profile_url=service.child_text("url"),
            )
            for service in services.find_all("services/service")
        ]
        return self.add_mentions(records, mentions, fetch)
