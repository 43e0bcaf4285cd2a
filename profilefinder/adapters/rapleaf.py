from dataclasses import replace
from urllib.parse import quote_plus

from ..normalize import service_from_site
from ..profile import ProfileRecord, ServiceMention
from .base import ServiceAdapter

PERSON_URL = "http://api.rapleaf.com/v2/person/{email}"


class RapleafAdapter(ServiceAdapter):
    """Rapleaf person lookup.

    Memberships name a site (``twitter.com``) and a profile URL; those become
    secondary mentions, and Rapleaf's own image for a membership is used when
    the resolver could not find a portrait.
    """

    service_name = "rapleaf"
    credential_name = "rapleaf"
    required_credentials = ("key",)
    conglomerator = True

    def find(self, email, fetch):
        doc = fetch.get_xml(PERSON_URL.format(email=quote_plus(email)), {"api_key": self.credential()})
        user_id = self.require(doc.first_attribute("person", "id", None), "person id")

        records = self.own(ProfileRecord(
            user_id=user_id,
            display_name=doc.first_value("person/basics/name"),
            location=doc.first_value("person/basics/location"),
        ))

        for membership in doc.find_all("person/memberships/primary/membership"):
            fetch.check_cancelled()
            profile_url = membership.attribute("profile_url")
            if not profile_url:
                continue
            service = service_from_site(membership.attribute("site"))
            record = self.resolver.resolve(ServiceMention(service, profile_url=profile_url))
            if record is None or service == self.service_name:
                continue
            image_url = membership.attribute("image_url")
            if not record.portrait_url and image_url:
                record = replace(record, portrait_url=image_url)
            records[service] = record
        return records
