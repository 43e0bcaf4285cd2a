from ..documents import JsonDocument
from ..errors import ProfileNotFound
from ..profile import ProfileRecord
from .base import ServiceAdapter

LOOKUP_URL = "http://socialgraph.apis.google.com/lookup"


class GoogleAdapter(ServiceAdapter):
    """Social Graph lookup of ``mailto:`` edges; uses the first node with a photo."""

    service_name = "google"

    def find(self, email, fetch):
        doc = fetch.get_json(LOOKUP_URL, {
            "q": f"mailto:{email}",
            "fme": 1,
            "edi": 1,
            "edo": 1,
            "pretty": 1,
            "sgn": 1,
            "callback": "",
        })
        nodes = doc.get("nodes")
        if not isinstance(nodes, dict):
            raise ProfileNotFound("response has no nodes", self.service_name)

        for node in nodes.values():
            attributes = JsonDocument(node).get("attributes")
            if not isinstance(attributes, dict):
                continue
            attributes = JsonDocument(attributes)
            photo = attributes.get_str("photo")
            if not photo:
                continue
            return self.own(ProfileRecord(
                display_name=attributes.get_str("fn"),
                portrait_url=photo,
            ))

        raise ProfileNotFound("no node carries a photo", self.service_name)
