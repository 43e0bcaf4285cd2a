"""
Amazon customer-content lookup.

Product Advertising API requests are signed with HMAC-SHA256 over the
canonical query string (Signature Version 2).
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote, urlparse

from ..profile import ProfileRecord
from .base import ServiceAdapter

ENDPOINT = "http://ecs.amazonaws.com/onca/xml"
API_VERSION = "2009-03-01"


def _encode(value) -> str:
    return quote(str(value), safe="-_.~")


def sign_url(
    endpoint: str,
    params: Dict[str, str],
    access_key: str,
    secret_key: str,
    timestamp: Optional[datetime] = None,
) -> str:
    """Return ``endpoint`` with the sorted, signed query string appended."""
    timestamp = timestamp or datetime.now(timezone.utc)
    query = dict(params)
    query["Timestamp"] = timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    query["Version"] = API_VERSION
    query["AWSAccessKeyId"] = access_key

    canonical = "&".join(f"{_encode(k)}={_encode(v)}" for k, v in sorted(query.items()))
    p = urlparse(endpoint)
    string_to_sign = "\n".join(["GET", p.netloc, p.path or "/", canonical])
    digest = hmac.new(secret_key.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return f"{p.scheme}://{p.netloc}{p.path}?{canonical}&Signature={_encode(signature)}"


class AmazonAdapter(ServiceAdapter):
    service_name = "amazon"
    credential_name = "amazon"
    required_credentials = ("key", "secret")

    def _signed(self, **params) -> str:
        params = {"Service": "AWSECommerceService", **params}
        return sign_url(ENDPOINT, params, self.credential("key"), self.credential("secret"))

    def find(self, email, fetch):
        found = fetch.get_xml(self._signed(Operation="CustomerContentSearch", Email=email))
        user_id = self.require(found.first_value("customerid", None), "CustomerId")

        info = fetch.get_xml(self._signed(Operation="CustomerContentLookup", CustomerId=user_id))
        # The profile page (/gp/pdp/profile/<id>) has a portrait, but only as HTML
        return self.own(ProfileRecord(
            user_id=user_id,
            user_name=info.first_value("nickname"),
            location=info.first_value("userdefinedlocation"),
        ))
