from urllib.parse import quote_plus

from ..documents import JsonDocument, json_str
from ..errors import ProfileNotFound
from ..profile import ProfileRecord, ServiceMention
from .base import ServiceAdapter

FEED_URL = "http://friendfeed.com/api/feed/user"
PROFILE_URL = "http://friendfeed.com/api/user/{nickname}/profile"
PICTURE_URL = "http://friendfeed.com/{nickname}/picture?size=medium"


class FriendFeedAdapter(ServiceAdapter):
    """FriendFeed user feed and profile.

    The profile lists the other services the user imports into FriendFeed;
    each becomes a secondary mention.
    """

    service_name = "friendfeed"
    conglomerator = True

    def find(self, email, fetch):
        feed = fetch.get_json(FEED_URL, {"emails": email})
        user = feed.get("entries", 0, "user")
        if not isinstance(user, dict):
            raise ProfileNotFound("feed has no entries for address", self.service_name)
        user = JsonDocument(user)
        user_name = self.require(user.get_str("nickname"), "nickname")

        profile = fetch.get_json(PROFILE_URL.format(nickname=quote_plus(user_name)))
        records = self.own(ProfileRecord(
            user_id=user.get_str("id"),
            user_name=user_name,
            display_name=profile.get_str("name"),
            portrait_url=PICTURE_URL.format(nickname=quote_plus(user_name)),
        ))

        services = profile.get("services", default=[])
        mentions = [
            ServiceMention(
                service_name=json_str(service, "id"),
                user_name=json_str(service, "username"),
                profile_url=json_str(service, "profileUrl"),
            )
            for service in (services if isinstance(services, list) else [])
            if isinstance(service, dict)
        ]
        return self.add_mentions(records, mentions, fetch)
