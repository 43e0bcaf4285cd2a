from ..errors import ProfileNotFound
from ..profile import ProfileRecord
from .base import ServiceAdapter

NOT_FOUND_OUTPUT = "None found"


class SkypeAdapter(ServiceAdapter):
    """Legacy lookup through a local Skype client script.

    The transport is a ProcessTransport running the configured command with
    the email appended. The script prints ``None found`` or a comma-separated
    line whose first field is the Skype name. Disabled unless a command is
    configured, since it depends on a desktop client on the host.
    """

    service_name = "skype"

    def __init__(self, transport, credentials=None, resolver=None):
        super().__init__(transport, credentials, resolver)
        if self.enabled and not getattr(transport, "command", None):
            self.disabled_reason = "no local command configured"

    def find(self, email, fetch):
        output = fetch.run(email).body.strip()
        if output == NOT_FOUND_OUTPUT:
            raise ProfileNotFound("client found no account", self.service_name)
        user_name = output.split(",")[0]
        return self.own(ProfileRecord(user_name=self.require(user_name, "skype name")))
