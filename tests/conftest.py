"""
Pytest configuration and shared fixtures.
"""

from urllib.parse import urlencode

import pytest

from profilefinder.config import Settings
from profilefinder.secondary import SecondaryServiceResolver
from profilefinder.transport import HttpResponse


class FakeTransport:
    """Scripted transport: the first route whose fragment appears in the URL answers.

    Unrouted GETs answer 404. ``exists()`` is true for URLs containing any of
    the ``existing`` fragments.
    """

    def __init__(self, existing=()):
        self.routes = []
        self.existing = list(existing)
        self.requests = []

    def add(self, fragment, body="", status=200, error=None):
        if error is None and not 200 <= status < 300:
            error = f"HTTP {status}"
        self.routes.append((fragment, HttpResponse(status, body, error)))
        return self

    def fail(self, fragment, error="connection refused"):
        self.routes.append((fragment, HttpResponse(0, "", error)))
        return self

    def get(self, url, params=None):
        full = url + ("?" + urlencode(params) if params else "")
        self.requests.append(("GET", full))
        for fragment, response in self.routes:
            if fragment in full:
                return response
        return HttpResponse(404, "", "HTTP 404")

    def head(self, url):
        self.requests.append(("HEAD", url))
        status = 200 if self.exists_quietly(url) else 404
        return HttpResponse(status, "", None if status == 200 else "HTTP 404")

    def exists_quietly(self, url):
        return any(fragment in url for fragment in self.existing)

    def exists(self, url):
        self.requests.append(("HEAD", url))
        return self.exists_quietly(url)

    def urls(self, method="GET"):
        return [url for m, url in self.requests if m == method]


class FakeProcess:
    """Stands in for ProcessTransport."""

    def __init__(self, output="", status=200, command=("fetchbyemail",)):
        self.command = command
        self.response = HttpResponse(status, output, None if status == 200 else f"exit {status}")
        self.calls = []

    def run(self, *args):
        self.calls.append(args)
        return self.response


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def resolver(transport):
    return SecondaryServiceResolver(probe=transport.exists)


@pytest.fixture
def settings():
    """Settings with every credential filled in and no overall deadline."""
    return Settings(
        credentials={
            "flickr": {"key": "flickr-key"},
            "yahoo": {"key": "yahoo-app"},
            "43things": {"key": "ftt-key"},
            "vimeo": {"key": "vimeo-key"},
            "amazon": {"key": "AKIDEXAMPLE", "secret": "secret"},
            "aim": {"key": "aim-key"},
            "rapleaf": {"key": "rapleaf-key"},
            "dandyid": {"key": "dandy-key"},
        },
    )


@pytest.fixture
def flickr_find_xml() -> str:
    return """<?xml version="1.0" encoding="utf-8" ?>
<rsp stat="ok">
  <user id="12037949632@N01" nsid="12037949632@N01">
    <username>Stewart</username>
  </user>
</rsp>"""


@pytest.fixture
def flickr_info_xml() -> str:
    return """<?xml version="1.0" encoding="utf-8" ?>
<rsp stat="ok">
  <person id="12037949632@N01" nsid="12037949632@N01" isadmin="0" ispro="1" iconserver="122" iconfarm="1">
    <username>Stewart</username>
    <realname>Stewart Butterfield</realname>
    <location>Vancouver, Canada</location>
    <photosurl>http://www.flickr.com/photos/stewart/</photosurl>
  </person>
</rsp>"""


@pytest.fixture
def friendfeed_feed_json() -> str:
    return '{"entries": [{"id": "e1", "user": {"id": "ff-42", "nickname": "janedoe", "name": "Jane"}}]}'


@pytest.fixture
def friendfeed_profile_json() -> str:
    return """{
  "name": "Jane Doe",
  "services": [
    {"id": "twitter", "username": "jdoe", "profileUrl": "http://twitter.com/jdoe"},
    {"id": "linkedin", "profileUrl": "http://www.linkedin.com/in/janedoe"},
    {"id": "tumblr", "username": "janed", "profileUrl": "http://janed.tumblr.com"},
    {"id": "facebook", "profileUrl": "http://www.facebook.com/home.php"}
  ]
}"""


@pytest.fixture
def rapleaf_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<person id="8f2e7a1c" status="ok">
  <basics>
    <name>Jane Doe</name>
    <age>31</age>
    <location>Boulder, Colorado, United States</location>
  </basics>
  <memberships>
    <primary>
      <membership site="facebook.com" profile_url="http://www.facebook.com/profile.php?id=500123" image_url="http://img.rapleaf.com/fb.jpg"/>
      <membership site="linkedin.com" profile_url="http://www.linkedin.com/in/janedoe"/>
      <membership site="myspace.com" profile_url="http://www.myspace.com/index.cfm?fuseaction=user.viewprofile&amp;friendID=7788"/>
      <membership site="twitter.com"/>
      <membership site="hi5.com" profile_url="http://hi5.com/friend/123"/>
    </primary>
  </memberships>
</person>"""


@pytest.fixture
def dandyid_profile_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<dandyId>
  <userId>dd-901</userId>
  <nickName>jdoe</nickName>
  <firstName>Jane</firstName>
  <lastName>Doe</lastName>
  <street></street>
  <city>Boulder</city>
  <region>CO</region>
  <country>USA</country>
</dandyId>"""


@pytest.fixture
def dandyid_services_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<services>
  <service><svcId>facebook</svcId><usrSvcId>500123</usrSvcId><url>http://www.facebook.com/profile.php?id=500123</url></service>
  <service><svcId>delicious</svcId><usrSvcId>jdoe</usrSvcId><url>http://delicious.com/jdoe</url></service>
  <service><svcId>Digg</svcId><usrSvcId>jdoe</usrSvcId><url>http://digg.com/users/jdoe</url></service>
  <service><svcId>tumblr</svcId><usrSvcId>jdoe</usrSvcId><url>http://jdoe.tumblr.com</url></service>
</services>"""
