"""
Built-in adapters and their confidence order.

PRIORITY lists services from highest to lowest confidence: sources tied
directly to one identity first, conglomerators last. When two adapters report
the same service, the earlier one in this order wins.
"""

from typing import Dict, List, Optional, Type

from ..secondary import SecondaryServiceResolver
from ..transport import HttpTransport, ProcessTransport
from .aim import AimAdapter
from .amazon import AmazonAdapter
from .base import Fetcher, ServiceAdapter
from .brightkite import BrightkiteAdapter
from .dandyid import DandyIdAdapter
from .flickr import FlickrAdapter
from .fortythreethings import FortyThreeThingsAdapter
from .friendfeed import FriendFeedAdapter
from .google import GoogleAdapter
from .gravatar import GravatarAdapter
from .rapleaf import RapleafAdapter
from .skype import SkypeAdapter
from .vimeo import VimeoAdapter
from .yahoo import YahooAdapter

PRIORITY = (
    "gravatar",
    "flickr",
    "yahoo",
    "43things",
    "vimeo",
    "amazon",
    "brightkite",
    "aim",
    "skype",
    "friendfeed",
    "google",
    "rapleaf",
    "dandyid",
)

ADAPTER_CLASSES: Dict[str, Type[ServiceAdapter]] = {
    cls.service_name: cls
    for cls in (
        GravatarAdapter,
        FlickrAdapter,
        YahooAdapter,
        FortyThreeThingsAdapter,
        VimeoAdapter,
        AmazonAdapter,
        BrightkiteAdapter,
        AimAdapter,
        SkypeAdapter,
        FriendFeedAdapter,
        GoogleAdapter,
        RapleafAdapter,
        DandyIdAdapter,
    )
}


def build_adapters(
    settings,
    transport: Optional[HttpTransport] = None,
    resolver: Optional[SecondaryServiceResolver] = None,
    process_transport: Optional[ProcessTransport] = None,
) -> List[ServiceAdapter]:
    """Construct every built-in adapter from Settings, in PRIORITY order."""
    transport = transport or HttpTransport.from_settings(settings)
    if resolver is None:
        resolver = SecondaryServiceResolver(
            probe=transport.exists,
            avatar_proxy_url=settings.avatar_proxy_url,
        )
    if process_transport is None:
        process_transport = ProcessTransport(settings.skype_command, timeout=settings.adapter_timeout_seconds)

    adapters = []
    for name in PRIORITY:
        cls = ADAPTER_CLASSES[name]
        adapter_transport = process_transport if cls is SkypeAdapter else transport
        adapters.append(cls(
            adapter_transport,
            credentials=settings.credentials_for(cls.credential_name),
            resolver=resolver if cls.conglomerator else None,
        ))
    return adapters


__all__ = [
    "ADAPTER_CLASSES",
    "PRIORITY",
    "Fetcher",
    "ServiceAdapter",
    "build_adapters",
]
