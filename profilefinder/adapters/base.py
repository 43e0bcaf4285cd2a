"""
Adapter contract shared by every source.

A ServiceAdapter turns one email address into zero or more ProfileRecords.
Subclasses implement ``find(email, fetch)`` and are free to raise the lookup
errors from ``profilefinder.errors``; ``lookup()`` converts them into an empty
result and records why, so callers only ever see "found" or "nothing".
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..documents import DocumentError, JsonDocument, XmlDocument
from ..errors import (
    LookupCancelled,
    ProfileLookupError,
    ProfileNotFound,
    SourceUnavailable,
    UnparseableResponse,
)
from ..logger import get_logger
from ..normalize import normalize_service_name
from ..profile import EMPTY_RESULT, ProfileRecord, ResolutionResult, ServiceMention, freeze_result
from ..secondary import SecondaryServiceResolver
from ..transport import HttpResponse, redact_url

logger = get_logger()


class Fetcher:
    """Per-invocation access to the transport.

    Every step checks the invocation's cancel event first, and non-success
    responses or unparseable bodies raise, so a multi-step lookup stops at the
    first step that fails.
    """

    def __init__(self, transport, service: str, cancel_event: Optional[threading.Event] = None):
        self.transport = transport
        self.service = service
        self.cancel_event = cancel_event
        self.calls = 0

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise LookupCancelled(f"{self.service} lookup cancelled", self.service)

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> HttpResponse:
        self.check_cancelled()
        self.calls += 1
        resp = self.transport.get(url, params)
        if not resp.ok:
            raise SourceUnavailable(
                f"{self.service} request failed ({resp.error or resp.status_code}): {redact_url(url)}",
                self.service,
            )
        return resp

    def get_xml(self, url: str, params: Optional[Dict[str, Any]] = None) -> XmlDocument:
        resp = self.get(url, params)
        try:
            return XmlDocument.parse(resp.body)
        except DocumentError as e:
            raise UnparseableResponse(f"{self.service}: {e}", self.service) from e

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> JsonDocument:
        resp = self.get(url, params)
        try:
            return JsonDocument.parse(resp.body)
        except DocumentError as e:
            raise UnparseableResponse(f"{self.service}: {e}", self.service) from e

    def exists(self, url: str) -> bool:
        self.check_cancelled()
        self.calls += 1
        return self.transport.exists(url)

    def run(self, *args: str) -> HttpResponse:
        """Run a local-process transport; same failure rules as get()."""
        self.check_cancelled()
        self.calls += 1
        resp = self.transport.run(*args)
        if not resp.ok:
            raise SourceUnavailable(f"{self.service} local lookup failed ({resp.error})", self.service)
        return resp


class ServiceAdapter(ABC):
    """One external identity source.

    Class attributes:
        service_name: key of the adapter's own record in the result
        credential_name: provider name in Settings.credentials, or None
        required_credentials: credential fields that must be present
        conglomerator: True when the source also reports other services
    """

    service_name: str = ""
    credential_name: Optional[str] = None
    required_credentials: Tuple[str, ...] = ()
    conglomerator: bool = False

    def __init__(
        self,
        transport,
        credentials: Optional[Mapping[str, str]] = None,
        resolver: Optional[SecondaryServiceResolver] = None,
    ):
        self.transport = transport
        self.credentials: Mapping[str, str] = dict(credentials or {})
        self.resolver = resolver
        self.disabled_reason: Optional[str] = None

        missing = [name for name in self.required_credentials if not self.credentials.get(name)]
        if missing:
            self.disabled_reason = f"missing credentials: {', '.join(missing)}"
        elif self.conglomerator and self.resolver is None:
            self.disabled_reason = "no secondary service resolver"
        if self.disabled_reason:
            logger.info(f"{self.service_name} adapter disabled", reason=self.disabled_reason)

    @property
    def enabled(self) -> bool:
        return self.disabled_reason is None

    def credential(self, name: str = "key") -> str:
        return self.credentials.get(name, "")

    def lookup(self, email: str, cancel_event: Optional[threading.Event] = None) -> ResolutionResult:
        """Resolve ``email`` against this source.

        Returns an empty mapping when the source is unreachable, the response
        is unparseable, or the user is not found. Never raises for those.
        """
        if not self.enabled:
            return EMPTY_RESULT

        logger.record_lookup_attempt(self.service_name)
        fetch = Fetcher(self.transport, self.service_name, cancel_event)
        started = time.monotonic()
        try:
            records = self.find(email, fetch)
        except (SourceUnavailable, UnparseableResponse, ProfileNotFound, LookupCancelled) as e:
            logger.record_lookup_failure(self.service_name, e.cause)
            logger.info(
                f"{self.service_name} lookup empty",
                cause=e.cause,
                detail=str(e),
                calls=fetch.calls,
            )
            return EMPTY_RESULT
        except ProfileLookupError as e:
            logger.record_lookup_failure(self.service_name, "lookup_error")
            logger.warning(f"{self.service_name} lookup failed", error=str(e))
            return EMPTY_RESULT

        if not records:
            logger.record_lookup_failure(self.service_name, "not_found")
            return EMPTY_RESULT

        logger.record_lookup_found(self.service_name)
        logger.debug(
            f"{self.service_name} lookup found",
            services=list(records),
            calls=fetch.calls,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return freeze_result(records)

    @abstractmethod
    def find(self, email: str, fetch: Fetcher) -> Dict[str, ProfileRecord]:
        """Fetch and normalize; raise a ProfileLookupError subclass on failure."""

    def own(self, record: ProfileRecord) -> Dict[str, ProfileRecord]:
        return {self.service_name: record}

    def add_mentions(
        self,
        records: Dict[str, ProfileRecord],
        mentions: Iterable[ServiceMention],
        fetch: Fetcher,
    ) -> Dict[str, ProfileRecord]:
        """Add the recognized secondary mentions; the adapter's own record is never replaced.

        Resolving a mention may probe an avatar URL, so the cancel event is
        checked before each one. A later mention of a service replaces an
        earlier one.
        """
        for mention in mentions:
            fetch.check_cancelled()
            service = normalize_service_name(mention.service_name)
            if service == self.service_name:
                continue
            record = self.resolver.resolve(mention)
            if record is not None:
                records[service] = record
        return records

    def require(self, value: Optional[str], field: str) -> str:
        """Return the defining field, or raise ProfileNotFound when it is missing."""
        if value is None or not str(value).strip():
            raise ProfileNotFound(f"{self.service_name} response has no {field}", self.service_name)
        return str(value).strip()

    def __repr__(self) -> str:
        state = "enabled" if self.enabled else f"disabled ({self.disabled_reason})"
        return f"<{type(self).__name__} {self.service_name} {state}>"
