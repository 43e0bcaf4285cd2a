"""
Transport collaborators used by adapters.

HttpTransport wraps a requests session and never raises for network problems:
timeouts, refused connections and non-2xx statuses all come back as an
HttpResponse whose ``ok`` is False. ProcessTransport gives the legacy local
lookup the same shape.
"""

import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from urllib.parse import urlparse

import requests

from .config import DEFAULT_USER_AGENT
from .logger import get_logger
from .retry import RetryableStatus, RetryError, exponential_backoff, should_retry_http_status

logger = get_logger()


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status_code < 300


def redact_url(url: str) -> str:
    """Drop the query string, which carries API keys and the email address."""
    p = urlparse(url)
    if p.scheme and p.netloc:
        return f"{p.scheme}://{p.netloc}{p.path}"
    return p.path


class HttpTransport:
    """HTTP GET/HEAD against external sources.

    Retries happen only when ``max_retries`` > 0, and only for connection
    errors, timeouts and retryable statuses (408, 429, 5xx).
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_retries: int = 0,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        retry_delay: float = 0.5,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)

    @classmethod
    def from_settings(cls, settings) -> "HttpTransport":
        return cls(
            timeout=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            user_agent=settings.user_agent,
        )

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> HttpResponse:
        return self._request("GET", url, params)

    def head(self, url: str) -> HttpResponse:
        return self._request("HEAD", url, None)

    def exists(self, url: str) -> bool:
        """True when the URL answers a HEAD request with 200."""
        return self.head(url).status_code == 200

    def _send(self, method: str, url: str, params):
        resp = self.session.request(
            method, url, params=params, timeout=self.timeout, allow_redirects=True
        )
        if self.max_retries > 0 and should_retry_http_status(resp.status_code):
            raise RetryableStatus(resp.status_code, resp)
        return resp

    def _on_retry(self, attempt: int, exc: Exception, delay: float):
        logger.debug("Retrying request", attempt=attempt, error=str(exc), delay=delay)

    def _request(self, method: str, url: str, params) -> HttpResponse:
        logger.record_api_call()
        target = redact_url(url)
        send = self._send
        if self.max_retries > 0:
            send = exponential_backoff(
                max_retries=self.max_retries,
                base_delay=self.retry_delay,
                exceptions=(
                    requests.exceptions.Timeout,
                    requests.exceptions.ConnectionError,
                    RetryableStatus,
                ),
                on_retry=self._on_retry,
            )(self._send)

        try:
            resp = send(method, url, params)
        except RetryError as e:
            cause = e.__cause__
            if isinstance(cause, RetryableStatus) and cause.response is not None:
                resp = cause.response
            else:
                logger.warning("Request failed after retries", url=target, error=str(cause or e))
                return HttpResponse(0, "", str(cause or e))
        except requests.exceptions.Timeout:
            logger.warning("Request timed out", url=target)
            return HttpResponse(0, "", "timeout")
        except requests.exceptions.RequestException as e:
            logger.warning("Request error", url=target, error=str(e))
            return HttpResponse(0, "", str(e))

        status = resp.status_code
        body = resp.text if method != "HEAD" else ""
        if 200 <= status < 300:
            return HttpResponse(status, body)
        if status == 404:
            logger.debug("Source returned 404", url=target)
        else:
            logger.warning("Source returned error status", url=target, status=status)
        return HttpResponse(status, body, f"HTTP {status}")


class ProcessTransport:
    """Runs a local command with the lookup argument appended.

    Exit code 0 maps to status 200 with stdout as the body; anything else is
    an error response.
    """

    def __init__(self, command: Sequence[str], timeout: float = 20.0):
        self.command = tuple(command)
        self.timeout = timeout

    def run(self, *args: str) -> HttpResponse:
        if not self.command:
            return HttpResponse(0, "", "no command configured")
        logger.record_api_call()
        try:
            proc = subprocess.run(
                [*self.command, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Local lookup timed out", command=self.command[0])
            return HttpResponse(0, "", "timeout")
        except OSError as e:
            logger.warning("Local lookup could not start", command=self.command[0], error=str(e))
            return HttpResponse(0, "", str(e))

        if proc.returncode != 0:
            logger.warning(
                "Local lookup exited with error",
                command=self.command[0],
                returncode=proc.returncode,
                stderr=(proc.stderr or "").strip()[:200],
            )
            return HttpResponse(proc.returncode, proc.stdout or "", f"exit {proc.returncode}")
        return HttpResponse(200, proc.stdout or "")
