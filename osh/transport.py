from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx

from .clouds import CloudProfile
from .errors import TransportError

HTTP_LOG = logging.getLogger("osh.http")

USER_AGENT = "sensu-go-openstack-service-handler"
SECRET_HEADERS = {"x-auth-token", "x-subject-token"}
FRAMING_HEADERS = {"content-encoding", "content-length", "transfer-encoding"}


class Deadline:
    """Absolute expiry shared by every remote call of one invocation."""

    def __init__(self, timeout_s: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.timeout_s = float(timeout_s)
        self.expires_at = clock() + self.timeout_s

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def check(self, what: str) -> float:
        """Return the time left, or fail if nothing is left for ``what``."""
        left = self.remaining()
        if left <= 0.0:
            raise TransportError(f"{what}: deadline of {self.timeout_s:g}s exceeded")
        return left


def _redact(headers: httpx.Headers) -> dict[str, str]:
    return {k: ("***" if k.lower() in SECRET_HEADERS else v) for k, v in headers.items()}


def _log_request(request: httpx.Request) -> None:
    HTTP_LOG.debug("OpenStack Request URL: %s %s", request.method, request.url)
    HTTP_LOG.debug("OpenStack Request Headers: %s", _redact(request.headers))
    if request.content:
        # auth requests carry passwords and secrets in the body
        if request.url.path.endswith("/auth/tokens"):
            HTTP_LOG.debug("OpenStack Request Body: <redacted>")
        else:
            HTTP_LOG.debug("OpenStack Request Body: %s", request.content.decode("utf-8", "replace"))


def _log_response(response: httpx.Response) -> None:
    # the body is still streaming here; send() logs it once read
    HTTP_LOG.debug("OpenStack Response Code: %s", response.status_code)
    HTTP_LOG.debug("OpenStack Response Headers: %s", _redact(response.headers))


def build_client(
    profile: CloudProfile,
    debug: bool = False,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """HTTP client for one invocation, with TLS settings from the cloud profile."""
    hooks: dict[str, list[Any]] = {}
    if debug:
        HTTP_LOG.setLevel(logging.DEBUG)
        hooks = {"request": [_log_request], "response": [_log_response]}
    return httpx.Client(
        verify=profile.ssl_verify(),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        event_hooks=hooks,
        follow_redirects=False,
        transport=transport,
    )


def send(http: httpx.Client, method: str, url: str, deadline: Deadline, what: str, **kwargs: Any) -> httpx.Response:
    """Issue one request bounded by the deadline.

    The remaining time is the httpx timeout of every socket operation, and the
    body is streamed with the deadline checked after each chunk, so a server
    trickling bytes is cut off too. Leaving the stream early closes the
    connection.
    """
    timeout = deadline.check(what)
    try:
        with http.stream(method, url, timeout=timeout, **kwargs) as resp:
            chunks = []
            for chunk in resp.iter_bytes():
                chunks.append(chunk)
                deadline.check(what)
            # body is decoded already; framing headers no longer apply
            headers = [(k, v) for k, v in resp.headers.multi_items() if k.lower() not in FRAMING_HEADERS]
            done = httpx.Response(
                resp.status_code,
                headers=headers,
                content=b"".join(chunks),
                request=resp.request,
            )
    except httpx.TimeoutException as e:
        raise TransportError(f"{what}: timed out ({type(e).__name__})") from e
    except httpx.HTTPError as e:
        raise TransportError(f"{what}: {type(e).__name__}: {e}") from e
    if HTTP_LOG.isEnabledFor(logging.DEBUG):
        HTTP_LOG.debug("OpenStack Response Body: %s", done.text)
    return done


def json_body(resp: httpx.Response, what: str) -> dict[str, Any]:
    """Decoded JSON object of a successful reply."""
    try:
        data = resp.json()
    except ValueError as e:
        raise TransportError(f"{what}: HTTP {resp.status_code} with a non-JSON body: {resp.text.strip()[:200]!r}") from e
    if not isinstance(data, dict):
        raise TransportError(f"{what}: HTTP {resp.status_code} with an unexpected body: {data!r:.200}")
    return data


def error_detail(resp: httpx.Response) -> str:
    """Short description of an OpenStack error response."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        # nova: {"itemNotFound": {"code": 404, "message": "..."}}; keystone: {"error": {...}}
        for v in data.values():
            if isinstance(v, dict) and v.get("message"):
                return f"HTTP {resp.status_code}: {v['message']}"
    text = resp.text.strip()
    return f"HTTP {resp.status_code}: {text[:200]}" if text else f"HTTP {resp.status_code}"
