"""Bounded HTTP fetcher: redirect depth, body size, and time limits."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from urllib.parse import urlsplit

import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import ReadTimeoutError

from core.errors import (
    DownloadTooLarge,
    FetchConnectionError,
    FetchError,
    FetchTimeout,
    HTTPStatusError,
    TooManyRedirects,
)
from core.models import FetchLimits, FetchLog
from core.pipeline import FetchStage
from fetcher.logging import emit_event, emit_fetch_log
from quality.urlnorm import origin_of, resolve_absolute_url


REDIRECT_STATUSES = frozenset({301, 302})

EventHook = Callable[[str, dict[str, object]], None]


def _clamp_redirects(remaining_redirects: int | None, limits: FetchLimits) -> int:
    """Default to the configured depth and never exceed it."""
    if remaining_redirects is None or remaining_redirects > limits.max_redirects:
        return limits.max_redirects
    return max(remaining_redirects, 0)


def _request_headers(
    headers: Mapping[str, str] | None,
    limits: FetchLimits,
) -> CaseInsensitiveDict:
    """Copy caller headers and inject the default User-Agent if unset."""
    merged = CaseInsensitiveDict(headers or {})
    if limits.user_agent and "User-Agent" not in merged:
        merged["User-Agent"] = limits.user_agent
    return merged


def _resolve_location(location: str, origin: str | None) -> str:
    """Join a hostless (redirect) location with the previous hop's origin."""
    try:
        parts = urlsplit(location)
    except ValueError as exc:
        raise FetchConnectionError(f"malformed URL {location!r}: {exc}", location) from exc

    if parts.scheme and parts.hostname:
        return location
    if not origin:
        raise FetchConnectionError(f"no host in {location!r} and no origin to resolve it", location)
    return resolve_absolute_url(location, origin)


def _set_cookie_values(response: requests.Response) -> list[str]:
    """Return every Set-Cookie header value of a response, in order."""
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = response.headers.get("Set-Cookie")
    return [value] if value else []


def _next_hop_headers(headers: CaseInsensitiveDict, cookies: list[str]) -> CaseInsensitiveDict:
    """Carry headers to the next hop with Cookie replaced by this hop's Set-Cookie."""
    next_headers = CaseInsensitiveDict(headers)
    next_headers.pop("Cookie", None)
    if cookies:
        next_headers["Cookie"] = "; ".join(cookies)
    return next_headers


def _send(
    http_session: requests.Session,
    method: str,
    url: str,
    headers: Mapping[str, str],
    limits: FetchLimits,
    stream: bool,
) -> requests.Response:
    """
    Send one request built only from `headers`.

    The request is prepared standalone, so the session's cookie jar and
    default headers are never merged in; cookies reach a hop only through
    the Cookie header this module sets.
    """
    prepared = requests.Request(method, url, headers=dict(headers)).prepare()
    settings = http_session.merge_environment_settings(
        prepared.url, {}, stream, limits.verify_tls, None
    )
    return http_session.send(
        prepared,
        timeout=(limits.connect_timeout_seconds, limits.read_timeout_seconds),
        allow_redirects=False,
        **settings,
    )


class _Deadline:
    """Per-hop clock, optionally capped by a deadline across the whole chain."""

    def __init__(self, limits: FetchLimits, clock: Callable[[], float]) -> None:
        self._limits = limits
        self._clock = clock
        self._chain_started = clock()
        self._hop_started = self._chain_started

    def start_hop(self, url: str) -> None:
        self.check_chain(url)
        self._hop_started = self._clock()

    def check_chain(self, url: str) -> None:
        chain_limit = self._limits.chain_timeout_seconds
        if chain_limit is not None and (self._clock() - self._chain_started) > chain_limit:
            raise FetchTimeout(f"redirect chain exceeded {chain_limit}s", url)

    def check(self, url: str) -> None:
        hop_limit = self._limits.overall_timeout_seconds
        if (self._clock() - self._hop_started) > hop_limit:
            raise FetchTimeout(f"hop exceeded {hop_limit}s", url)
        self.check_chain(url)


def _read_body_with_limit(
    response: requests.Response,
    limits: FetchLimits,
    deadline: _Deadline,
    url: str,
) -> bytes:
    """Stream the body, aborting as soon as it is too large or too slow."""
    chunks: list[bytes] = []
    total = 0
    try:
        for chunk in response.iter_content(chunk_size=limits.chunk_size):
            if chunk:
                chunks.append(chunk)
                total += len(chunk)
            if total > limits.max_body_bytes:
                raise DownloadTooLarge(limits.max_body_bytes, url)
            deadline.check(url)
    except requests.ConnectionError as exc:
        # iter_content re-raises urllib3 read timeouts as ConnectionError.
        if exc.args and isinstance(exc.args[0], ReadTimeoutError):
            raise FetchTimeout(f"body read timed out: {exc.args[0]}", url) from exc
        raise
    return b"".join(chunks)


def fetch_response(
    location: str,
    limits: FetchLimits | None = None,
    remaining_redirects: int | None = None,
    origin: str | None = None,
    headers: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
    event_hook: EventHook | None = None,
    clock_fn: Callable[[], float] | None = None,
) -> bytes:
    """
    GET `location` and return the full body of the final 200 response.

    301/302 responses are followed while redirect budget remains; each hop
    forwards the previous hop's Set-Cookie values as its Cookie header and
    resolves a hostless Location against the previous hop's origin.

    Raises:
        DownloadTooLarge: body grew past limits.max_body_bytes
        FetchTimeout: a hop (or the chain, if bounded) ran out of time
        TooManyRedirects: a redirect arrived with no budget left
        HTTPStatusError: final status was not 200
        FetchConnectionError: DNS/connect/TLS failure or malformed target
    """
    limits = limits or FetchLimits.default()
    remaining = _clamp_redirects(remaining_redirects, limits)
    deadline = _Deadline(limits, clock_fn or time.monotonic)
    hop_headers = _request_headers(headers, limits)

    def _emit(event_type: str, payload: dict[str, object]) -> None:
        if event_hook:
            event_hook(event_type, payload)

    http_session = session or requests.Session()
    try:
        while True:
            url = _resolve_location(location, origin)
            deadline.start_hop(url)

            try:
                response = _send(http_session, "GET", url, hop_headers, limits, stream=True)
                try:
                    status = response.status_code
                    if status == 200:
                        return _read_body_with_limit(response, limits, deadline, url)
                    if status not in REDIRECT_STATUSES:
                        raise HTTPStatusError(status, response.reason or "", url)
                    if remaining == 0:
                        raise TooManyRedirects(limits.max_redirects, url)
                    next_location = response.headers.get("Location")
                    if not next_location:
                        raise HTTPStatusError(status, "redirect without Location header", url)
                    cookies = _set_cookie_values(response)
                finally:
                    response.close()
            except requests.Timeout as exc:
                raise FetchTimeout(str(exc) or "request timed out", url) from exc
            except requests.RequestException as exc:
                raise FetchConnectionError(str(exc) or type(exc).__name__, url) from exc

            remaining -= 1
            _emit(
                "fetch_redirect",
                {
                    "url": url,
                    "status_code": status,
                    "location": next_location,
                    "remaining_redirects": remaining,
                    "cookie_forwarded": bool(cookies),
                },
            )
            hop_headers = _next_hop_headers(hop_headers, cookies)
            origin = origin_of(url)
            location = next_location
    finally:
        if session is None:
            http_session.close()


def fetch_content_length(
    location: str,
    limits: FetchLimits | None = None,
    session: requests.Session | None = None,
) -> str | None:
    """HEAD `location` and return its Content-Length for a 200 response."""
    limits = limits or FetchLimits.default()
    http_session = session or requests.Session()
    try:
        try:
            response = _send(
                http_session, "HEAD", location, _request_headers(None, limits), limits, stream=False
            )
        except requests.Timeout as exc:
            raise FetchTimeout(str(exc) or "request timed out", location) from exc
        except requests.RequestException as exc:
            raise FetchConnectionError(str(exc) or type(exc).__name__, location) from exc

        try:
            if response.status_code != 200:
                return None
            return response.headers.get("Content-Length") or None
        finally:
            response.close()
    finally:
        if session is None:
            http_session.close()


class BoundedFetcher(FetchStage):
    """FetchStage implementation backed by fetch_response + structured logging."""

    def __init__(
        self,
        limits: FetchLimits | None = None,
        session: requests.Session | None = None,
        log_fetches: bool = True,
        event_logger: EventHook | None = None,
        clock_fn: Callable[[], float] | None = None,
    ) -> None:
        """Initialize limits, transport, and event sinks."""
        self.limits = limits or FetchLimits.default()
        self.session = session
        self.log_fetches = log_fetches
        self.event_logger = event_logger or self._default_event_logger
        self.clock_fn = clock_fn

    @staticmethod
    def _default_event_logger(event_type: str, payload: dict[str, object]) -> None:
        """Default event sink writing to structured JSON stdout."""
        emit_event(event_type, **payload)

    def fetch(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        run_id: str | None = None,
    ) -> bytes:
        """Fetch one URL, emit its fetch_log, and re-raise any FetchError."""
        start = time.monotonic()
        redirects = 0

        def _hook(event_type: str, payload: dict[str, object]) -> None:
            nonlocal redirects
            if event_type == "fetch_redirect":
                redirects += 1
            self.event_logger(event_type, {"run_id": run_id, **payload})

        try:
            body = fetch_response(
                url,
                limits=self.limits,
                headers=headers,
                session=self.session,
                event_hook=_hook,
                clock_fn=self.clock_fn,
            )
        except FetchError as exc:
            self._log(
                FetchLog(
                    url=url,
                    status_code=getattr(exc, "status_code", None),
                    latency_ms=int((time.monotonic() - start) * 1000),
                    redirects_followed=redirects,
                    error_code=exc.code,
                    error_message=str(exc),
                    run_id=run_id,
                )
            )
            raise

        self._log(
            FetchLog(
                url=url,
                status_code=200,
                latency_ms=int((time.monotonic() - start) * 1000),
                bytes_received=len(body),
                redirects_followed=redirects,
                run_id=run_id,
            )
        )
        return body

    def _log(self, fetch_log: FetchLog) -> None:
        if self.log_fetches:
            emit_fetch_log(fetch_log)
