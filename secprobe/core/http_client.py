"""Thin httpx wrapper with bot-protection classification.

Failures are raised as HttpClientError, checked in this order:

    100  transport (DNS, connect, TLS, timeout, redirect loop)   retryable
    200  body could not be read after the headers arrived        retryable
    300  bot protection detected in headers or body              not retryable
    101  status outside 2xx                                      retryable for 408/429/5xx gateways

With redirects disabled, a 3xx carrying a Location is returned instead of raising.
"""

from typing import Dict, List, Mapping, Optional

import httpx

from secprobe.core import errors
from secprobe.core.errors import HttpClientError
from secprobe.core.models import HttpResponse
from secprobe.parsers.schema import DEFAULT_USER_AGENT

BODY_SCAN_LIMIT = 65536

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

BOT_HEADERS = ("CF-RAY", "CF-CHL-BCODE")

BOT_BODY_KEYWORDS = (
    "cloudflare", "captcha", "attention required", "challenge",
    "verify you are human", "security check", "ddos protection",
    "access denied",
)


def default_headers() -> Dict[str, str]:
    return {"User-Agent": DEFAULT_USER_AGENT}


def detect_bot_protection(headers: httpx.Headers, body: bytes) -> List[str]:
    """Return every indicator that fired; empty list means no protection seen."""
    found = []
    if "cloudflare" in headers.get("server", "").lower():
        found.append(f"Server header: {headers.get('server')}")
    for name in BOT_HEADERS:
        if name in headers:
            found.append(f"{name} header present")

    sample = body[:BODY_SCAN_LIMIT].decode("utf-8", errors="ignore").lower()
    for kw in BOT_BODY_KEYWORDS:
        if kw in sample:
            found.append(f"Content contains: {kw}")
    return found


class HttpClient:

    def __init__(self, headers: Optional[Mapping[str, str]] = None,
                 timeout: float = 30.0, follow_redirects: bool = True,
                 verify_tls: bool = True,
                 transport: Optional[httpx.BaseTransport] = None,
                 logger=None):
        self.headers = httpx.Headers(default_headers())
        self.headers.update(headers or {})
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.verify_tls = verify_tls
        self.logger = logger
        self.client = httpx.Client(verify=verify_tls, timeout=timeout,
                                   follow_redirects=follow_redirects,
                                   transport=transport)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.client.close()

    def _merge_headers(self, overrides: Optional[Mapping[str, str]]) -> httpx.Headers:
        merged = httpx.Headers(self.headers)
        merged.update(overrides or {})
        return httpx.Headers([(k, v) for k, v in merged.multi_items() if v])

    def request(self, method: str, url: str,
                headers: Optional[Mapping[str, str]] = None,
                timeout: Optional[float] = None,
                follow_redirects: Optional[bool] = None) -> HttpResponse:
        merged = self._merge_headers(headers)
        follow = self.follow_redirects if follow_redirects is None else follow_redirects
        to = self.timeout if timeout is None else timeout

        try:
            req = self.client.build_request(method, url, headers=merged, timeout=to)
        except httpx.InvalidURL as exc:
            # a malformed URL fails the same way on every attempt, so 100 is not retryable here
            raise HttpClientError(url, errors.HTTP_TRANSPORT,
                                  f"Failed to create HTTP request: {exc}", exc, False)

        if self.logger:
            self.logger.debug(f"→ {method} {url} (follow_redirects={follow})")

        try:
            resp = self.client.send(req, stream=True, follow_redirects=follow)
        except httpx.RequestError as exc:
            raise HttpClientError(url, errors.HTTP_TRANSPORT,
                                  f"Network error occurred ({type(exc).__name__}: {exc}). "
                                  "This could be due to DNS lookup failures, connection "
                                  "timeouts, TLS handshake failures or an unreachable network",
                                  exc, True)

        try:
            body = resp.read()
        except (httpx.RequestError, httpx.StreamError) as exc:
            raise HttpClientError(url, errors.HTTP_BODY_READ,
                                  f"Error reading response body: {exc}", exc, True)
        finally:
            resp.close()

        protections = detect_bot_protection(resp.headers, body)
        if protections:
            lines = "\n".join(f"  {i}. {p}" for i, p in enumerate(protections, 1))
            raise HttpClientError(url, errors.HTTP_BOT_PROTECTION,
                                  f"Bot protection detected:\n{lines}", resp, False)

        # with redirects off, a 3xx is handed to the checks so its Location can be inspected
        unfollowed_redirect = not follow and resp.is_redirect
        if not 200 <= resp.status_code < 300 and not unfollowed_redirect:
            raise HttpClientError(url, errors.HTTP_STATUS,
                                  f"HTTP status code not 2xx: {resp.status_code}",
                                  resp, resp.status_code in RETRYABLE_STATUSES)

        return HttpResponse(
            method=method,
            request_url=url,
            url=str(resp.url),
            status_code=resp.status_code,
            status_line=f"{resp.http_version} {resp.status_code} {resp.reason_phrase}".strip(),
            headers=resp.headers,
            body=body,
            redirects=[(h.status_code, h.headers.get("location", "")) for h in resp.history],
        )
