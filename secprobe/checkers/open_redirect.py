"""Open Redirect checker: inspects the redirect chain of the captured response."""

from typing import Optional
from urllib.parse import urljoin, urlsplit

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

_DANGEROUS_SCHEMES = ("javascript:", "data:", "vbscript:")


def _same_site(host: str, origin: str) -> bool:
    return host == origin or host.endswith("." + origin) or origin.endswith("." + host)


class OpenRedirect(BaseCheck):

    id = "openRedirect"
    name = "Open Redirect Detection"
    description = ("Follows the redirect chain of the response and flags hops that leave the "
                   "target host or use script-capable URL schemes")

    def run(self, response: HttpResponse) -> TestResult:
        origin = (urlsplit(response.request_url).hostname or "").lower()

        hops = list(response.redirects)
        # an unfollowed 3xx still carries its Location
        if 300 <= response.status_code < 400 and response.header("location"):
            hops.append((response.status_code, response.header("location")))

        base = response.request_url
        for status, location in hops:
            reason = self._external_reason(location, base, origin)
            if reason:
                return self.result(
                    "Open redirect detected", 90, ThreatLevel.HIGH,
                    f"HTTP {status} redirect to {location[:80]!r}: {reason}",
                    {"chain": [list(h) for h in hops], "origin": origin})
            base = urljoin(base, location)

        if hops:
            return self.result(
                "No open redirect", 80, ThreatLevel.INFO,
                f"Followed {len(hops)} redirect(s), all stayed on {origin}",
                {"chain": [list(h) for h in hops], "origin": origin})
        return self.result(
            "No open redirect", 70, ThreatLevel.INFO,
            "The response was not redirected")

    @staticmethod
    def _external_reason(location: str, base: str, origin: str) -> Optional[str]:
        """Why the Location header leaves the target, or None if it does not."""
        if not location:
            return None

        lower = location.lower().strip()
        if lower.startswith(_DANGEROUS_SCHEMES):
            return "script-capable URL scheme"

        # protocol-relative and backslash tricks resolve off-site in browsers
        if lower.startswith(("//", "/\\", "\\/")):
            location = "https://" + location.lstrip("/\\")

        target = urlsplit(urljoin(base, location))
        host = (target.hostname or "").lower()
        if host and origin and not _same_site(host, origin):
            return f"redirect leaves {origin} for {host}"
        return None
