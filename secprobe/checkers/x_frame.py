"""Clickjacking checker: X-Frame-Options and CSP frame-ancestors."""

from typing import Optional

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

_LEVEL_THREAT = {
    "excellent": ThreatLevel.INFO,
    "good": ThreatLevel.INFO,
    "limited": ThreatLevel.LOW,
    "weak": ThreatLevel.MEDIUM,
    "vulnerable": ThreatLevel.HIGH,
}

_LEVEL_TEXT = {
    "excellent": "Excellent clickjacking protection - page cannot be embedded in iframes",
    "good": "Good clickjacking protection - page can only be embedded by same origin",
    "limited": "Limited clickjacking protection - page can be embedded by specific domains",
    "weak": "Weak clickjacking protection - partial protection may not cover all scenarios",
    "vulnerable": "No clickjacking protection - page can be embedded in any iframe",
}


def frame_ancestors(csp: str) -> Optional[str]:
    """Value of the frame-ancestors directive, None when absent."""
    for directive in BaseCheck.split_directives(csp):
        head, _, rest = directive.partition(" ")
        if head.lower() == "frame-ancestors":
            return rest.strip()
    return None


def _xfo_level(xfo: str) -> Optional[str]:
    if xfo == "DENY":
        return "excellent"
    if xfo == "SAMEORIGIN":
        return "good"
    if xfo.startswith("ALLOW-FROM "):
        return "limited"
    return None


def _csp_level(value: str) -> str:
    lower = value.lower()
    if lower == "'none'":
        return "excellent"
    if lower == "'self'":
        return "good"
    if lower == "*" or not lower:
        return "weak"
    if "'self'" in lower or "https:" in lower or "http:" in lower or "." in lower:
        return "limited"
    return "weak"


class XFrameOptions(BaseCheck):

    id = "xFrame"
    name = "X-Frame-Options & CSP Frame Protection Analysis"
    description = ("Analyzes X-Frame-Options header and CSP frame-ancestors directive to assess "
                   "clickjacking protection and iframe embedding policies")

    def run(self, response: HttpResponse) -> TestResult:
        xfo = response.header("X-Frame-Options").strip().upper()
        ancestors = frame_ancestors(response.header("Content-Security-Policy"))

        # frame-ancestors supersedes X-Frame-Options in every current browser
        if ancestors is not None:
            level = _csp_level(ancestors)
        else:
            level = _xfo_level(xfo) or "vulnerable"

        if xfo and ancestors is not None:
            source = "Both X-Frame-Options and CSP frame-ancestors headers are present"
        elif ancestors is not None:
            source = "Content-Security-Policy frame-ancestors directive is configured"
        elif xfo:
            source = "X-Frame-Options header is present"
            if _xfo_level(xfo) is None:
                source += f" but its value {xfo!r} is invalid"
        else:
            source = "No frame protection headers detected"

        threat = _LEVEL_THREAT[level]
        name = "Clickjacking protection missing" if level == "vulnerable" else "Clickjacking protection enabled"
        return self.result(name, 100, threat, f"{_LEVEL_TEXT[level]}. {source}",
                           {"x_frame_options": xfo or None, "frame_ancestors": ancestors,
                            "protection_level": level})
