"""Permissions-Policy / Feature-Policy checker."""

from typing import List, Tuple

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

DANGEROUS = frozenset({
    "camera", "microphone", "geolocation", "payment", "usb", "bluetooth",
    "serial", "hid", "midi", "notifications", "persistent-storage", "clipboard-read",
})
SUSPICIOUS = frozenset({"fullscreen", "autoplay", "screen-wake-lock", "picture-in-picture"})


def parse_permissions(header: str) -> List[Tuple[str, str]]:
    """``camera=(), geolocation=(self)`` -> [(feature, allowlist), ...]"""
    out = []
    for directive in BaseCheck.split_directives(header, ","):
        feature, sep, allowlist = directive.partition("=")
        if sep:
            out.append((feature.strip().lower(), allowlist.strip()))
    return out


def parse_feature_policy(header: str) -> List[Tuple[str, str]]:
    """Legacy syntax: ``camera 'none'; geolocation 'self'``"""
    out = []
    for directive in BaseCheck.split_directives(header):
        feature, _, allowlist = directive.partition(" ")
        allowlist = allowlist.strip()
        out.append((feature.lower(), "()" if allowlist.lower() == "'none'" else allowlist))
    return out


class FeaturePolicy(BaseCheck):

    id = "featurePol"
    name = "Permissions-Policy Header Analysis"
    description = ("Checks for Permissions-Policy (or legacy Feature-Policy) header presence and "
                   "configuration to assess browser feature access control")

    def run(self, response: HttpResponse) -> TestResult:
        header = response.header("Permissions-Policy")
        legacy = False
        if header.strip():
            directives = parse_permissions(header)
        else:
            header = response.header("Feature-Policy")
            if not header.strip():
                return self.result(
                    "Permissions-Policy missing", 100, ThreatLevel.MEDIUM,
                    "Missing Permissions-Policy header - all browser features are available to the "
                    "page and embedded content without restrictions")
            directives = parse_feature_policy(header)
            legacy = True

        restricted, dangerous, suspicious, wildcard = [], [], [], []
        for feature, allowlist in directives:
            if "*" in allowlist:
                wildcard.append(feature)
            denied = allowlist in ("()", "")
            if feature in DANGEROUS:
                (restricted if denied else dangerous).append(feature)
            elif feature in SUSPICIOUS:
                (restricted if denied else suspicious).append(feature)

        total = len(directives)
        if len(dangerous) >= 3:
            threat = ThreatLevel.HIGH
        elif dangerous or wildcard:
            threat = ThreatLevel.MEDIUM
        elif len(suspicious) >= 2 or total < 3:
            threat = ThreatLevel.LOW
        else:
            threat = ThreatLevel.INFO

        header_name = "Feature-Policy" if legacy else "Permissions-Policy"
        desc = f"{header_name} header configured with {total} directives"
        if restricted:
            desc += ". Properly restricts features: " + ", ".join(restricted)
        if dangerous:
            desc += ". WARNING: Allows dangerous features: " + ", ".join(dangerous)
        if suspicious:
            desc += ". Allows suspicious features: " + ", ".join(suspicious)
        if wildcard:
            desc += ". WARNING: Uses wildcards for features: " + ", ".join(wildcard)
        if legacy:
            desc += ". Feature-Policy is deprecated, migrate to Permissions-Policy"

        meta = {"legacy": legacy, "total_directives": total, "restricted": restricted,
                "dangerous_allowed": dangerous, "suspicious_allowed": suspicious,
                "wildcard_features": wildcard}
        name = "Permissions-Policy weak" if threat in (ThreatLevel.MEDIUM, ThreatLevel.HIGH) else "Permissions-Policy enabled"
        return self.result(name, 90, threat, desc, meta)
