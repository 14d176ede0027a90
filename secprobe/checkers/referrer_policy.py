"""Referrer-Policy checker."""

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

# policy -> (threat, explanation)
POLICIES = {
    "no-referrer": (ThreatLevel.INFO,
                    "excellent privacy protection. No referrer information is sent with any request"),
    "strict-origin": (ThreatLevel.INFO,
                      "strong privacy protection. Only the origin is sent, and nothing on HTTPS to HTTP downgrades"),
    "strict-origin-when-cross-origin": (ThreatLevel.INFO,
                                        "recommended balance. Full URL for same-origin requests, origin only "
                                        "for cross-origin requests, nothing on protocol downgrades"),
    "origin": (ThreatLevel.INFO,
               "basic privacy protection. Only the origin is sent as referrer for all requests"),
    "origin-when-cross-origin": (ThreatLevel.INFO,
                                 "good balance. Full URL for same-origin requests, origin only for "
                                 "cross-origin requests, but still sent on protocol downgrades"),
    "same-origin": (ThreatLevel.LOW,
                    "limited privacy protection. Full referrer URL is sent only for same-origin requests"),
    "no-referrer-when-downgrade": (ThreatLevel.MEDIUM,
                                   "weak privacy protection (browser default). Full referrer URL is sent "
                                   "except on HTTPS to HTTP downgrades"),
    "unsafe-url": (ThreatLevel.HIGH,
                   "vulnerable configuration. Full referrer URL is always sent, including to insecure "
                   "HTTP sites"),
}


class ReferrerPolicy(BaseCheck):

    id = "refererPol"
    name = "Referrer-Policy Header Analysis"
    description = ("Checks for Referrer-Policy header presence and configuration to assess referrer "
                   "information control and privacy protection")

    def run(self, response: HttpResponse) -> TestResult:
        header = response.header("Referrer-Policy")
        if not header.strip():
            return self.result(
                "Referrer-Policy missing", 100, ThreatLevel.MEDIUM,
                "Missing Referrer-Policy header - using browser default policy which may leak "
                "referrer information")

        valid, invalid = [], []
        for token in BaseCheck.split_directives(header, ","):
            if token.lower() in POLICIES:
                valid.append(token.lower())
            else:
                invalid.append(token)
        meta = {"policies": valid, "invalid_policies": invalid,
                "effective_policy": valid[-1] if valid else None}

        prefix = ""
        if invalid:
            prefix = f"Invalid Referrer-Policy values detected: {', '.join(invalid)}. "
        if not valid:
            return self.result(
                "Referrer-Policy invalid", 100, ThreatLevel.HIGH,
                prefix + "No valid Referrer-Policy found, the browser default applies", meta)

        # browsers apply the last policy they understand
        effective = valid[-1]
        threat, explanation = POLICIES[effective]
        desc = f"{prefix}Referrer-Policy configured with '{effective}'"
        if len(valid) > 1:
            desc += f" ({', '.join(valid)})"
        desc += f" - {explanation}."
        if len(valid) > 2:
            desc += " Consider simplifying to a single clear policy."

        name = "Referrer-Policy weak" if threat in (ThreatLevel.MEDIUM, ThreatLevel.HIGH) else "Referrer-Policy enabled"
        return self.result(name, 100, threat, desc, meta)
