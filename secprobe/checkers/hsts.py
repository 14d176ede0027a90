"""HSTS checker: Strict-Transport-Security presence and strength."""

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

ONE_HOUR = 60 * 60
ONE_DAY = 24 * ONE_HOUR
ONE_MONTH = 30 * ONE_DAY
SIX_MONTHS = 6 * ONE_MONTH
ONE_YEAR = 365 * ONE_DAY


def parse_hsts(value: str) -> dict:
    info = {"max_age": 0, "include_subdomains": False, "preload": False, "directives": []}
    for part in BaseCheck.split_directives(value):
        lower = part.lower()
        if lower.startswith("max-age="):
            raw = lower[len("max-age="):].strip().strip('"')
            if raw.isdigit():
                info["max_age"] = int(raw)
        elif lower == "includesubdomains":
            info["include_subdomains"] = True
            info["directives"].append("includeSubDomains")
        elif lower == "preload":
            info["preload"] = True
            info["directives"].append("preload")
    return info


def format_max_age(seconds: int) -> str:
    for size, unit in ((ONE_YEAR, "year"), (ONE_MONTH, "month"),
                       (ONE_DAY, "day"), (ONE_HOUR, "hour")):
        if seconds >= size:
            n = seconds // size
            return f"{n} {unit}{'' if n == 1 else 's'} max-age"
    return f"{seconds} seconds max-age"


class HSTS(BaseCheck):

    id = "hsts"
    name = "HSTS Header Analysis"
    description = "Checks for HTTP Strict Transport Security header presence and configuration"

    def run(self, response: HttpResponse) -> TestResult:
        header = response.header("Strict-Transport-Security")
        if not header:
            return self.result(
                "HSTS missing", 100, ThreatLevel.MEDIUM,
                "Missing HSTS header - site vulnerable to protocol downgrade attacks "
                "and man-in-the-middle attacks")

        info = parse_hsts(header)
        max_age = info["max_age"]
        if max_age == 0:
            return self.result(
                "HSTS misconfigured", 95, ThreatLevel.HIGH,
                "HSTS header present but missing or invalid max-age directive", info)

        desc = f"HSTS header configured with {format_max_age(max_age)}"
        if info["directives"]:
            desc += " and includes: " + ", ".join(info["directives"])

        if max_age >= ONE_YEAR and info["include_subdomains"]:
            threat = ThreatLevel.INFO
            desc += (" - Excellent security configuration" if info["preload"]
                     else " - Good security configuration")
        elif max_age >= SIX_MONTHS:
            threat = ThreatLevel.LOW
            desc += " - Acceptable security configuration"
        else:
            threat = ThreatLevel.MEDIUM
            desc += " - Weak security configuration, consider increasing max-age"

        return self.result("HSTS enabled", 95, threat, desc, info)
