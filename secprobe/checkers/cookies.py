"""Cookie flag checkers: Secure/SameSite (fCookies) and HttpOnly (fHttpOnly)."""

from dataclasses import dataclass
from typing import List

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

SENSITIVE_NAMES = ("session", "sessid", "auth", "token", "jwt", "access")


@dataclass
class CookieAttributes:
    name: str
    secure: bool = False
    http_only: bool = False
    same_site: str = ""

    @property
    def sensitive(self) -> bool:
        lower = self.name.lower()
        return any(s in lower for s in SENSITIVE_NAMES)


def parse_set_cookie(header: str) -> CookieAttributes:
    """Attributes of one ``Set-Cookie`` value; the value itself is ignored."""
    parts = [p.strip() for p in header.split(";")]
    name = parts[0].partition("=")[0].strip()
    cookie = CookieAttributes(name=name)
    for attr in parts[1:]:
        key, _, value = attr.partition("=")
        key = key.strip().lower()
        if key == "secure":
            cookie.secure = True
        elif key == "httponly":
            cookie.http_only = True
        elif key == "samesite":
            cookie.same_site = value.strip().capitalize()
    return cookie


def collect_cookies(response: HttpResponse) -> List[CookieAttributes]:
    return [parse_set_cookie(v) for v in response.header_values("set-cookie") if v.strip()]


class CookieFlags(BaseCheck):

    id = "fCookies"
    name = "Cookie Secure/SameSite Flags"
    description = "Checks that every Set-Cookie carries the Secure flag and a Lax or Strict SameSite"

    def run(self, response: HttpResponse) -> TestResult:
        cookies = collect_cookies(response)
        if not cookies:
            return self.result("No cookies set", 100, ThreatLevel.INFO,
                               "No cookies set by the server - nothing to check")

        no_secure = [c.name for c in cookies if not c.secure]
        weak_same_site = [c.name for c in cookies if c.same_site not in ("Lax", "Strict")]
        meta = {"cookies": [c.name for c in cookies], "missing_secure": no_secure,
                "missing_same_site": weak_same_site}

        if not no_secure and not weak_same_site:
            return self.result("Cookie flags set", 100, ThreatLevel.INFO,
                               f"All {len(cookies)} cookie(s) set Secure and SameSite", meta)

        issues = []
        if no_secure:
            issues.append(f"missing Secure flag: {', '.join(no_secure)}")
        if weak_same_site:
            issues.append(f"missing or inadequate SameSite: {', '.join(weak_same_site)}")
        sensitive_insecure = any(c.sensitive and not c.secure for c in cookies)
        threat = ThreatLevel.HIGH if sensitive_insecure else ThreatLevel.MEDIUM
        return self.result("Cookie flags missing", 100, threat,
                           "Cookies " + "; ".join(issues), meta)


class HttpOnlyCookies(BaseCheck):

    id = "fHttpOnly"
    name = "Cookie HttpOnly Flag"
    description = "Checks that every Set-Cookie carries the HttpOnly flag"

    def run(self, response: HttpResponse) -> TestResult:
        cookies = collect_cookies(response)
        if not cookies:
            return self.result("No cookies set", 100, ThreatLevel.INFO,
                               "No cookies set by the server - nothing to check")

        missing = [c for c in cookies if not c.http_only]
        meta = {"cookies": [c.name for c in cookies],
                "missing_http_only": [c.name for c in missing]}
        if not missing:
            return self.result("HttpOnly set", 100, ThreatLevel.INFO,
                               f"All {len(cookies)} cookie(s) set HttpOnly", meta)

        threat = ThreatLevel.HIGH if any(c.sensitive for c in missing) else ThreatLevel.MEDIUM
        return self.result(
            "HttpOnly missing", 100, threat,
            "Missing HttpOnly flag - JavaScript can read these cookies (XSS risk): "
            + ", ".join(c.name for c in missing), meta)
