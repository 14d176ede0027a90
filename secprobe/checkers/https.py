"""HTTPS checker: was the final response served over TLS."""

from urllib.parse import urlsplit

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel


class HTTPS(BaseCheck):

    id = "https"
    name = "HTTPS Protocol Verification"
    description = "Verifies if the website communication is secured with HTTPS protocol"

    def run(self, response: HttpResponse) -> TestResult:
        scheme = urlsplit(response.url).scheme.lower()
        if scheme == "https":
            return self.result(
                "HTTPS in use", 100, ThreatLevel.INFO,
                "Connection is secured with HTTPS protocol - data transmission is encrypted")

        downgraded = urlsplit(response.request_url).scheme.lower() == "https"
        desc = ("Connection uses insecure HTTP protocol - data is transmitted in "
                "plaintext and vulnerable to interception")
        if downgraded:
            desc += ". The HTTPS request was redirected to a plain HTTP URL"
        return self.result("HTTPS not in use", 100, ThreatLevel.HIGH, desc,
                           {"final_url": response.url, "downgraded": downgraded})
