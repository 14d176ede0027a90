"""Directory listing checker: auto-generated index pages in the body."""

import re

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

# Apache, nginx, lighttpd, IIS and python -m http.server index pages
_SIGNATURES = [
    re.compile(r"<title>\s*Index of\s*/", re.I),
    re.compile(r"<h1>\s*Index of\s*/", re.I),
    re.compile(r"Directory listing for\s*/", re.I),
    re.compile(r">\s*Parent Directory\s*<", re.I),
    re.compile(r"\[To Parent Directory\]", re.I),
]


class DirectoryListing(BaseCheck):

    id = "listing"
    name = "Directory Listing Detection"
    description = "Detects auto-generated directory index pages exposing the server file tree"

    def run(self, response: HttpResponse) -> TestResult:
        body = response.text
        hits = [rx.pattern for rx in _SIGNATURES if rx.search(body)]
        if hits:
            certainty = 100 if len(hits) > 1 else 80
            return self.result(
                "Directory listing enabled", certainty, ThreatLevel.HIGH,
                f"Directory listing appears enabled at {response.url} - file tree exposed",
                {"signatures": hits})
        return self.result(
            "Directory listing not detected", 90, ThreatLevel.INFO,
            "Response body does not look like an auto-generated directory index")
