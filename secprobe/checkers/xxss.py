"""X-XSS-Protection checker."""

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel


class XXSSProtection(BaseCheck):

    id = "xxss"
    name = "X-XSS-Protection Header Analysis"
    description = "Checks the legacy X-XSS-Protection header used by older browsers' XSS auditors"

    def run(self, response: HttpResponse) -> TestResult:
        header = response.header("X-XSS-Protection").strip()
        has_csp = bool(response.header("Content-Security-Policy").strip())
        meta = {"value": header or None, "csp_present": has_csp}

        if not header:
            return self.result(
                "X-XSS-Protection missing", 100, ThreatLevel.LOW,
                "Missing X-XSS-Protection header - legacy browsers will not block reflected XSS",
                meta)

        parts = [p.lower().replace(" ", "") for p in self.split_directives(header)]
        mode = parts[0] if parts else ""
        options = parts[1:]

        if mode == "0":
            if has_csp:
                return self.result(
                    "X-XSS-Protection disabled", 100, ThreatLevel.INFO,
                    "XSS auditor explicitly disabled while a Content-Security-Policy is present - "
                    "this is the current recommendation", meta)
            return self.result(
                "X-XSS-Protection disabled", 100, ThreatLevel.LOW,
                "XSS auditor explicitly disabled and no Content-Security-Policy compensates", meta)

        if mode == "1":
            if "mode=block" in options:
                return self.result(
                    "X-XSS-Protection enabled", 100, ThreatLevel.INFO,
                    "XSS filter enabled in block mode", meta)
            if any(o.startswith("report=") for o in options):
                return self.result(
                    "X-XSS-Protection enabled", 100, ThreatLevel.INFO,
                    "XSS filter enabled with violation reporting", meta)
            return self.result(
                "X-XSS-Protection enabled", 90, ThreatLevel.LOW,
                "XSS filter enabled without mode=block - the browser sanitises instead of blocking, "
                "which has been abused for side-channel attacks", meta)

        return self.result(
            "X-XSS-Protection invalid", 100, ThreatLevel.MEDIUM,
            f"Unrecognised X-XSS-Protection value {header!r}", meta)
