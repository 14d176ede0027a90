"""Job runner: turns a parsed invocation into probes and verdicts.

One request per HTTP method against the target; every selected check runs on
each captured response, in the order given on ``--tests``.
"""

from typing import List, Optional
from urllib.parse import urlsplit

import httpx

from secprobe.checkers.base import BaseCheck
from secprobe.core import errors
from secprobe.core.config import Settings
from secprobe.core.errors import ScanError
from secprobe.core.http_client import HttpClient
from secprobe.core.models import ParsedInvocation, ProbeResult, TestResult, ThreatLevel
from secprobe.core.registry import TestRegistry
from secprobe.parsers.schema import DEFAULT_USER_AGENT

SOURCE = "Runner"
DEFAULT_METHOD = "GET"


def _fail(code: int, reason: str) -> ScanError:
    return ScanError(code, f"Runner error occurred. This could be due to:\n  - {reason}",
                     SOURCE, False)


def normalize_target(raw: str) -> str:
    target = raw.strip()
    if "://" not in target:
        target = "https://" + target.lstrip("/")
    parts = urlsplit(target)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise _fail(errors.RUNNER_INVALID_TARGET, f"invalid target {raw!r}, expected an http(s) URL")
    return target


class JobRunner:

    def __init__(self, registry: TestRegistry, reporter, settings: Optional[Settings] = None,
                 transport: Optional[httpx.BaseTransport] = None, logger=None):
        self.registry = registry
        self.reporter = reporter
        self.settings = settings or Settings()
        self.transport = transport
        self.logger = logger

    def _build_client(self, user_agent: str, referer: str) -> HttpClient:
        headers = {"User-Agent": user_agent}
        if referer:
            headers["Referer"] = referer
        if self.logger:
            self.logger.debug(f"Client headers: {headers}")
        return HttpClient(headers=headers, timeout=self.settings.timeout,
                          follow_redirects=self.settings.follow_redirects,
                          verify_tls=self.settings.verify_tls,
                          transport=self.transport, logger=self.logger)

    def _lookup(self, test_id: str) -> BaseCheck:
        check = self.registry.get(test_id)
        if check is None:
            raise _fail(errors.RUNNER_UNKNOWN_TEST, f"test {test_id!r} is not registered")
        return check

    @staticmethod
    def _validate(check: BaseCheck, result) -> TestResult:
        valid = (
            isinstance(result, TestResult)
            and isinstance(result.name, str) and result.name.strip()
            and isinstance(result.certainty, int) and not isinstance(result.certainty, bool)
            and 0 <= result.certainty <= 100
            and isinstance(result.threat_level, ThreatLevel)
        )
        if not valid:
            raise ScanError(errors.RUNTIME_FAULT,
                            f"Test {check.id!r} returned a malformed result: {result!r}",
                            errors.RUNTIME_SOURCE, False)
        return result

    def orchestrate(self, invocation: ParsedInvocation) -> List[TestResult]:
        raw_target = invocation.values("--target")
        if not raw_target or not raw_target[0].strip():
            raise _fail(errors.RUNNER_MISSING_TARGET, "--target parameter is missing")
        target = normalize_target(raw_target[0])

        if self.settings.machine_mode and not self.settings.task_id.strip():
            raise _fail(errors.RUNNER_MISSING_TASK_ID,
                        "misconfiguration of the task id, TASK_ID must be set when BACK_URL is")

        test_ids = invocation.values("--tests")
        if not test_ids:
            raise _fail(errors.RUNNER_NO_TESTS, "not found any tests to execute")
        checks = [self._lookup(t) for t in test_ids]

        methods = invocation.values("--httpMethods") or (DEFAULT_METHOD,)
        user_agent = (invocation.values("--userAgent") or (DEFAULT_USER_AGENT,))[0] or DEFAULT_USER_AGENT
        referer = (invocation.values("--referer") or ("",))[0]

        files = invocation.values("--files")
        if files and self.logger:
            self.logger.warn(f"--files is accepted but not used by this runner: {', '.join(files)}")

        results: List[TestResult] = []
        self.reporter.start(target)
        try:
            with self._build_client(user_agent, referer) as client:
                for method in methods:
                    if self.logger:
                        self.logger.info(f"Probing {method} {target}")
                    response = client.request(method, target)
                    probe = ProbeResult(method=method, url=response.url, status_code=response.status_code)
                    for check in checks:
                        probe.results.append(self._validate(check, check.run(response)))
                    if self.logger:
                        self.logger.debug(f"{len(probe.results)} result(s) for {method} ({response.status_line})")
                    self.reporter.report(probe)
                    results.extend(probe.results)
            failed = self.reporter.finish()
        finally:
            self.reporter.close()

        if self.logger:
            if failed:
                self.logger.warn(f"Engine failed to send {failed} requests")
            self.logger.ok(f"Scan of {target} finished with {len(results)} result(s)")
        return results
