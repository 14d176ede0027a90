"""Error model shared by every layer of the scanner.

Three variants reach the top-level handler:

* ``ScanError``       application error raised by parser, runner, registry
* ``HttpClientError`` transport/status/bot failures from the HTTP client
* anything else       lifted with ``ScanError.from_fault`` (code 999)
"""

from typing import Any, Dict, Optional


# ── stable codes ────────────────────────────────────────────────

PARSER_TOO_FEW_TOKENS = 100
PARSER_MISSING_VERB = 201
PARSER_MISSING_ARGUMENTS = 303
PARSER_UNEXPECTED_ARGUMENT = 304
PARSER_DUPLICATE_ARGUMENT = 305
PARSER_TOO_MANY_ARGUMENTS = 306

HTTP_TRANSPORT = 100
HTTP_STATUS = 101
HTTP_BODY_READ = 200
HTTP_BOT_PROTECTION = 300

RUNNER_NO_TESTS = 100
RUNNER_MISSING_TARGET = 101
RUNNER_INVALID_TARGET = 102
RUNNER_UNKNOWN_TEST = 103
RUNNER_MISSING_TASK_ID = 104

REGISTRY_DUPLICATE_TEST = 100

REPORTER_SERIALIZE = 100
REPORTER_NETWORK = 102
REPORTER_REJECTED = 103

RUNTIME_FAULT = 999

HTTP_CLIENT_SOURCE = "Http Client"
RUNTIME_SOURCE = "Runtime/Critical"


class ScanError(Exception):
    """Unified application error."""

    def __init__(self, code: int, message: str, source: str, retryable: bool = False):
        super().__init__(message)
        self.code = code
        self.message = message
        self.source = source
        self.retryable = retryable

    @classmethod
    def from_fault(cls, fault: BaseException) -> "ScanError":
        return cls(RUNTIME_FAULT, f"Panic: {fault!r}", RUNTIME_SOURCE, False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Code": self.code,
            "Message": self.message,
            "Source": self.source,
            "IsRetryable": self.retryable,
        }

    def __str__(self):
        return f"[{self.source}] Error {self.code}: {self.message}"

    def __repr__(self):
        return (f"ScanError(code={self.code}, source={self.source!r}, "
                f"retryable={self.retryable})")


class HttpClientError(Exception):
    """Failure raised by the HTTP client, before it is lifted to ScanError."""

    def __init__(self, url: str, code: int, message: str,
                 cause: Optional[Any] = None, retryable: bool = False):
        super().__init__(message)
        self.url = url
        self.code = code
        self.message = message
        self.cause = cause
        self.retryable = retryable

    def to_error(self) -> ScanError:
        return ScanError(self.code, self.message, HTTP_CLIENT_SOURCE, self.retryable)

    def __str__(self):
        return f"[{HTTP_CLIENT_SOURCE}] Error {self.code} for {self.url}: {self.message}"
