import httpx
import pytest

from secprobe.core.models import HttpResponse


def make_response(headers=None, body=b"", url="https://example.com/", status=200,
                  method="GET", request_url=None, redirects=None) -> HttpResponse:
    return HttpResponse(
        method=method,
        request_url=request_url or url,
        url=url,
        status_code=status,
        status_line=f"HTTP/1.1 {status}",
        headers=httpx.Headers(headers or {}),
        body=body,
        redirects=list(redirects or []),
    )


@pytest.fixture
def response_factory():
    return make_response


class Recorder:
    """Reporter double that keeps every probe it is handed."""

    def __init__(self, failed: int = 0):
        self.target = None
        self.probes = []
        self.finished = False
        self.closed = False
        self.failed = failed

    def start(self, target):
        self.target = target

    def report(self, probe):
        self.probes.append(probe)

    def finish(self):
        self.finished = True
        return self.failed

    def close(self):
        self.closed = True


@pytest.fixture
def recorder():
    return Recorder()
