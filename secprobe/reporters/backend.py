"""Backend reporter: JSON over HTTP to the queue consumer named by BACK_URL.

Each verdict is POSTed as soon as its probe completes; a closing message with
``EndFlag: true`` tells the consumer the task is finished. Retryable failures
are retried up to ``max_retries`` times.
"""

import json
import time
from typing import Any, Dict, Optional

import httpx

from secprobe.core import errors
from secprobe.core.errors import ScanError
from secprobe.core.models import ProbeResult

SOURCE = "Reporter"
NON_RETRYABLE_STATUSES = frozenset({400, 401, 403})


class BackendReporter:

    def __init__(self, backend_url: str, task_id: str = "", max_retries: int = 2,
                 retry_delay: float = 2.0, timeout: float = 5.0,
                 transport: Optional[httpx.BaseTransport] = None, logger=None):
        self.backend_url = backend_url
        self.task_id = task_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.logger = logger
        self.target = ""
        self.failed_uploads = 0
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def start(self, target: str) -> None:
        self.target = target
        self.failed_uploads = 0

    def report(self, probe: ProbeResult) -> None:
        for result in probe.results:
            self._deliver({
                "Target": self.target,
                "TestId": self.task_id,
                "Method": probe.method,
                "Result": result.to_dict(),
                "EndFlag": False,
            })

    def finish(self) -> int:
        self._deliver({
            "Target": self.target,
            "TestId": self.task_id,
            "Method": "",
            "Result": None,
            "EndFlag": True,
        })
        return self.failed_uploads

    def close(self) -> None:
        self.client.close()

    # ── delivery ────────────────────────────────────────────────

    def _deliver(self, payload: Dict[str, Any]) -> None:
        attempt = 0
        while True:
            try:
                self._send(payload)
                return
            except ScanError as err:
                if not err.retryable or attempt >= self.max_retries:
                    self.failed_uploads += 1
                    if self.logger:
                        self.logger.debug(f"Upload dropped after {attempt + 1} attempt(s): {err}")
                    return
                attempt += 1
                if self.logger:
                    self.logger.debug(f"Upload failed ({err}), retry {attempt}/{self.max_retries}")
                time.sleep(self.retry_delay)

    def _send(self, payload: Dict[str, Any]) -> None:
        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise ScanError(errors.REPORTER_SERIALIZE,
                            f"Reporter error occurred: JSON serialisation failed ({exc})",
                            SOURCE, False)
        try:
            resp = self.client.post(self.backend_url, content=body,
                                    headers={"Content-Type": "application/json"})
        except httpx.HTTPError as exc:
            raise ScanError(errors.REPORTER_NETWORK,
                            f"Reporter error occurred: network error ({exc})", SOURCE, True)

        if not 200 <= resp.status_code < 300:
            raise ScanError(errors.REPORTER_REJECTED,
                            f"Reporter error occurred: server rejected request with status code "
                            f"{resp.status_code}",
                            SOURCE, resp.status_code not in NON_RETRYABLE_STATUSES)
