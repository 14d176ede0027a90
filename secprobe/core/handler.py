"""Global failure boundary around parse -> run.

Every failure is normalised to ScanError and written to stderr, either as a
human-readable block or as indented JSON for machine consumers.
"""

import json
import sys
from typing import Callable, Sequence

from secprobe.core.errors import HttpClientError, ScanError
from secprobe.core.models import ParsedInvocation

RULE = "-" * 50


def format_human(err: ScanError) -> str:
    return (f"\n{RULE}\n"
            f"ERROR SOURCE: {err.source}\n"
            f"EXIT CODE:    {err.code}\n"
            f"MESSAGE:      {err.message}\n"
            f"RETRYABLE:    {str(err.retryable).lower()}\n"
            f"{RULE}\n")


def format_machine(err: ScanError) -> str:
    return json.dumps(err.to_dict(), indent=2) + "\n"


class GlobalHandler:

    def __init__(self, parser, runner_factory: Callable[[], object],
                 machine_mode: bool = False, stream=None, logger=None):
        self.parser = parser
        self.runner_factory = runner_factory
        self.machine_mode = machine_mode
        self.stream = stream
        self.logger = logger

    def run_safe(self, argv: Sequence[str]) -> int:
        """Returns the process exit status: 0 on success, 1 on any failure."""
        try:
            invocation: ParsedInvocation = self.parser.parse(argv)
            runner = self.runner_factory()
            runner.orchestrate(invocation)
        except ScanError as err:
            self.print_error(err)
        except HttpClientError as err:
            if self.logger:
                self.logger.debug(f"HTTP failure on {err.url}: {err.cause!r}")
            self.print_error(err.to_error())
        except Exception as exc:
            self.print_error(ScanError.from_fault(exc))
        else:
            return 0
        return 1

    def print_error(self, err: ScanError) -> None:
        text = format_machine(err) if self.machine_mode else format_human(err)
        out = self.stream or sys.stderr
        out.write(text)
        out.flush()
