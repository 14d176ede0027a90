import sys
from datetime import datetime

from colorama import init as colorama_init, Fore, Style

from secprobe.core.models import ProbeResult, ThreatLevel
colorama_init(autoreset=True)

BANNER = r"""
                                    _
  ___  ___  ___ _ __  _ __ ___  | |__   ___
 / __|/ _ \/ __| '_ \| '__/ _ \ | '_ \ / _ \
 \__ \  __/ (__| |_) | | | (_) || |_) |  __/
 |___/\___|\___| .__/|_|  \___(_)_.__/ \___|
               |_|
"""

SEPARATOR = "-" * 45

THREAT_COLOR = {
    ThreatLevel.HIGH: Fore.RED,
    ThreatLevel.MEDIUM: Fore.YELLOW,
    ThreatLevel.LOW: Fore.GREEN,
    ThreatLevel.INFO: Fore.CYAN,
}


class Log:
    """Timestamped, coloured diagnostics. Writes to stderr so stdout stays clean."""

    def __init__(self, verbose: int = 1, stream=None):
        self.verbose = verbose
        self.stream = stream

    def _out(self, line: str):
        print(line, file=self.stream or sys.stderr)

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            self._out(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            self._out(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        if self.verbose >= 1:
            self._out(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            self._out(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")


class ConsoleReporter:
    """Prints verdicts to stdout as each probe completes."""

    def __init__(self, stream=None, banner: bool = True):
        self.stream = stream
        self.banner = banner

    def _print(self, line: str = ""):
        print(line, file=self.stream or sys.stdout)

    def start(self, target: str) -> None:
        if self.banner:
            self._print(BANNER)
        self._print(f"TEST RESULT for {target}")

    def report(self, probe: ProbeResult) -> None:
        self._print(f"{Style.BRIGHT}{probe.method} {probe.url} -> HTTP {probe.status_code}"
                    f"{Style.RESET_ALL}")
        self._print(SEPARATOR)
        for result in probe.results:
            color = THREAT_COLOR.get(result.threat_level, Fore.WHITE)
            self._print(f"Test name: {result.name}")
            self._print(f"Certainty: {result.certainty}")
            self._print(f"Threat level: {color}{result.threat_level}{Style.RESET_ALL}")
            self._print(f"Description: {result.description}")
            self._print(SEPARATOR)

    def finish(self) -> int:
        return 0

    def close(self) -> None:
        pass
