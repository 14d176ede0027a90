"""Shared data models for the scanner."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx


class ThreatLevel(Enum):
    INFO = "Info"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class CommandParameter:
    """A recognised flag and the argument tokens collected for it."""
    name: str
    arguments: Tuple[str, ...]


@dataclass(frozen=True)
class ParsedInvocation:
    """Ordered parser output; ``verb`` is always ``test``."""
    verb: str
    parameters: Tuple[CommandParameter, ...] = ()

    def first(self, flag: str) -> Optional[CommandParameter]:
        for param in self.parameters:
            if param.name == flag:
                return param
        return None

    def values(self, flag: str) -> Tuple[str, ...]:
        param = self.first(flag)
        return param.arguments if param else ()

    def names(self) -> List[str]:
        return [p.name for p in self.parameters]


@dataclass
class HttpResponse:
    """Fully-read response handed to every check."""
    method: str
    request_url: str
    url: str                # final URL after redirects
    status_code: int
    status_line: str        # "HTTP/1.1 200 OK"
    headers: httpx.Headers
    body: bytes = b""
    redirects: List[Tuple[int, str]] = field(default_factory=list)  # (status, Location)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name, default)

    def header_values(self, name: str) -> List[str]:
        return self.headers.get_list(name)


@dataclass(frozen=True)
class TestResult:
    """A single verdict."""
    name: str
    certainty: int          # 0-100
    threat_level: ThreatLevel
    description: str
    metadata: Optional[Dict[str, Any]] = None

    __test__ = False        # keep pytest from collecting this class

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Certainty": self.certainty,
            "ThreatLevel": str(self.threat_level),
            "Metadata": self.metadata,
            "Description": self.description,
        }

    def __str__(self):
        return (f"[{str(self.threat_level).upper()}][{self.certainty}%] "
                f"{self.name} - {self.description}")


@dataclass
class ProbeResult:
    """Verdicts gathered from one request (one HTTP method)."""
    method: str
    url: str
    status_code: int
    results: List[TestResult] = field(default_factory=list)
