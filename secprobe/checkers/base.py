"""Abstract base for all response checks."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from secprobe.core.models import HttpResponse, TestResult, ThreatLevel


class BaseCheck(ABC):
    """Every check declares id/name/description and implements run()."""

    id: str = ""
    name: str = "Unnamed Check"
    description: str = ""

    # ── public API ──────────────────────────────────────────────

    @abstractmethod
    def run(self, response: HttpResponse) -> TestResult:
        """
        Inspect the captured *response* and return a verdict.
        Must not issue requests or mutate the response.
        """
        ...

    # ── shared helpers ──────────────────────────────────────────

    @staticmethod
    def result(name: str, certainty: int, threat: ThreatLevel, description: str,
               metadata: Optional[Dict[str, Any]] = None) -> TestResult:
        return TestResult(name=name, certainty=certainty, threat_level=threat,
                          description=description, metadata=metadata)

    @staticmethod
    def split_directives(value: str, sep: str = ";") -> List[str]:
        """Split a header into trimmed, non-empty directives."""
        return [part.strip() for part in value.split(sep) if part.strip()]

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id!r}>"
