"""Static description of every flag the ``test`` verb accepts."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional

UNBOUNDED = None    # argument_count sentinel for variadic flags

TEST_IDS = ("https", "hsts", "csp", "xFrame", "refererPol", "xxss",
            "featurePol", "listing", "openRedirect", "fCookies", "fHttpOnly")

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE",
                "CONNECT", "HEAD")

DEFAULT_USER_AGENT = "Scanner/1.0"


@dataclass(frozen=True)
class ParameterSpec:
    """
    allowed_values  whitelist; empty set means free text
    default_value   emitted for optional flags given without a value
    argument_count  1 for singleton flags, UNBOUNDED for variadic ones
    """
    allowed_values: FrozenSet[str] = field(default_factory=frozenset)
    default_value: str = ""
    argument_required: bool = True
    argument_count: Optional[int] = 1

    def accepts(self, token: str) -> bool:
        return not self.allowed_values or token in self.allowed_values

    @property
    def variadic(self) -> bool:
        return self.argument_count is UNBOUNDED


class ParameterSchema:
    """Read-only mapping from flag name to ParameterSpec."""

    def __init__(self, specs: Mapping[str, ParameterSpec]):
        for name, spec in specs.items():
            if not name.startswith("--"):
                raise ValueError(f"flag {name!r} must start with '--'")
            if spec.argument_count is not UNBOUNDED and spec.argument_count < 1:
                raise ValueError(f"flag {name!r} has a non-positive argument count")
        self._specs: Dict[str, ParameterSpec] = dict(specs)

    def __contains__(self, flag: str) -> bool:
        return flag in self._specs

    def __getitem__(self, flag: str) -> ParameterSpec:
        return self._specs[flag]

    def __iter__(self):
        return iter(self._specs)

    def __len__(self):
        return len(self._specs)

    def get(self, flag: str) -> Optional[ParameterSpec]:
        return self._specs.get(flag)


def default_schema() -> ParameterSchema:
    return ParameterSchema({
        "--target": ParameterSpec(),
        "--userAgent": ParameterSpec(default_value=DEFAULT_USER_AGENT,
                                     argument_required=False),
        "--referer": ParameterSpec(argument_required=False),
        "--tests": ParameterSpec(allowed_values=frozenset(TEST_IDS),
                                 argument_count=UNBOUNDED),
        "--httpMethods": ParameterSpec(allowed_values=frozenset(HTTP_METHODS),
                                       argument_count=UNBOUNDED),
        "--files": ParameterSpec(argument_count=UNBOUNDED),
    })
