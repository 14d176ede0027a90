"""Keyed catalogue of checks, looked up by the ids accepted on ``--tests``."""

from typing import Dict, Iterable, Iterator, Optional

from secprobe.checkers.base import BaseCheck
from secprobe.checkers.cookies import CookieFlags, HttpOnlyCookies
from secprobe.checkers.csp import ContentSecurityPolicy
from secprobe.checkers.feature_policy import FeaturePolicy
from secprobe.checkers.hsts import HSTS
from secprobe.checkers.https import HTTPS
from secprobe.checkers.listing import DirectoryListing
from secprobe.checkers.open_redirect import OpenRedirect
from secprobe.checkers.referrer_policy import ReferrerPolicy
from secprobe.checkers.x_frame import XFrameOptions
from secprobe.checkers.xxss import XXSSProtection
from secprobe.core import errors
from secprobe.core.errors import ScanError


class TestRegistry:

    __test__ = False

    def __init__(self, checks: Iterable[BaseCheck] = ()):
        self._checks: Dict[str, BaseCheck] = {}
        for check in checks:
            self.register(check)

    def register(self, check: BaseCheck) -> None:
        if check.id in self._checks:
            raise ScanError(errors.REGISTRY_DUPLICATE_TEST,
                            "Registry error occurred. This could be due to:\n"
                            f"  - test with id {check.id!r} already exists",
                            "Registry", False)
        self._checks[check.id] = check

    def get(self, test_id: str) -> Optional[BaseCheck]:
        return self._checks.get(test_id)

    def __contains__(self, test_id: str) -> bool:
        return test_id in self._checks

    def __iter__(self) -> Iterator[BaseCheck]:
        return iter(self._checks.values())

    def __len__(self):
        return len(self._checks)

    def ids(self):
        return list(self._checks)


def default_registry() -> TestRegistry:
    return TestRegistry([
        HTTPS(), HSTS(), ContentSecurityPolicy(), XFrameOptions(),
        ReferrerPolicy(), XXSSProtection(), FeaturePolicy(),
        DirectoryListing(), OpenRedirect(), CookieFlags(), HttpOnlyCookies(),
    ])
