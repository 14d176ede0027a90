"""Content-Security-Policy checker: directive parsing and policy strength score."""

import re
from typing import Dict, List

from secprobe.checkers.base import BaseCheck
from secprobe.core.models import HttpResponse, TestResult, ThreatLevel

_NONCE_RX = re.compile(r"^'nonce-[A-Za-z0-9+/_=-]+'$")
_HASH_RX = re.compile(r"^'sha(256|384|512)-[A-Za-z0-9+/_=-]+'$")

_CRITICAL_DIRECTIVES = ("default-src", "script-src", "object-src", "style-src")
_IMPORTANT_DIRECTIVES = ("default-src", "script-src", "object-src", "style-src",
                         "frame-ancestors", "base-uri")
_UNSAFE_SOURCES = ("'unsafe-inline'", "'unsafe-eval'", "*")

# directive -> why it is recommended
_RECOMMENDED = {
    "default-src": "Sets fallback policy for resource loading",
    "script-src": "Controls script execution and loading",
    "object-src": "Prevents Flash/plugin attacks",
    "style-src": "Controls stylesheet loading",
    "img-src": "Controls image loading sources",
    "frame-ancestors": "Prevents clickjacking attacks",
    "base-uri": "Prevents base tag injection attacks",
    "form-action": "Controls form submission targets",
}

_THREAT_BY_LEVEL = {
    "excellent": ThreatLevel.INFO,
    "good": ThreatLevel.INFO,
    "acceptable": ThreatLevel.LOW,
    "weak": ThreatLevel.MEDIUM,
    "poor": ThreatLevel.HIGH,
}


def parse_policy(header: str) -> Dict[str, List[str]]:
    directives: Dict[str, List[str]] = {}
    for raw in BaseCheck.split_directives(header):
        parts = raw.split()
        name = parts[0].lower()
        # first occurrence wins, later duplicates are ignored by browsers
        directives.setdefault(name, parts[1:])
    return directives


def _has_nonce_or_hash(values: List[str]) -> bool:
    return any(_NONCE_RX.match(v) or _HASH_RX.match(v) for v in values)


def _compliance(name: str, values: List[str]) -> str:
    lowered = [v.lower() for v in values]
    if name == "default-src":
        if "'none'" in lowered or "'self'" in lowered:
            return "good"
        return "poor" if "*" in lowered else "fair"
    if name == "script-src":
        if "'none'" in lowered:
            return "excellent"
        if "'unsafe-inline'" in lowered or "'unsafe-eval'" in lowered:
            return "poor"
        return "good" if _has_nonce_or_hash(values) else "fair"
    if name == "object-src":
        return "excellent" if "'none'" in lowered else "fair"
    if name == "style-src":
        if "'unsafe-inline'" in lowered:
            return "poor"
        return "good" if _has_nonce_or_hash(values) else "fair"
    return "present"


def analyze_policy(header: str) -> dict:
    directives = parse_policy(header)
    unsafe, issues, critical = [], [], []
    compliance = {}

    for name, values in directives.items():
        for value in values:
            v = value.lower()
            if v not in _UNSAFE_SOURCES:
                continue
            unsafe.append(f"{name}: {value}")
            if v == "'unsafe-inline'":
                issues.append(f"{name} allows unsafe-inline, negating XSS protection")
                if name == "script-src":
                    critical.append("script-src unsafe-inline allows any inline scripts")
            elif v == "'unsafe-eval'":
                issues.append(f"{name} allows unsafe-eval, enabling code injection")
                critical.append("unsafe-eval permits eval() and Function() constructors")
            else:
                issues.append(f"{name} allows wildcard (*), permitting any source")
                if name in _CRITICAL_DIRECTIVES:
                    critical.append(f"{name} wildcard undermines security policy")
        compliance[name] = _compliance(name, values)

    missing = [d for d in _RECOMMENDED if d not in directives]

    score = 10 + 10 * sum(1 for d in _IMPORTANT_DIRECTIVES if d in directives)
    score -= 15 * len(unsafe)
    if compliance.get("script-src") in ("excellent", "good"):
        score += 15
    if compliance.get("object-src") == "excellent":
        score += 10
    score = max(0, min(100, score))

    if score >= 80:
        level = "excellent"
    elif score >= 60:
        level = "good"
    elif score >= 40:
        level = "acceptable"
    elif score >= 20:
        level = "weak"
    else:
        level = "poor"

    return {
        "directives": directives,
        "unsafe_directives": unsafe,
        "security_issues": issues,
        "critical_issues": critical,
        "missing_directives": missing,
        "compliance": compliance,
        "policy_strength": score,
        "protection_level": level,
    }


class ContentSecurityPolicy(BaseCheck):

    id = "csp"
    name = "Content Security Policy Analysis"
    description = ("Analyzes Content-Security-Policy header configuration to assess protection "
                   "against XSS, injection attacks, and resource loading security")

    def run(self, response: HttpResponse) -> TestResult:
        header = response.header("Content-Security-Policy")
        if not header.strip():
            return self.result(
                "CSP missing", 100, ThreatLevel.HIGH,
                "Missing Content-Security-Policy header - site vulnerable to XSS attacks, "
                "data injection, and other script-based vulnerabilities")

        a = analyze_policy(header)
        threat = ThreatLevel.HIGH if a["critical_issues"] else _THREAT_BY_LEVEL[a["protection_level"]]

        parts = [f"Content Security Policy detected with {a['protection_level']} protection "
                 f"level (strength: {a['policy_strength']}/100)."]
        if a["critical_issues"]:
            parts.append("CRITICAL ISSUES: " + "; ".join(a["critical_issues"]) + ".")
        if a["security_issues"]:
            parts.append("Security concerns: " + "; ".join(a["security_issues"]) + ".")
        if a["missing_directives"]:
            parts.append(f"Missing {len(a['missing_directives'])} recommended directives: "
                         + ", ".join(a["missing_directives"]) + ".")
            if len(a["missing_directives"]) <= 3:
                parts.append("Recommendations: " + "; ".join(
                    f"Add {d} directive: {_RECOMMENDED[d]}" for d in a["missing_directives"]) + ".")

        name = "CSP weak" if threat in (ThreatLevel.MEDIUM, ThreatLevel.HIGH) else "CSP enabled"
        return self.result(name, 100, threat, " ".join(parts), a)
