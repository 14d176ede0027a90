import httpx
import pytest

from secprobe.checkers.cookies import CookieFlags, HttpOnlyCookies, parse_set_cookie
from secprobe.checkers.csp import ContentSecurityPolicy, analyze_policy
from secprobe.checkers.feature_policy import FeaturePolicy
from secprobe.checkers.hsts import HSTS, format_max_age
from secprobe.checkers.https import HTTPS
from secprobe.checkers.listing import DirectoryListing
from secprobe.checkers.open_redirect import OpenRedirect
from secprobe.checkers.referrer_policy import ReferrerPolicy
from secprobe.checkers.x_frame import XFrameOptions
from secprobe.checkers.xxss import XXSSProtection
from secprobe.core.models import ThreatLevel
from secprobe.core.registry import default_registry

INFO, LOW, MEDIUM, HIGH = ThreatLevel.INFO, ThreatLevel.LOW, ThreatLevel.MEDIUM, ThreatLevel.HIGH


# ── https ───────────────────────────────────────────────────────

def test_https_in_use(response_factory):
    r = HTTPS().run(response_factory(url="https://example.com/"))
    assert (r.name, r.certainty, r.threat_level) == ("HTTPS in use", 100, INFO)


def test_https_not_in_use(response_factory):
    r = HTTPS().run(response_factory(url="http://example.com/"))
    assert r.name == "HTTPS not in use"
    assert r.threat_level is HIGH


def test_https_downgrade_is_reported(response_factory):
    r = HTTPS().run(response_factory(url="http://example.com/",
                                     request_url="https://example.com/"))
    assert r.metadata["downgraded"] is True
    assert "redirected" in r.description


# ── hsts ────────────────────────────────────────────────────────

@pytest.mark.parametrize("value,name,threat", [
    (None, "HSTS missing", MEDIUM),
    ("includeSubDomains", "HSTS misconfigured", HIGH),
    ("max-age=abc", "HSTS misconfigured", HIGH),
    ("max-age=31536000; includeSubDomains; preload", "HSTS enabled", INFO),
    ("max-age=31536000; includeSubDomains", "HSTS enabled", INFO),
    ("max-age=31536000", "HSTS enabled", LOW),
    ("max-age=86400", "HSTS enabled", MEDIUM),
])
def test_hsts_verdicts(response_factory, value, name, threat):
    headers = {"Strict-Transport-Security": value} if value else {}
    r = HSTS().run(response_factory(headers=headers))
    assert (r.name, r.threat_level) == (name, threat)


def test_hsts_description_mentions_age_and_directives(response_factory):
    r = HSTS().run(response_factory(
        headers={"Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload"}))
    assert "2 years max-age" in r.description
    assert "includeSubDomains, preload" in r.description
    assert "Excellent" in r.description


@pytest.mark.parametrize("seconds,text", [
    (31536000, "1 year max-age"), (5184000, "2 months max-age"),
    (86400, "1 day max-age"), (7200, "2 hours max-age"), (59, "59 seconds max-age"),
])
def test_format_max_age(seconds, text):
    assert format_max_age(seconds) == text


# ── csp ─────────────────────────────────────────────────────────

def test_csp_missing(response_factory):
    r = ContentSecurityPolicy().run(response_factory())
    assert (r.name, r.threat_level) == ("CSP missing", HIGH)


def test_csp_strong_policy(response_factory):
    policy = ("default-src 'self'; script-src 'nonce-abc123'; object-src 'none'; "
              "style-src 'self'; frame-ancestors 'none'; base-uri 'self'; "
              "img-src 'self'; form-action 'self'")
    r = ContentSecurityPolicy().run(response_factory(headers={"Content-Security-Policy": policy}))
    assert r.threat_level is INFO
    assert r.name == "CSP enabled"
    assert r.metadata["protection_level"] == "excellent"
    assert r.metadata["missing_directives"] == []


def test_csp_unsafe_inline_script_is_critical(response_factory):
    r = ContentSecurityPolicy().run(response_factory(
        headers={"Content-Security-Policy": "default-src 'self'; script-src 'self' 'unsafe-inline'"}))
    assert r.threat_level is HIGH
    assert "CRITICAL ISSUES" in r.description


def test_csp_score():
    a = analyze_policy("default-src 'self'")
    # base 10 + default-src 10
    assert a["policy_strength"] == 20
    assert a["protection_level"] == "weak"
    assert "script-src" in a["missing_directives"]


def test_csp_wildcard_in_img_src_is_not_critical():
    a = analyze_policy("img-src *")
    assert a["critical_issues"] == []
    assert a["unsafe_directives"] == ["img-src: *"]


# ── x-frame ─────────────────────────────────────────────────────

@pytest.mark.parametrize("headers,threat,level", [
    ({}, HIGH, "vulnerable"),
    ({"X-Frame-Options": "DENY"}, INFO, "excellent"),
    ({"X-Frame-Options": "sameorigin"}, INFO, "good"),
    ({"X-Frame-Options": "ALLOW-FROM https://a.example"}, LOW, "limited"),
    ({"X-Frame-Options": "whatever"}, HIGH, "vulnerable"),
    ({"Content-Security-Policy": "frame-ancestors 'none'"}, INFO, "excellent"),
    ({"Content-Security-Policy": "frame-ancestors https://a.example"}, LOW, "limited"),
    ({"Content-Security-Policy": "frame-ancestors *"}, MEDIUM, "weak"),
    ({"X-Frame-Options": "DENY", "Content-Security-Policy": "frame-ancestors *"}, MEDIUM, "weak"),
])
def test_x_frame(response_factory, headers, threat, level):
    r = XFrameOptions().run(response_factory(headers=headers))
    assert r.threat_level is threat
    assert r.metadata["protection_level"] == level


# ── referrer policy ─────────────────────────────────────────────

@pytest.mark.parametrize("value,name,threat", [
    (None, "Referrer-Policy missing", MEDIUM),
    ("no-referrer", "Referrer-Policy enabled", INFO),
    ("strict-origin-when-cross-origin", "Referrer-Policy enabled", INFO),
    ("same-origin", "Referrer-Policy enabled", LOW),
    ("no-referrer-when-downgrade", "Referrer-Policy weak", MEDIUM),
    ("unsafe-url", "Referrer-Policy weak", HIGH),
    ("bogus", "Referrer-Policy invalid", HIGH),
    ("unsafe-url, no-referrer", "Referrer-Policy enabled", INFO),
])
def test_referrer_policy(response_factory, value, name, threat):
    headers = {"Referrer-Policy": value} if value else {}
    r = ReferrerPolicy().run(response_factory(headers=headers))
    assert (r.name, r.threat_level) == (name, threat)


def test_referrer_policy_lists_invalid_tokens(response_factory):
    r = ReferrerPolicy().run(response_factory(headers={"Referrer-Policy": "Foo, origin"}))
    assert r.metadata["effective_policy"] == "origin"
    assert "Foo" in r.description


# ── x-xss-protection ────────────────────────────────────────────

@pytest.mark.parametrize("headers,name,threat", [
    ({}, "X-XSS-Protection missing", LOW),
    ({"X-XSS-Protection": "1; mode=block"}, "X-XSS-Protection enabled", INFO),
    ({"X-XSS-Protection": "1"}, "X-XSS-Protection enabled", LOW),
    ({"X-XSS-Protection": "1; report=https://r.example"}, "X-XSS-Protection enabled", INFO),
    ({"X-XSS-Protection": "0"}, "X-XSS-Protection disabled", LOW),
    ({"X-XSS-Protection": "0", "Content-Security-Policy": "default-src 'self'"},
     "X-XSS-Protection disabled", INFO),
    ({"X-XSS-Protection": "yes please"}, "X-XSS-Protection invalid", MEDIUM),
    ({"X-XSS-Protection": ";"}, "X-XSS-Protection invalid", MEDIUM),
    ({"X-XSS-Protection": " ; ;"}, "X-XSS-Protection invalid", MEDIUM),
])
def test_xxss(response_factory, headers, name, threat):
    r = XXSSProtection().run(response_factory(headers=headers))
    assert (r.name, r.threat_level) == (name, threat)


# ── permissions / feature policy ────────────────────────────────

def test_permissions_policy_missing(response_factory):
    r = FeaturePolicy().run(response_factory())
    assert (r.name, r.threat_level) == ("Permissions-Policy missing", MEDIUM)


def test_permissions_policy_restrictive(response_factory):
    r = FeaturePolicy().run(response_factory(headers={
        "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=(), usb=()"}))
    assert r.threat_level is INFO
    assert r.metadata["restricted"] == ["camera", "microphone", "geolocation", "payment", "usb"]


def test_permissions_policy_dangerous(response_factory):
    r = FeaturePolicy().run(response_factory(headers={
        "Permissions-Policy": "camera=*, microphone=(self), geolocation=(self)"}))
    assert r.threat_level is HIGH
    assert r.metadata["wildcard_features"] == ["camera"]


def test_permissions_policy_wildcard_only(response_factory):
    r = FeaturePolicy().run(response_factory(headers={
        "Permissions-Policy": "fullscreen=*, camera=(), microphone=()"}))
    assert r.threat_level is MEDIUM


def test_legacy_feature_policy(response_factory):
    r = FeaturePolicy().run(response_factory(headers={
        "Feature-Policy": "camera 'none'; microphone 'none'; geolocation 'none'"}))
    assert r.metadata["legacy"] is True
    assert r.metadata["restricted"] == ["camera", "microphone", "geolocation"]
    assert "deprecated" in r.description


# ── directory listing ───────────────────────────────────────────

def test_listing_detected(response_factory):
    body = (b"<html><head><title>Index of /static</title></head><body>"
            b"<h1>Index of /static</h1><a href='../'>Parent Directory</a></body></html>")
    r = DirectoryListing().run(response_factory(body=body))
    assert (r.name, r.threat_level, r.certainty) == ("Directory listing enabled", HIGH, 100)


def test_listing_python_http_server(response_factory):
    r = DirectoryListing().run(response_factory(body=b"<h1>Directory listing for /</h1>"))
    assert r.threat_level is HIGH


def test_listing_not_detected(response_factory):
    r = DirectoryListing().run(response_factory(body=b"<html>normal page</html>"))
    assert r.threat_level is INFO


# ── open redirect ───────────────────────────────────────────────

def test_open_redirect_offsite_hop(response_factory):
    resp = response_factory(url="https://evil.com/", request_url="https://example.com/go",
                            redirects=[(302, "https://evil.com/")])
    r = OpenRedirect().run(resp)
    assert (r.name, r.threat_level) == ("Open redirect detected", HIGH)


def test_open_redirect_protocol_relative(response_factory):
    resp = response_factory(request_url="https://example.com/", redirects=[(301, "//evil.com")])
    assert OpenRedirect().run(resp).threat_level is HIGH


def test_open_redirect_javascript_scheme(response_factory):
    resp = response_factory(status=302, headers={"Location": "javascript:alert(1)"})
    assert OpenRedirect().run(resp).threat_level is HIGH


def test_open_redirect_same_site(response_factory):
    resp = response_factory(url="https://www.example.com/home", request_url="http://example.com/",
                            redirects=[(301, "https://www.example.com/"), (302, "/home")])
    r = OpenRedirect().run(resp)
    assert (r.name, r.threat_level) == ("No open redirect", INFO)


def test_open_redirect_no_redirect(response_factory):
    r = OpenRedirect().run(response_factory())
    assert r.threat_level is INFO
    assert r.metadata is None


# ── cookies ─────────────────────────────────────────────────────

def cookie_response(factory, *cookies):
    resp = factory()
    resp.headers = httpx.Headers([("Set-Cookie", c) for c in cookies])
    return resp


def test_parse_set_cookie():
    c = parse_set_cookie("sid=abc; Path=/; Secure; HttpOnly; SameSite=strict")
    assert (c.name, c.secure, c.http_only, c.same_site) == ("sid", True, True, "Strict")


def test_no_cookies(response_factory):
    assert CookieFlags().run(response_factory()).name == "No cookies set"
    assert HttpOnlyCookies().run(response_factory()).name == "No cookies set"


def test_cookie_flags_all_good(response_factory):
    resp = cookie_response(response_factory, "a=1; Secure; SameSite=Lax",
                           "b=2; Secure; SameSite=Strict")
    r = CookieFlags().run(resp)
    assert (r.name, r.threat_level) == ("Cookie flags set", INFO)


def test_cookie_flags_session_without_secure(response_factory):
    resp = cookie_response(response_factory, "PHPSESSID=1; SameSite=Lax", "theme=dark; Secure; SameSite=Lax")
    r = CookieFlags().run(resp)
    assert r.threat_level is HIGH
    assert r.metadata["missing_secure"] == ["PHPSESSID"]


def test_cookie_flags_same_site_none(response_factory):
    resp = cookie_response(response_factory, "theme=dark; Secure; SameSite=None")
    r = CookieFlags().run(resp)
    assert (r.name, r.threat_level) == ("Cookie flags missing", MEDIUM)


def test_http_only(response_factory):
    good = cookie_response(response_factory, "sid=1; HttpOnly")
    assert HttpOnlyCookies().run(good).threat_level is INFO

    sensitive = cookie_response(response_factory, "auth_token=1; Secure")
    assert HttpOnlyCookies().run(sensitive).threat_level is HIGH

    plain = cookie_response(response_factory, "theme=dark")
    r = HttpOnlyCookies().run(plain)
    assert (r.name, r.threat_level) == ("HttpOnly missing", MEDIUM)


# ── registry-wide properties ────────────────────────────────────

def test_every_check_is_pure_and_in_range(response_factory):
    resp = response_factory(headers={"Strict-Transport-Security": "max-age=100",
                                     "Set-Cookie": "sid=1"},
                            body=b"<html>ok</html>")
    for check in default_registry():
        first, second = check.run(resp), check.run(resp)
        assert first == second
        assert 0 <= first.certainty <= 100
        assert isinstance(first.threat_level, ThreatLevel)
        assert first.name
