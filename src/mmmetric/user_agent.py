"""
Coarse User-Agent classification for the pixel endpoint.

Pixel hits carry no client-side data, so browser, OS and device type are
read from the request's User-Agent header. Only families are extracted;
checks run in a fixed order and the first match wins.
"""

from dataclasses import dataclass

BROWSER_RULES = [
    (("Chrome",), "Chrome"),
    (("Firefox",), "Firefox"),
    (("Safari",), "Safari"),
    (("Edge",), "Edge"),
    (("MSIE", "Trident"), "IE"),
]

OS_RULES = [
    (("Windows",), "Windows"),
    (("Mac",), "MacOS"),
    (("Linux",), "Linux"),
    (("Android",), "Android"),
    (("iOS", "iPhone", "iPad"), "iOS"),
]

MOBILE_MARKERS = ("Mobile", "Android", "iPhone")
TABLET_MARKERS = ("iPad", "Tablet")


@dataclass(frozen=True)
class UserAgentInfo:
    browser: str = "Other"
    os: str = "Other"
    device_type: str = "Desktop"


def _first_match(ua: str, rules) -> str:
    for markers, name in rules:
        if any(marker in ua for marker in markers):
            return name
    return "Other"


def get_browser(ua: str) -> str:
    return _first_match(ua or "", BROWSER_RULES)


def get_os(ua: str) -> str:
    # iPhone UAs contain "Mac OS X", so iOS devices report as MacOS here.
    return _first_match(ua or "", OS_RULES)


def get_device_type(ua: str) -> str:
    ua = ua or ""
    if any(marker in ua for marker in MOBILE_MARKERS):
        return "Mobile"
    if any(marker in ua for marker in TABLET_MARKERS):
        return "Tablet"
    return "Desktop"


def parse_user_agent(ua: str) -> UserAgentInfo:
    """Classify a User-Agent string into browser, OS and device families."""
    return UserAgentInfo(
        browser=get_browser(ua),
        os=get_os(ua),
        device_type=get_device_type(ua),
    )
