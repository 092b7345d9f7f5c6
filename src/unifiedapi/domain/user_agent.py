"""Coarse user-agent classification for visitor logs.

Rules are checked in order and the first match wins, so an iPhone UA
(which mentions "Mac OS X") classifies as MacOS and Android (which
mentions "Linux") as Linux.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_BROWSERS = (
    (re.compile(r"chrome", re.IGNORECASE), "Chrome"),
    (re.compile(r"firefox", re.IGNORECASE), "Firefox"),
    (re.compile(r"safari", re.IGNORECASE), "Safari"),
)

_OPERATING_SYSTEMS = (
    (re.compile(r"windows", re.IGNORECASE), "Windows"),
    (re.compile(r"mac", re.IGNORECASE), "MacOS"),
    (re.compile(r"linux", re.IGNORECASE), "Linux"),
    (re.compile(r"android", re.IGNORECASE), "Android"),
    (re.compile(r"ios|iphone|ipad", re.IGNORECASE), "iOS"),
)

_MOBILE = re.compile(r"mobile", re.IGNORECASE)
_TABLET = re.compile(r"tablet", re.IGNORECASE)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class UserAgentInfo:
    browser: str
    os: str
    device_type: str


def _first_match(rules, ua: str) -> str:
    for pattern, label in rules:
        if pattern.search(ua):
            return label
    return UNKNOWN


def parse_user_agent(ua: str | None) -> UserAgentInfo:
    ua = ua or ""
    if _MOBILE.search(ua):
        device_type = "Mobile"
    elif _TABLET.search(ua):
        device_type = "Tablet"
    else:
        device_type = "Desktop"

    return UserAgentInfo(
        browser=_first_match(_BROWSERS, ua),
        os=_first_match(_OPERATING_SYSTEMS, ua),
        device_type=device_type,
    )
