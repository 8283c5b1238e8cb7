"""Client platform detection from the User-Agent header."""

import re

MOBILE_PLATFORM_TOKENS = ("iphone", "ipad", "ipod", "android", "mobile")

_MOBILE_PATTERN = re.compile("|".join(MOBILE_PLATFORM_TOKENS), re.IGNORECASE)


def is_mobile_client(user_agent: str | None) -> bool:
    """Return True if the User-Agent names a mobile platform."""
    if not user_agent:
        return False
    return _MOBILE_PATTERN.search(user_agent) is not None
