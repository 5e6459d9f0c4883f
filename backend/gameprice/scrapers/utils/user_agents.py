"""User-Agent and request header presets for the Turkish shops."""

from typing import Dict

from gameprice.config import settings


ACCEPT_LANGUAGE = "tr-TR,tr;q=0.9,en-US;q=0.8,en;q=0.7"

# Navigation headers sent with every browser page request
BROWSER_HEADERS: Dict[str, str] = {
    "Accept-Language": ACCEPT_LANGUAGE,
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Cache-Control": "max-age=0",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}


def get_user_agent() -> str:
    """Get the configured desktop user-agent string.

    Both extractors present the same agent so a FlareSolverr session and
    a browser context look like the same client.

    Returns:
        User-agent string from settings
    """
    return settings.USER_AGENT
