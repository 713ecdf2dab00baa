"""
Default configuration values for nobrowser.

This module contains all default values used throughout the configuration system.
"""

from typing import Any

# Session defaults
DEFAULT_SESSION_TIMEOUT = 30.0
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_FOLLOW_REDIRECTS = True
DEFAULT_VERIFY_SSL = True
DEFAULT_IMPERSONATE = "chrome"
DEFAULT_COOKIE_STORE = True

# Network defaults
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Default HTTP headers
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# File config defaults
DEFAULT_CONFIG_FILENAME = "nobrowser.config"
DEFAULT_CONFIG_EXTENSIONS = [".json", ".yaml", ".yml", ".ini", ".toml"]
DEFAULT_CONFIG_SEARCH_PATHS = [
    ".",
    "~/.config/nobrowser",
    "/etc/nobrowser",
]

# Environment variable prefix
ENV_PREFIX = "NOBROWSER_"


def get_default_session_config() -> dict[str, Any]:
    """Get default session configuration as a dictionary."""
    return {
        "timeout": DEFAULT_SESSION_TIMEOUT,
        "max_redirects": DEFAULT_MAX_REDIRECTS,
        "follow_redirects": DEFAULT_FOLLOW_REDIRECTS,
        "verify_ssl": DEFAULT_VERIFY_SSL,
        "impersonate": DEFAULT_IMPERSONATE,
        "cookie_store": DEFAULT_COOKIE_STORE,
        "headers": DEFAULT_HEADERS.copy(),
        "user_agent": DEFAULT_USER_AGENT,
    }
