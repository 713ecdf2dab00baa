"""
Configuration options classes for nobrowser.

This module provides strongly-typed option classes for session
configuration with validation and type checking.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .defaults import (
    DEFAULT_COOKIE_STORE,
    DEFAULT_FOLLOW_REDIRECTS,
    DEFAULT_HEADERS,
    DEFAULT_IMPERSONATE,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_SESSION_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_VERIFY_SSL,
)


class SessionOptions(BaseModel):
    """Session configuration options.

    Covers the HTTP client (timeouts, TLS trust, proxy, impersonation) and
    the navigation policy (redirect handling, default headers and cookies).
    """

    timeout: float = Field(
        DEFAULT_SESSION_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    max_redirects: int = Field(
        DEFAULT_MAX_REDIRECTS, ge=0, description="Maximum redirects per navigation"
    )
    follow_redirects: bool = Field(
        DEFAULT_FOLLOW_REDIRECTS, description="Follow redirects"
    )
    verify_ssl: bool = Field(DEFAULT_VERIFY_SSL, description="Verify TLS certificates")
    ca_bundle: Optional[str] = Field(
        None, description="CA bundle to trust instead of the system roots"
    )
    impersonate: Optional[str] = Field(
        DEFAULT_IMPERSONATE, description="Browser to impersonate (curl_cffi)"
    )
    proxy: Optional[str] = Field(None, description="Proxy URL")
    headers: dict[str, str] = Field(
        default_factory=lambda: DEFAULT_HEADERS.copy(),
        description="Default request headers",
    )
    user_agent: Optional[str] = Field(DEFAULT_USER_AGENT, description="User agent string")
    cookies: dict[str, str] = Field(
        default_factory=dict, description="Cookies sent to every host"
    )
    cookie_store: bool = Field(
        DEFAULT_COOKIE_STORE, description="Keep and send cookies between requests"
    )

    @field_validator("impersonate", "proxy", "ca_bundle", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        """Treat empty strings (common in env files) as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def get_verify(self) -> Union[bool, str]:
        """Get the TLS verification setting in curl_cffi format."""
        if not self.verify_ssl:
            return False
        return self.ca_bundle or True

    def request_headers(self) -> dict[str, str]:
        """Get the headers every request starts from."""
        headers = self.headers.copy()
        if self.user_agent and not any(k.lower() == "user-agent" for k in headers):
            headers["User-Agent"] = self.user_agent
        return headers

    def merge(self, other: "SessionOptions") -> "SessionOptions":
        """Merge with another SessionOptions, other takes precedence."""
        data = self.model_dump()
        other_data = other.model_dump(exclude_unset=True)
        data.update(other_data)
        return SessionOptions(**data)


class NoBrowserConfig(BaseModel):
    """Main configuration class.

    Wraps the option sections so configuration files can grow new sections
    without changing their layout.
    """

    session: SessionOptions = Field(
        default_factory=SessionOptions, description="Session options"
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NoBrowserConfig":
        """Create configuration from dictionary."""
        return cls(**data)

    def merge(self, other: "NoBrowserConfig") -> "NoBrowserConfig":
        """Merge with another NoBrowserConfig, other takes precedence."""
        return NoBrowserConfig(session=self.session.merge(other.session))

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(exclude_none=True)
