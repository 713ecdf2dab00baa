"""
Abstract base interfaces for nobrowser.

This module defines the collaborator a Session talks to. Implementations
perform exactly one HTTP exchange per call; redirects, cookies and
encodings are the Session's business.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from nobrowser.models import RawResponse


class Transport(ABC):
    """Abstract HTTP transport.

    A transport must never follow redirects and must never store or send
    cookies of its own: the ``cookie_header`` argument is the only source
    of cookies for a request, and ``Set-Cookie`` headers are handed back
    untouched in the response.
    """

    @abstractmethod
    async def execute(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
        cookie_header: Optional[str] = None,
    ) -> "RawResponse":
        """Perform one HTTP request.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            headers: Request headers (without Cookie).
            body: Request body, if any.
            cookie_header: Value of the Cookie header, if any.

        Returns:
            The response, with headers as ordered pairs.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
