"""
Synchronous wrappers for nobrowser async APIs.

This module provides a sync-compatible Session that runs the async one on a
dedicated event loop thread, allowing nobrowser to be used from scripts,
test suites or interactive sessions that have no event loop of their own.
"""

import asyncio
import atexit
import concurrent.futures
import threading
from typing import TYPE_CHECKING, Any, Coroutine, Mapping, Optional, TypeVar

from nobrowser.session.client import Referrer, Session

if TYPE_CHECKING:
    from nobrowser.config.options import SessionOptions
    from nobrowser.dom.document import Document
    from nobrowser.forms.encoder import Submitter
    from nobrowser.forms.form import Form
    from nobrowser.interfaces import Transport
    from nobrowser.models import RequestDescriptor
    from nobrowser.session.cookies import CookieJar

T = TypeVar("T")


# =============================================================================
# Event Loop Management
# =============================================================================


class EventLoopManager:
    """Manages a dedicated event loop for sync wrappers.

    Runs an asyncio event loop in a background thread to allow
    sync code to execute async operations without blocking.
    """

    _instance: Optional["EventLoopManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "EventLoopManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._init()
        return cls._instance

    def _init(self) -> None:
        """Initialize the event loop manager."""
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._started = threading.Event()
        self._shutdown = False

    def _run_loop(self) -> None:
        """Run the event loop in the background thread."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._started.set()
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            self._loop.close()

    def ensure_started(self) -> asyncio.AbstractEventLoop:
        """Ensure the background loop is running and return it."""
        if self._loop is None or not self._loop.is_running():
            if self._thread is not None and self._thread.is_alive():
                self._started.wait()
                if self._loop is not None:
                    return self._loop

            self._started.clear()
            self._shutdown = False
            self._thread = threading.Thread(
                target=self._run_loop,
                daemon=True,
                name="nobrowser-event-loop",
            )
            self._thread.start()
            self._started.wait()

        if self._loop is None:
            raise RuntimeError("Failed to start event loop")
        return self._loop

    def run_coroutine(
        self,
        coro: Coroutine[Any, Any, T],
        timeout: Optional[float] = None,
    ) -> T:
        """Run a coroutine on the background loop and return the result.

        Args:
            coro: Coroutine to execute.
            timeout: Maximum time to wait in seconds.

        Returns:
            Coroutine result.

        Raises:
            RuntimeError: If called from a running event loop.
            TimeoutError: If the coroutine does not finish in time.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            coro.close()
            raise RuntimeError(
                "Cannot use sync wrapper from within an async context. "
                "Use 'await' directly instead."
            )

        loop = self.ensure_started()
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise TimeoutError(f"Operation timed out after {timeout} seconds")

    def shutdown(self) -> None:
        """Shutdown the event loop."""
        if self._shutdown:
            return
        self._shutdown = True
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
            if self._thread is not None:
                self._thread.join(timeout=5)

    @classmethod
    def get_instance(cls) -> "EventLoopManager":
        """Get the singleton instance."""
        return cls()

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (mainly for testing)."""
        if cls._instance is not None:
            cls._instance.shutdown()
            cls._instance = None


def _shutdown_at_exit() -> None:
    if EventLoopManager._instance is not None:
        EventLoopManager._instance.shutdown()


atexit.register(_shutdown_at_exit)


def run_sync(
    coro: Coroutine[Any, Any, T],
    timeout: Optional[float] = None,
) -> T:
    """Run an async coroutine synchronously.

    Example:
        page = run_sync(session.navigate("https://example.com"))
    """
    return EventLoopManager.get_instance().run_coroutine(coro, timeout)


# =============================================================================
# Sync Session
# =============================================================================


class SyncSession:
    """Synchronous wrapper for :class:`~nobrowser.session.client.Session`.

    Example:
        with SyncSession(max_redirects=5) as session:
            page = session.navigate("https://example.com/login")
            form = page.form_by_id("login")
            form.set("user", "alice")
            home = session.submit(form, page)
    """

    def __init__(
        self,
        options: Optional["SessionOptions"] = None,
        *,
        transport: Optional["Transport"] = None,
        timeout: Optional[float] = None,
        **overrides: Any,
    ) -> None:
        """Initialize SyncSession.

        Args:
            options: Session options.
            transport: HTTP transport (defaults to CurlTransport).
            timeout: Maximum seconds to wait for each call; defaults to no
                limit beyond the transport's own timeout.
            **overrides: Individual SessionOptions fields.
        """
        self._timeout = timeout
        self._session = run_sync(self._create(options, transport, overrides))

    @staticmethod
    async def _create(
        options: Optional["SessionOptions"],
        transport: Optional["Transport"],
        overrides: dict[str, Any],
    ) -> Session:
        # Built on the loop thread so its asyncio primitives belong there.
        return Session(options, transport=transport, **overrides)

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        return run_sync(coro, self._timeout)

    @property
    def session(self) -> Session:
        """Get the wrapped async Session."""
        return self._session

    @property
    def cookies(self) -> "CookieJar":
        """Get the session's cookie jar."""
        return self._session.cookies

    def get_cookies(self) -> dict[str, str]:
        """Get current cookies as a name -> value mapping."""
        return self._session.get_cookies()

    def set_cookie(self, name: str, value: str, domain: str = "", path: str = "/", **kwargs: Any) -> None:
        """Store a cookie."""
        self._session.set_cookie(name, value, domain, path, **kwargs)

    def clear_cookies(self, domain: Optional[str] = None) -> None:
        """Remove all cookies, or those stored for one domain."""
        self._session.clear_cookies(domain)

    def navigate(
        self,
        url: str,
        referrer: Referrer = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> "Document":
        """Fetch a page with GET."""
        return self._run(self._session.navigate(url, referrer, params=params, headers=headers))

    def submit(
        self,
        form: "Form",
        referrer: Referrer = None,
        *,
        submitter: "Submitter" = None,
    ) -> "Document":
        """Submit a form."""
        return self._run(self._session.submit(form, referrer, submitter=submitter))

    def submit_with(
        self,
        form: "Form",
        button_name: str,
        referrer: Referrer = None,
        value: Optional[str] = None,
    ) -> "Document":
        """Submit a form by clicking a named submit button."""
        return self._run(self._session.submit_with(form, button_name, referrer, value))

    def request(self, descriptor: "RequestDescriptor", referrer: Referrer = None) -> "Document":
        """Issue an encoded request."""
        return self._run(self._session.request(descriptor, referrer))

    def close(self) -> None:
        """Close the session."""
        self._run(self._session.close())

    def __enter__(self) -> "SyncSession":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SyncSession {self._session!r}>"


__all__ = [
    "EventLoopManager",
    "run_sync",
    "SyncSession",
]
