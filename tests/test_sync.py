"""
Tests for the synchronous session wrapper.
"""

import asyncio

import pytest

from nobrowser.models import SessionState
from nobrowser.sync import EventLoopManager, SyncSession, run_sync


class TestRunSync:
    """Tests for run_sync and the background loop."""

    def test_returns_result(self):
        """Test a coroutine's result is returned."""

        async def answer():
            await asyncio.sleep(0)
            return 42

        assert run_sync(answer()) == 42

    def test_propagates_exceptions(self):
        """Test exceptions raised in the coroutine reach the caller."""

        async def boom():
            raise KeyError("missing")

        with pytest.raises(KeyError):
            run_sync(boom())

    def test_timeout(self):
        """Test slow coroutines time out."""

        async def slow():
            await asyncio.sleep(5)

        with pytest.raises(TimeoutError):
            run_sync(slow(), timeout=0.05)

    @pytest.mark.asyncio
    async def test_refuses_running_loop(self):
        """Test calling from async code raises instead of deadlocking."""

        async def noop():
            return None

        with pytest.raises(RuntimeError):
            run_sync(noop())

    def test_restart_after_reset(self):
        """Test the manager starts a fresh loop after a reset."""

        async def loop_id():
            return id(asyncio.get_running_loop())

        run_sync(loop_id())
        EventLoopManager.reset()
        assert run_sync(loop_id()) is not None


class TestSyncSession:
    """Tests for SyncSession."""

    def test_navigate_and_submit(self, transport, search_page):
        """Test the search flow without an event loop."""
        transport.add("https://example.test/", search_page)
        transport.add("https://example.test/search?q=rust&lang=en", "<title>Results</title>")

        with SyncSession(transport=transport) as session:
            page = session.navigate("https://example.test/")
            form = page.form_by_id("search")
            form.set("q", "rust")
            results = session.submit(form, page)

            assert results.title == "Results"
            assert session.session.state == SessionState.IDLE

        assert transport.closed is False

    def test_submit_with(self, transport, search_page):
        """Test clicking a named button."""
        transport.add("https://example.test/", search_page)
        with SyncSession(transport=transport) as session:
            page = session.navigate("https://example.test/")
            session.submit_with(page.form_by_id("search"), "go", page)
        assert transport.last.url == "https://example.test/search?q=&lang=en&go=Search"

    def test_cookies(self, transport):
        """Test the cookie helpers pass through."""
        transport.add("https://example.test/", headers=[("Set-Cookie", "sid=1")])
        with SyncSession(transport=transport, cookies={"lang": "en"}) as session:
            session.navigate("https://example.test/")
            assert session.get_cookies() == {"lang": "en", "sid": "1"}
            session.set_cookie("extra", "x")
            assert "extra" in session.cookies
            session.clear_cookies()
            assert session.get_cookies() == {}
