"""Tests for the lock gate and the unlock flow."""

from urllib.parse import parse_qs, urlsplit

import pytest

from lockin.actions.lock_gate import LockGate, LockState
from lockin.actions.unlock import INCORRECT_PIN_MESSAGE, INVALID_TARGET_MESSAGE, UnlockFlow
from lockin.browser.host import Tab
from lockin.errors import TabNotFoundError


@pytest.fixture
def gate(host, registry, storage):
    return LockGate(host, registry, storage.session)


@pytest.fixture
def unlock(storage, host):
    flow = UnlockFlow(storage, host)
    flow.set_pin("4321")
    return flow


@pytest.fixture
def example_tab(host, registry):
    registry.save_domain("https://example.com/")
    return host.upsert_tab(Tab(id=3, url="https://example.com/x", title="Example"))


class TestLockGate:
    def test_distracting_domain_is_locked(self, gate, host, example_tab):
        decision = gate.on_tab_activated(example_tab.id)
        assert decision.state is LockState.LOCKED

        redirect = host.get_tab(example_tab.id).url
        parts = urlsplit(redirect)
        assert redirect.startswith("chrome-extension://lockin/html/locked.html?url=")
        assert parse_qs(parts.query)["url"] == ["https://example.com/x"]

    def test_redirect_queued_for_extension(self, gate, host, example_tab):
        gate.on_tab_activated(example_tab.id)
        commands = host.drain_commands()
        assert [c.type for c in commands] == ["UPDATE_TAB"]
        assert commands[0].params["tabId"] == example_tab.id

    def test_query_string_survives_round_trip(self, gate, registry):
        registry.save_domain("https://example.com/")
        original = "https://example.com/search?q=cats&page=2#top"
        decision = gate.evaluate(original)
        assert "&page" not in decision.redirect_url
        assert parse_qs(urlsplit(decision.redirect_url).query)["url"] == [original]

    def test_non_distracting_domain_untouched(self, gate, host):
        host.upsert_tab(Tab(id=5, url="https://arxiv.org/abs/1"))
        decision = gate.on_tab_activated(5)
        assert decision.state is LockState.UNLOCKED
        assert host.pending_commands() == []

    def test_extension_pages_never_locked(self, gate, host, registry):
        registry.save_domain("https://lockin/")
        host.upsert_tab(Tab(id=6, url="chrome-extension://lockin/html/tasks.html"))
        decision = gate.on_tab_activated(6)
        assert decision.state is LockState.UNLOCKED
        assert decision.reason == "extension page"
        assert host.pending_commands() == []

    def test_tab_without_url_ignored(self, gate, host):
        host.upsert_tab(Tab(id=8, url=""))
        assert gate.on_tab_activated(8) is None

    def test_unknown_tab_raises(self, gate):
        with pytest.raises(TabNotFoundError):
            gate.on_tab_activated(999)


class TestUnlockFlow:
    def test_wrong_pin(self, unlock, storage):
        result = unlock.submit("0000", "https://example.com/x")
        assert result.ok is False
        assert result.error_message == INCORRECT_PIN_MESSAGE
        assert result.clear_input is True
        assert storage.session.get() == {}

    def test_pin_compare_is_exact(self, unlock):
        assert unlock.submit(" 4321", "https://example.com/").ok is False
        assert unlock.submit("4321 ", "https://example.com/").ok is False

    def test_no_pin_configured_never_matches(self, storage, host):
        flow = UnlockFlow(storage, host)
        assert flow.has_pin() is False
        assert flow.submit("", "https://example.com/").ok is False

    def test_unlimited_retries(self, unlock):
        for _ in range(20):
            assert unlock.submit("bad", "https://example.com/").ok is False
        assert unlock.submit("4321", "https://example.com/").ok is True

    def test_correct_pin_unlocks_session(self, unlock, storage):
        result = unlock.submit("4321", "https://example.com/x")
        assert result.ok is True
        assert result.domain == "example.com"
        assert result.redirect_url == "https://example.com/x"
        assert storage.session.get("unlocked_example.com") == {"unlocked_example.com": True}

    def test_correct_pin_navigates_lock_tab(self, unlock, host):
        host.upsert_tab(Tab(id=3, url="chrome-extension://lockin/html/locked.html?url=x"))
        unlock.submit("4321", "https://example.com/x", tab_id=3)
        assert host.get_tab(3).url == "https://example.com/x"

    @pytest.mark.parametrize("target", ["not a url", "", "file:///tmp/notes.txt"])
    def test_target_without_domain_unlocks_nothing(self, unlock, storage, host, target):
        host.upsert_tab(Tab(id=3, url="chrome-extension://lockin/html/locked.html"))
        result = unlock.submit("4321", target, tab_id=3)
        assert result.ok is False
        assert result.domain == ""
        assert result.redirect_url is None
        assert result.error_message == INVALID_TARGET_MESSAGE
        assert storage.session.get() == {}
        assert host.get_tab(3).url == "chrome-extension://lockin/html/locked.html"


class TestLockThenUnlock:
    def test_unlocked_domain_stays_unlocked_for_session(self, gate, unlock, host, example_tab):
        assert gate.on_tab_activated(example_tab.id).state is LockState.LOCKED

        unlock.submit("4321", "https://example.com/x", tab_id=example_tab.id)
        host.drain_commands()

        host.upsert_tab(Tab(id=4, url="https://example.com/other/page"))
        decision = gate.on_tab_activated(4)
        assert decision.state is LockState.UNLOCKED
        assert decision.reason == "unlocked this session"
        assert host.pending_commands() == []

    def test_unlock_is_domain_scoped(self, gate, unlock, host, registry, example_tab):
        registry.save_domain("https://reddit.com/")
        unlock.submit("4321", "https://example.com/x")
        host.upsert_tab(Tab(id=9, url="https://reddit.com/r/all"))
        assert gate.on_tab_activated(9).state is LockState.LOCKED

    def test_new_session_locks_again(self, gate, unlock, storage, example_tab):
        unlock.submit("4321", "https://example.com/x")
        storage.session.clear()
        assert gate.on_tab_activated(example_tab.id).state is LockState.LOCKED
