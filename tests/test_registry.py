"""Tests for the distraction registry."""

from lockin.registry import DistractionRegistry, hostname_of


def test_hostname_of():
    assert hostname_of("https://Example.COM/x?y=1") == "example.com"
    assert hostname_of("not a url") == ""


class TestDomains:
    def test_save_domain(self, registry):
        assert registry.save_domain("https://youtube.com/watch?v=1") is True
        assert registry.domains() == ["youtube.com"]

    def test_domains_kept_sorted(self, registry):
        for url in ("https://zulip.com", "https://amazon.com", "https://news.ycombinator.com"):
            registry.save_domain(url)
        assert registry.domains() == ["amazon.com", "news.ycombinator.com", "zulip.com"]

    def test_duplicate_domain_saved_once(self, registry):
        registry.save_domain("https://youtube.com/a")
        assert registry.save_domain("https://youtube.com/b") is False
        assert registry.domains() == ["youtube.com"]

    def test_non_web_urls_ignored(self, registry):
        assert registry.save_domain("chrome://settings") is False
        assert registry.save_domain("") is False
        assert registry.save_domain(None) is False
        assert registry.domains() == []

    def test_is_domain_distracting(self, registry):
        registry.save_domain("https://reddit.com/r/all")
        assert registry.is_domain_distracting("reddit.com") is True
        assert registry.is_domain_distracting("arxiv.org") is False

    def test_delete_domain(self, registry):
        registry.save_domain("https://a.com")
        registry.save_domain("https://b.com")
        assert registry.delete_domain("a.com") is True
        assert registry.domains() == ["b.com"]
        assert registry.delete_domain("a.com") is False

    def test_domains_persist(self, storage, registry):
        registry.save_domain("https://a.com")
        assert DistractionRegistry(storage.sync).domains() == ["a.com"]
        assert storage.sync.get("distractingDomains") == {"distractingDomains": ["a.com"]}


class TestTabs:
    def test_save_tab(self, registry):
        assert registry.save_tab("https://a.com/x", "A") is True
        assert registry.tabs() == [{"url": "https://a.com/x", "title": "A"}]

    def test_tab_unique_by_url(self, registry):
        registry.save_tab("https://a.com/x", "A")
        assert registry.save_tab("https://a.com/x", "Renamed") is False
        assert len(registry.tabs()) == 1

    def test_insertion_order_kept(self, registry):
        registry.save_tab("https://b.com/", "B")
        registry.save_tab("https://a.com/", "A")
        assert [t["url"] for t in registry.tabs()] == ["https://b.com/", "https://a.com/"]

    def test_delete_tab_leaves_domain(self, registry):
        registry.save_domain("https://a.com/x")
        registry.save_tab("https://a.com/x", "A")
        assert registry.delete_tab("https://a.com/x") is True
        assert registry.tabs() == []
        assert registry.domains() == ["a.com"]
