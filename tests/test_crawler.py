"""Tests for the dynamic-site crawler, driven by an in-memory browser."""

import dataclasses

import pytest

from dynamic_site_rag.rag.crawler import DynamicCrawler, interaction_source, select_followable_links
from dynamic_site_rag.rag.documents import DocumentStore
from dynamic_site_rag.rag.embeddings import EmbeddingClient

from .fakes import FakeElement, FakeEmbeddings, FakeSession, FakeSite, ParagraphChunker, page_html

ROOT = "https://shop.example.com/"


def make_crawler(site, config, embeddings=None):
    session = FakeSession(site)
    store = DocumentStore()
    client = EmbeddingClient(embeddings or FakeEmbeddings(), timeout=5.0)
    crawler = DynamicCrawler(session, store, client, config, chunker=ParagraphChunker())
    return crawler, session, store


def reveal(*paragraphs, title="Shop"):
    """Click handler replacing the page content in place."""

    def on_click(page):
        page.show(page.url, page_html(title, *paragraphs))

    return on_click


@pytest.mark.unit
class TestSelectFollowableLinks:
    """Test link filtering and normalization."""

    def test_same_domain_only(self):
        hrefs = ["/docs", "https://shop.example.com/cart", "https://other.example.com/", "mailto:a@b.c"]

        links = select_followable_links(ROOT, hrefs, visited=set())

        assert links == ["https://shop.example.com/docs", "https://shop.example.com/cart"]

    def test_skips_fragments_scripts_and_empty(self):
        hrefs = ["#top", "javascript:void(0)", "", None, "  ", "/ok"]

        assert select_followable_links(ROOT, hrefs, visited=set()) == ["https://shop.example.com/ok"]

    def test_skips_visited_and_duplicates(self):
        hrefs = ["/a", "/a", "/b", "/"]

        links = select_followable_links(ROOT, hrefs, visited={ROOT, "https://shop.example.com/b"})

        assert links == ["https://shop.example.com/a"]

    def test_limit(self):
        hrefs = [f"/page{i}" for i in range(10)]

        assert len(select_followable_links(ROOT, hrefs, visited=set(), limit=5)) == 5

    def test_origin_hostname_wins_over_base(self):
        """After an SPA redirect links must still match the crawl's origin host."""
        links = select_followable_links(
            "https://cdn.example.net/app/", ["/x", "https://shop.example.com/y"], set(), origin_url=ROOT
        )

        assert links == ["https://shop.example.com/y"]


@pytest.mark.unit
class TestDynamicCrawler:
    """Test crawling behavior."""

    @pytest.mark.asyncio
    async def test_static_page_depth_zero(self, rag_config):
        """A page without interactive elements yields one initial chunk set and no recursion."""
        site = FakeSite({ROOT: page_html("Shop", "Welcome to the shop.")}, links={ROOT: ["/other"]})
        crawler, session, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT, depth=0)

        assert len(store) == 1
        doc = store.documents[0]
        assert doc.url == ROOT
        assert doc.title == "Shop"
        assert doc.source == "initial"
        assert doc.chunk_index == 0
        assert "Welcome to the shop." in doc.content
        assert site.navigations == [ROOT]
        assert session.opened == session.closed == 1
        assert stats.pages_crawled == 1
        assert stats.documents_added == 1

    @pytest.mark.asyncio
    async def test_untitled_page_uses_url_as_title(self, rag_config):
        site = FakeSite({ROOT: "<html><body><p>No title</p></body></html>"})
        crawler, _, store = make_crawler(site, rag_config)

        await crawler.crawl_site(ROOT)

        assert store.documents[0].title == ROOT

    @pytest.mark.asyncio
    async def test_tab_click_reveals_content(self, rag_config):
        tab = FakeElement("Specs", tag="DIV", on_click=reveal("Overview", "Specs: 4 cores, 16GB"))
        site = FakeSite({ROOT: page_html("Shop", "Overview")}, elements={ROOT: {"[role='tab']": [tab]}})
        crawler, _, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT)

        assert [doc.source for doc in store.documents] == ["initial", interaction_source("tabs", "Specs")]
        assert "4 cores" in store.documents[1].content
        assert stats.interactions_attempted == 1
        assert stats.interactions_yielding == 1
        assert tab.clicks == 1

    @pytest.mark.asyncio
    async def test_unchanged_interaction_not_stored(self, rag_config):
        button = FakeElement("Noop")
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": [button]}})
        crawler, _, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT)

        assert [doc.source for doc in store.documents] == ["initial"]
        assert stats.interactions_unchanged == 1
        assert stats.interactions_yielding == 0

    @pytest.mark.asyncio
    async def test_noop_interactions_consume_budget(self, rag_config):
        """Unchanged clicks count against max_interactions by default."""
        noops = [FakeElement(f"Noop {i}") for i in range(4)]
        useful = FakeElement("More", on_click=reveal("Static", "Hidden details"))
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": noops + [useful]}})
        config = dataclasses.replace(rag_config, max_interactions=2)
        crawler, _, store = make_crawler(site, config)

        stats = await crawler.crawl_site(ROOT)

        assert stats.interactions_attempted == 2
        assert useful.clicks == 0
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_only_yielding_interactions_consume_budget_when_configured(self, rag_config):
        noops = [FakeElement(f"Noop {i}") for i in range(4)]
        useful = FakeElement("More", on_click=reveal("Static", "Hidden details"))
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": noops + [useful]}})
        config = dataclasses.replace(rag_config, max_interactions=2, count_noop_interactions=False)
        crawler, _, store = make_crawler(site, config)

        stats = await crawler.crawl_site(ROOT)

        assert stats.interactions_attempted == 5
        assert useful.clicks == 1
        assert store.documents[-1].source == interaction_source("buttons", "More")

    @pytest.mark.asyncio
    async def test_failed_click_does_not_stop_loop(self, rag_config):
        broken = FakeElement("Broken", fail=True)
        good = FakeElement("Show", on_click=reveal("Static", "Shown after click"))
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": [broken, good]}})
        crawler, _, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT)

        assert stats.interactions_failed == 1
        assert stats.interactions_yielding == 1
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_max_interactions_zero(self, rag_config):
        button = FakeElement("More", on_click=reveal("Static", "Hidden"))
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": [button]}})
        crawler, _, store = make_crawler(site, dataclasses.replace(rag_config, max_interactions=0))

        await crawler.crawl_site(ROOT)

        assert button.clicks == 0
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_spa_navigation_recorded_and_reverted(self, rag_config):
        """A click that changes the route stores the new view, then returns to the original page."""
        pricing = "https://shop.example.com/pricing"
        about = "https://shop.example.com/about"

        def go_pricing(page):
            page.show(pricing, page_html("Pricing", "Plans start at $5"))

        link = FakeElement("Pricing", on_click=go_pricing)
        site = FakeSite(
            {ROOT: page_html("Shop", "Home"), about: page_html("About", "Our story")},
            links={ROOT: ["/pricing", "/about"]},
            elements={ROOT: {"button": [link]}},
        )
        crawler, _, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT, depth=1)

        assert stats.spa_navigations == 1
        assert [(doc.url, doc.source) for doc in store.documents] == [
            (ROOT, "initial"),
            (pricing, interaction_source("buttons", "Pricing")),
            (about, "initial"),
        ]
        # The SPA route counts as visited, so only /about is loaded by navigation
        assert site.navigations == [ROOT, about]

    @pytest.mark.asyncio
    async def test_follows_same_domain_links(self, rag_config):
        docs_url = "https://shop.example.com/docs"
        site = FakeSite(
            {ROOT: page_html("Shop", "Home"), docs_url: page_html("Docs", "Read me")},
            links={ROOT: ["/docs", "https://elsewhere.example.org/"]},
        )
        crawler, session, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT, depth=1)

        assert site.navigations == [ROOT, docs_url]
        assert [doc.title for doc in store.documents] == ["Shop", "Docs"]
        assert stats.pages_crawled == 2
        assert session.opened == session.closed == 2

    @pytest.mark.asyncio
    async def test_cyclic_links_terminate(self, rag_config):
        """Each URL is crawled at most once per crawl tree."""
        a = "https://shop.example.com/a"
        b = "https://shop.example.com/b"
        site = FakeSite(
            {ROOT: page_html("Root", "r"), a: page_html("A", "a page"), b: page_html("B", "b page")},
            links={ROOT: ["/a", "/b"], a: ["/", "/b"], b: ["/a", "/"]},
        )
        crawler, _, _ = make_crawler(site, rag_config)

        await crawler.crawl_site(ROOT, depth=5)

        assert sorted(site.navigations) == sorted([ROOT, a, b])

    @pytest.mark.asyncio
    async def test_failed_page_is_isolated(self, rag_config):
        """A page that fails to load is counted and its siblings still crawled; every context closes."""
        broken = "https://shop.example.com/broken"
        ok = "https://shop.example.com/ok"
        site = FakeSite(
            {ROOT: page_html("Shop", "Home"), ok: page_html("OK", "Fine")},
            links={ROOT: ["/broken", "/ok"]},
            failing={broken},
        )
        crawler, session, store = make_crawler(site, rag_config)

        stats = await crawler.crawl_site(ROOT, depth=1)

        assert stats.pages_failed == 1
        assert [doc.url for doc in store.documents] == [ROOT, ok]
        assert session.opened == session.closed == 3

    @pytest.mark.asyncio
    async def test_slow_network_still_captured(self, rag_config):
        site = FakeSite({ROOT: page_html("Shop", "Partially loaded")}, idle=False)
        crawler, _, store = make_crawler(site, rag_config)

        await crawler.crawl_site(ROOT)

        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_skips_chunk(self, rag_config):
        docs_url = "https://shop.example.com/docs"
        site = FakeSite(
            {ROOT: page_html("Shop", "Home"), docs_url: page_html("Docs", "Secret text")},
            links={ROOT: ["/docs"]},
        )
        crawler, _, store = make_crawler(site, rag_config, embeddings=FakeEmbeddings(fail_on=["Secret"]))

        stats = await crawler.crawl_site(ROOT, depth=1)

        assert [doc.url for doc in store.documents] == [ROOT]
        assert stats.embedding_failures == 1
        assert stats.pages_failed == 0

    @pytest.mark.asyncio
    async def test_crawl_timeout_keeps_partial_results(self, rag_config):
        """When the time budget runs out the crawl stops, stored content stays and contexts close."""
        slow = "https://shop.example.com/slow"
        site = FakeSite(
            {ROOT: page_html("Shop", "Home"), slow: page_html("Slow", "Never seen")},
            links={ROOT: ["/slow"]},
            slow={slow},
        )
        crawler, session, store = make_crawler(site, dataclasses.replace(rag_config, crawl_timeout_seconds=0.5))

        await crawler.crawl_site(ROOT, depth=1)

        assert [doc.url for doc in store.documents] == [ROOT]
        assert session.opened == session.closed == 2

    @pytest.mark.asyncio
    async def test_interactive_elements_recorded_per_url(self, rag_config):
        button = FakeElement("Noop")
        site = FakeSite({ROOT: page_html("Shop", "Static")}, elements={ROOT: {"button": [button]}})
        crawler, _, _ = make_crawler(site, rag_config)

        await crawler.crawl_site(ROOT)

        assert [e.text for e in crawler.interactive_elements[ROOT]] == ["Noop"]
