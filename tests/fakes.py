"""Test doubles for the embedding service and the browser."""

import asyncio
import re
import zlib
from contextlib import asynccontextmanager

from langchain_core.embeddings import Embeddings

EMBEDDING_DIM = 64


class FakeEmbeddings(Embeddings):
    """Deterministic bag-of-words embeddings.

    Texts sharing words get similar vectors. Any text containing one of the
    ``fail_on`` markers raises, like an unavailable embedding service.
    """

    def __init__(self, fail_on=()):
        self.fail_on = tuple(fail_on)
        self.calls = []

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise RuntimeError("embedding service unavailable")

        vector = [0.0] * EMBEDDING_DIM
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode("utf-8")) % EMBEDDING_DIM] += 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(text) for text in texts]


class ParagraphChunker:
    """Chunker double: one chunk per non-blank text, no tokenizer needed."""

    def chunk(self, text: str, max_tokens: int = 1000) -> list[str]:
        return [text] if text.strip() else []


def page_html(title: str, *paragraphs: str) -> str:
    body = "".join(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


class FakeElement:
    """Clickable element; ``on_click(page)`` mutates the fake page."""

    def __init__(self, text, on_click=None, tag="BUTTON", box=None, fail=False):
        self.text = text
        self.on_click = on_click
        self.tag = tag
        self.box = box if box is not None else {"x": 0, "y": 0, "width": 80, "height": 24}
        self.fail = fail
        self.clicks = 0


class FakeSite:
    """In-memory website served to FakePage instances.

    Args:
        pages: url -> html
        links: url -> raw hrefs found on that page
        elements: url -> {selector: [FakeElement, ...]}
        failing: urls whose navigation raises
        slow: urls whose navigation never finishes in test time
        broken_selectors: selectors whose lookup raises
    """

    def __init__(self, pages, links=None, elements=None, failing=(), slow=(), broken_selectors=(), idle=True):
        self.pages = dict(pages)
        self.links = links or {}
        self.elements = elements or {}
        self.failing = set(failing)
        self.slow = set(slow)
        self.broken_selectors = set(broken_selectors)
        self.idle = idle
        self.navigations = []


class FakePage:
    """PageDriver double backed by a FakeSite."""

    def __init__(self, site: FakeSite):
        self.site = site
        self.url = "about:blank"
        self.html = "<html></html>"
        self.history = []
        self.pauses = []
        self.went_back = 0

    def show(self, url, html=None):
        """Client-side route change or DOM update."""
        if url != self.url:
            self.history.append((self.url, self.html))
        self.url = url
        self.html = html if html is not None else self.site.pages[url]

    async def navigate(self, url):
        self.site.navigations.append(url)
        if url in self.site.slow:
            await asyncio.sleep(30)
        if url in self.site.failing:
            raise RuntimeError(f"net::ERR_CONNECTION_REFUSED at {url}")
        self.show(url)

    async def wait_for_quiescence(self, timeout_ms):
        return self.site.idle

    async def pause(self, ms):
        self.pauses.append(ms)

    async def snapshot_html(self):
        return self.html

    async def query_all(self, selector):
        if selector in self.site.broken_selectors:
            raise ValueError(f"Unexpected token in selector {selector}")
        return list(self.site.elements.get(self.url, {}).get(selector, []))

    async def element_text(self, handle):
        return handle.text

    async def element_tag(self, handle):
        return handle.tag

    async def element_box(self, handle):
        return handle.box

    async def scroll_into_view(self, handle):
        pass

    async def click(self, handle):
        handle.clicks += 1
        if handle.fail:
            raise RuntimeError("Element is not attached to the DOM")
        if handle.on_click is not None:
            handle.on_click(self)

    def current_url(self):
        return self.url

    async def go_back(self):
        self.went_back += 1
        self.url, self.html = self.history.pop()

    async def enumerate_links(self):
        return list(self.site.links.get(self.url, []))


class FakeSession:
    """BrowserSession double counting opened and closed contexts."""

    def __init__(self, site: FakeSite):
        self.site = site
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def open_page(self):
        self.opened += 1
        try:
            yield FakePage(self.site)
        finally:
            self.closed += 1
