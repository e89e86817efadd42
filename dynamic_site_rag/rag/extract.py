"""Convert rendered HTML into heading/bullet structured plain text."""

import re

from bs4 import BeautifulSoup

# Elements removed before any text is read
NOISE_TAGS = ["script", "style", "iframe", "noscript"]

# Content elements walked in document order
CONTENT_SELECTOR = "h1, h2, h3, h4, h5, h6, p, li, .content, article, [role='main']"

_HEADING_RE = re.compile(r"^h([1-6])$")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def html_to_structured_text(html: str) -> str:
    """Render HTML as markdown-like text for LLM consumption.

    The page title becomes a level-1 heading, headings keep their level,
    list items become ``*`` bullets and other content elements become plain
    paragraphs. Layout, images and non-semantic containers are dropped.
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(NOISE_TAGS):
        element.decompose()

    parts: list[str] = []

    if soup.title:
        title = soup.title.get_text(strip=True)
        if title:
            parts.append(f"# {title}\n\n")

    for element in soup.select(CONTENT_SELECTOR):
        text = element.get_text(" ", strip=True)
        if not text:
            continue

        tag_name = element.name.lower()
        heading = _HEADING_RE.match(tag_name)
        if heading:
            parts.append(f"{'#' * int(heading.group(1))} {text}\n\n")
        elif tag_name == "li":
            parts.append(f"* {text}\n")
        else:
            parts.append(f"{text}\n\n")

    return _EXCESS_NEWLINES_RE.sub("\n\n", "".join(parts)).strip()


def extract_title(html: str) -> str | None:
    """Trimmed ``<title>`` text, or None if the page has none."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title:
        title = soup.title.get_text(strip=True)
        if title:
            return title
    return None
