"""Discovery of clickable and expandable controls on a rendered page."""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Category -> Playwright selectors; iteration order is discovery order
DEFAULT_INTERACTIVE_SELECTORS: dict[str, list[str]] = {
    "buttons": [
        "button:visible",
        'input[type="button"]:visible',
        'input[type="submit"]:visible',
        'a[role="button"]:visible',
        ".btn:visible",
        ".button:visible",
        '[class*="btn-"]:visible',
    ],
    "expandables": [
        '[aria-expanded="false"]:visible',
        ".expand:visible",
        ".collapse:visible",
        "details > summary:visible",
    ],
    "tabs": [
        '[role="tab"]:visible',
        ".tab:visible",
        '[data-toggle="tab"]:visible',
    ],
    "accordions": [
        ".accordion-button:visible",
        ".accordion-header:visible",
        '[data-toggle="collapse"]:visible',
    ],
    "forms": [
        'select:visible',
        '[role="combobox"]:visible',
    ],
    "modals": [
        '[data-toggle="modal"]:visible',
        '[aria-haspopup="dialog"]:visible',
    ],
    "tree_nodes": [
        '[role="treeitem"]:visible',
        ".tree-node:visible",
    ],
}


@dataclass
class InteractiveElement:
    """A visible control found on a page. Only valid while that page is open."""

    handle: Any
    text: str
    category: str
    tag_name: str
    selector: str


async def explore_interactive_elements(
    page, selectors: dict[str, list[str]] | None = None
) -> list[InteractiveElement]:
    """Collect visible, non-zero-size elements matching the configured selectors.

    A selector that fails (invalid syntax, detached node, ...) is logged and
    skipped; results from the other selectors are still returned.

    Args:
        page: PageDriver for the rendered page
        selectors: Category -> selector list (defaults to DEFAULT_INTERACTIVE_SELECTORS)

    Returns:
        Elements in category order, then selector order, then DOM order
    """
    selectors = selectors or DEFAULT_INTERACTIVE_SELECTORS
    elements: list[InteractiveElement] = []

    for category, category_selectors in selectors.items():
        for selector in category_selectors:
            try:
                handles = await page.query_all(selector)
                for handle in handles:
                    text = await page.element_text(handle)
                    tag_name = await page.element_tag(handle)
                    box = await page.element_box(handle)

                    if box and box.get("width", 0) > 0 and box.get("height", 0) > 0:
                        elements.append(
                            InteractiveElement(
                                handle=handle,
                                text=text.strip(),
                                category=category,
                                tag_name=tag_name,
                                selector=selector,
                            )
                        )
            except Exception as e:
                logger.warning(f'[EXPLORER] Error finding elements with selector "{selector}": {e}')

    logger.debug(f"[EXPLORER] Found {len(elements)} interactive elements")
    return elements
