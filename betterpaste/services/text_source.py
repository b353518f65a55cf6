"""Sources of page text for the scanner.

Every source exposes ``async snapshot() -> str`` returning the full visible
text at that moment.  The scanner never keeps a snapshot past one tick.
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)

TIMEOUT_MS = 30_000  # 30 s in milliseconds

# Tags that never contribute visible text
_INVISIBLE_TAGS = ["script", "style", "noscript", "template", "svg", "canvas", "head"]


class TextSource(Protocol):
    async def snapshot(self) -> str: ...


class StaticTextSource:
    """Fixed text; handy for one-off scans and tests."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    async def snapshot(self) -> str:
        return self.text


def visible_text(html: str) -> str:
    """Approximate ``innerText`` for *html*: drop invisible subtrees, keep line breaks."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(_INVISIBLE_TAGS):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    root = soup.find("body") or soup
    return root.get_text()


class HtmlFileTextSource:
    """Visible text of a saved chat transcript, re-read on every snapshot."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    async def snapshot(self) -> str:
        html = self.path.read_text(encoding="utf-8", errors="replace")
        return visible_text(html)


class BrowserTextSource:
    """Live ``document.body.innerText`` of a page held open in Chromium.

    The browser is started lazily on the first snapshot and kept open until
    :meth:`close`, so the chat page keeps its state between ticks.
    """

    def __init__(self, url: str, *, headless: bool = False) -> None:
        self.url = url
        self.headless = headless
        self._pw = None
        self._browser = None
        self._page = None

    async def _ensure_page(self):
        if self._page is not None:
            return self._page
        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(
            headless=self.headless,
            args=["--disable-dev-shm-usage"],
        )
        context = await self._browser.new_context()
        self._page = await context.new_page()
        logger.info("Opening %s for scanning", self.url)
        await self._page.goto(self.url, wait_until="domcontentloaded", timeout=TIMEOUT_MS)
        return self._page

    async def snapshot(self) -> str:
        page = await self._ensure_page()
        return await page.evaluate("() => document.body ? document.body.innerText : ''")

    async def close(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._pw is not None:
                await self._pw.stop()
            self._pw = self._browser = self._page = None


def build_text_source(
    watch_url: Optional[str] = None,
    watch_html_file: Optional[str] = None,
) -> Optional[TextSource]:
    """Pick the configured source; a live URL wins over a saved file."""
    if watch_url:
        return BrowserTextSource(watch_url)
    if watch_html_file:
        return HtmlFileTextSource(watch_html_file)
    return None
