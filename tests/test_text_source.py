"""Tests for betterpaste.services.text_source (no browser is launched)."""

import asyncio

from betterpaste.services.block_extractor import extract_blocks
from betterpaste.services.text_source import (
    BrowserTextSource,
    HtmlFileTextSource,
    StaticTextSource,
    build_text_source,
    visible_text,
)

_TRANSCRIPT_HTML = """
<!DOCTYPE html>
<html>
<head>
  <title>Chat</title>
  <style>.msg { color: red; }</style>
</head>
<body>
  <div class="msg">Sure, here is the change:</div>
  <pre>[&lt;({START})&gt;] src/app.py
[&lt;({SEARCH})&gt;] def f():
    return 1
[&lt;({REPLACEWITH})&gt;] def f():
    return 2
[&lt;({END})&gt;]</pre>
  <script>var stale = "[<({START})>] ghost.py [<({SEARCH})>] a [<({REPLACEWITH})>] b [<({END})>]";</script>
</body>
</html>
"""


class TestVisibleText:
    def test_drops_script_and_style(self):
        text = visible_text(_TRANSCRIPT_HTML)
        assert "ghost.py" not in text
        assert "color: red" not in text
        assert "Sure, here is the change:" in text

    def test_keeps_preformatted_line_breaks(self):
        blocks = list(extract_blocks(visible_text(_TRANSCRIPT_HTML)))
        assert len(blocks) == 1
        assert blocks[0].file_path == "src/app.py"
        assert blocks[0].search_content == "def f():\n    return 1"

    def test_br_becomes_newline(self):
        assert visible_text("<p>one<br>two</p>") == "one\ntwo"

    def test_entities_decoded(self):
        text = visible_text("<p>[&lt;({START})&gt;]</p>")
        assert "[<({START})>]" in text


class TestSources:
    def test_static_source(self):
        assert asyncio.run(StaticTextSource("hello").snapshot()) == "hello"

    def test_html_file_source_rereads_file(self, tmp_path):
        path = tmp_path / "chat.html"
        path.write_text("<p>first</p>", encoding="utf-8")
        source = HtmlFileTextSource(path)
        assert "first" in asyncio.run(source.snapshot())
        path.write_text("<p>second</p>", encoding="utf-8")
        assert "second" in asyncio.run(source.snapshot())


class TestBuildTextSource:
    def test_nothing_configured(self):
        assert build_text_source() is None

    def test_html_file(self):
        source = build_text_source(watch_html_file="chat.html")
        assert isinstance(source, HtmlFileTextSource)

    def test_url_wins_over_file(self):
        source = build_text_source(watch_url="https://claude.ai/chat/1", watch_html_file="chat.html")
        assert isinstance(source, BrowserTextSource)
        assert source.url == "https://claude.ai/chat/1"
