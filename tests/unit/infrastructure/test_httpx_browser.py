"""Tests for the httpx-backed browser session."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
import respx

from indexarr.domain.indexers import BrowserError
from indexarr.infrastructure.browser import HttpxBrowser
from indexarr.infrastructure.browser.httpx_browser import _refresh_target
from indexarr.infrastructure.config import AppConfig

_FORM_PAGE = """\
<html><body>
<form id="search" action="results.php" method="get">
  <input type="text" name="q" value="default">
  <input type="hidden" name="token" value="t0k">
  <input type="checkbox" name="fl" value="1" checked>
  <input type="checkbox" name="free">
  <input type="radio" name="order" value="asc">
  <input type="radio" name="order" value="desc" checked>
  <select name="cat">
    <option value="0">All</option>
    <option value="7" selected>Movies</option>
  </select>
  <textarea name="note">hi</textarea>
  <input type="submit" value="Go">
</form>
<form id="login" method="POST" action="/login.php">
  <input name="user">
</form>
</body></html>
"""


class TestRefreshTarget:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1; /login.php", "/login.php"),
            ("0; url=https://example.org/", "https://example.org/"),
            ("5;URL='/x'", "/x"),
            ("30", None),
        ],
    )
    def test_parse(self, value: str, expected: str | None) -> None:
        assert _refresh_target(value) == expected


class TestConstruction:
    def test_from_config(self) -> None:
        config = AppConfig(http_user_agent="llama/1.0", http_timeout_seconds=3)
        browser = HttpxBrowser.from_config(config)
        assert browser._client.headers["User-Agent"] == "llama/1.0"
        assert browser._client.timeout.read == 3

    def test_no_page_loaded(self) -> None:
        browser = HttpxBrowser()
        assert browser.url is None
        assert browser.status_code == 0
        assert browser.body == ""
        with pytest.raises(BrowserError, match="No page loaded"):
            browser.form("form")


class TestNavigation:
    @respx.mock
    @pytest.mark.asyncio
    async def test_open_tracks_current_page(self) -> None:
        respx.get("https://example.org/a").respond(200, html="<p class='x'>hello</p>")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/a")
            assert browser.url == "https://example.org/a"
            assert browser.status_code == 200
            assert browser.dom.select_one("p.x").get_text() == "hello"
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_referer_sent_after_first_page(self) -> None:
        respx.get("https://example.org/a").respond(200, html="<p></p>")
        second = respx.get("https://example.org/b").respond(200, html="<p></p>")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/a")
            await browser.open("https://example.org/b")
        finally:
            await browser.aclose()
        assert second.calls.last.request.headers["Referer"] == "https://example.org/a"

    @respx.mock
    @pytest.mark.asyncio
    async def test_follows_refresh_header(self) -> None:
        respx.get("https://example.org/a").respond(
            200, html="<p>wait</p>", headers={"Refresh": "1; /b"}
        )
        respx.get("https://example.org/b").respond(200, html="<p>there</p>")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/a")
            assert browser.url == "https://example.org/b"
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_follows_meta_refresh(self) -> None:
        respx.get("https://example.org/a").respond(
            200,
            html='<html><head><meta http-equiv="Refresh" content="0; url=/b"></head></html>',
        )
        respx.get("https://example.org/b").respond(200, html="<p>there</p>")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/a")
            assert browser.url == "https://example.org/b"
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_transport_error_becomes_browser_error(self) -> None:
        respx.get("https://example.org/a").mock(side_effect=httpx.ConnectTimeout("slow"))
        browser = HttpxBrowser()
        try:
            with pytest.raises(BrowserError, match="GET https://example.org/a failed"):
                await browser.open("https://example.org/a")
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_post_form_repeats_keys(self) -> None:
        route = respx.post("https://example.org/p").respond(200, html="")
        browser = HttpxBrowser()
        try:
            await browser.post_form("https://example.org/p", [("a", "1"), ("a", "2")])
        finally:
            await browser.aclose()
        assert parse_qs(route.calls.last.request.content.decode()) == {"a": ["1", "2"]}

    @respx.mock
    @pytest.mark.asyncio
    async def test_download_returns_raw_body(self) -> None:
        respx.get("https://example.org/f.torrent").respond(200, content=b"\x00\x01")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/f.torrent")
            assert await browser.download() == b"\x00\x01"
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_set_cookies(self) -> None:
        route = respx.get("https://example.org/a").respond(200, html="")
        browser = HttpxBrowser()
        try:
            browser.set_cookies("https://example.org/login", "uid=1; pass=abc")
            await browser.open("https://example.org/a")
        finally:
            await browser.aclose()
        cookie = route.calls.last.request.headers["Cookie"]
        assert "uid=1" in cookie
        assert "pass=abc" in cookie


class TestForms:
    @respx.mock
    @pytest.mark.asyncio
    async def test_form_collects_default_values(self) -> None:
        respx.get("https://example.org/dir/page").respond(200, html=_FORM_PAGE)
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/dir/page")
            form = browser.form("form#search")
        finally:
            await browser.aclose()

        assert form.method == "get"
        assert form.action == "https://example.org/dir/results.php"
        assert form.values == [
            ("q", "default"),
            ("token", "t0k"),
            ("fl", "1"),
            ("order", "desc"),
            ("cat", "7"),
            ("note", "hi"),
        ]

    @respx.mock
    @pytest.mark.asyncio
    async def test_submit_get_form(self) -> None:
        respx.get("https://example.org/dir/page").respond(200, html=_FORM_PAGE)
        results = respx.get(host="example.org", path="/dir/results.php").respond(
            200, html=""
        )
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/dir/page")
            form = browser.form("form#search")
            form.input("q", "llamas")
            await form.submit()
        finally:
            await browser.aclose()

        params = results.calls.last.request.url.params
        assert params["q"] == "llamas"
        assert params["token"] == "t0k"

    @respx.mock
    @pytest.mark.asyncio
    async def test_submit_post_form(self) -> None:
        respx.get("https://example.org/dir/page").respond(200, html=_FORM_PAGE)
        login = respx.post("https://example.org/login.php").respond(200, html="")
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/dir/page")
            form = browser.form("form#login")
            assert form.method == "post"
            form.input("user", "me")
            await form.submit()
        finally:
            await browser.aclose()

        assert login.calls.last.request.content == b"user=me"

    @respx.mock
    @pytest.mark.asyncio
    async def test_unknown_input(self) -> None:
        respx.get("https://example.org/dir/page").respond(200, html=_FORM_PAGE)
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/dir/page")
            form = browser.form("form#login")
            with pytest.raises(BrowserError, match="nope"):
                form.input("nope", "x")
        finally:
            await browser.aclose()

    @respx.mock
    @pytest.mark.asyncio
    async def test_missing_form(self) -> None:
        respx.get("https://example.org/dir/page").respond(200, html=_FORM_PAGE)
        browser = HttpxBrowser()
        try:
            await browser.open("https://example.org/dir/page")
            with pytest.raises(BrowserError, match="No form found"):
                browser.form("form#absent")
        finally:
            await browser.aclose()
