"""A scripted tracker site served through respx."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator
from urllib.parse import parse_qs

import httpx
import pytest
import respx

HOST = "example.org"

LOGIN_PAGE = """\
<html><body>
<form id="login" method="post" action="/login.php">
  <input type="text" name="username" value="">
  <input type="password" name="llamas_password" value="">
  <input type="hidden" name="keeplogged" value="1">
  <input type="checkbox" name="remember">
  <input type="submit" name="login" value="Log in">
</form>
</body></html>
"""

LOGIN_ERROR_PAGE = """\
<html><body>
<div class="loginerror">
  <a href="/recover.php">Login failed</a>
</div>
</body></html>
"""

PROFILE_PAGE = """\
<html><body>
<h1>Welcome back, llama</h1>
<span class="ratio">1.234</span>
</body></html>
"""

SEARCH_PAGE = """\
<html><body>
<table class="results">
  <thead><tr><th>Cat</th><th>Name</th><th>DL</th><th>Size</th><th>S</th><th>L</th></tr></thead>
  <tbody>
    <tr>
      <td><a href="torrents.php?cat=1">Anime</a></td>
      <td><a class="title" href="torrents.php?id=100001">Llama Anime</a></td>
      <td><a href="/download/llama_anime/llama_anime.torrent">DL</a></td>
      <td>1.5 GiB</td>
      <td>3</td>
      <td>4</td>
    </tr>
    <tr>
      <td><a href="torrents.php?cat=2">Audio</a></td>
      <td><a class="title" href="torrents.php?id=309960">Llama Llama</a></td>
      <td><a href="/download/mma_llama_309960/mma_llama_309960_archive.torrent">DL</a></td>
      <td>230 MB</td>
      <td>12</td>
      <td>100</td>
    </tr>
  </tbody>
</table>
</body></html>
"""

EMPTY_SEARCH_PAGE = """\
<html><body>
<table class="results"><tbody></tbody></table>
</body></html>
"""

MULTIROW_SEARCH_PAGE = """\
<html><body>
<table class="results">
  <tbody>
    <tr class="dateheader"><td colspan="4">Added on Sunday, Aug 21, 2016</td></tr>
    <tr>
      <td><a href="browse.php?cat=2">Audio</a></td>
      <td><a href="details.php?id=1">Llama llama 1</a></td>
    </tr>
    <tr>
      <td><a href="/dl/1.torrent">DL</a></td>
      <td>700 MB</td>
    </tr>
    <tr class="dateheader"><td colspan="4">Added on Saturday, Aug 20, 2016</td></tr>
    <tr>
      <td><a href="browse.php?cat=2">Audio</a></td>
      <td><a href="details.php?id=2">Llama llama 2</a></td>
    </tr>
    <tr>
      <td><a href="/dl/2.torrent">DL</a></td>
      <td>1 GB</td>
    </tr>
    <tr>
      <td><a href="browse.php?cat=1">TV</a></td>
      <td><a href="details.php?id=3">Not a llama</a></td>
    </tr>
    <tr>
      <td><a href="/dl/3.torrent">DL</a></td>
      <td>2 GB</td>
    </tr>
  </tbody>
</table>
</body></html>
"""

TORRENT_BYTES = b"d8:announce27:http://example.org/announcee"

EMPTY_RESULTS_QUERY = "nothingshouldmatchtheseresults"


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode("utf-8"), keep_blank_values=True)


@dataclass
class Tracker:
    """Session state plus every request the site received."""

    password: str = "mypassword"
    logged_in: bool = False
    login_posts: list[dict[str, list[str]]] = field(default_factory=list)
    searches: list[httpx.Request] = field(default_factory=list)

    def home(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html="<html><body>home</body></html>")

    def profile(self, request: httpx.Request) -> httpx.Response:
        if self.logged_in:
            return httpx.Response(200, html=PROFILE_PAGE)
        return httpx.Response(302, headers={"Location": "/login.php"})

    def login_page(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html=LOGIN_PAGE)

    def login_post(self, request: httpx.Request) -> httpx.Response:
        form = _form(request)
        self.login_posts.append(form)
        if form.get("llamas_password") == [self.password] or form.get(
            "password"
        ) == [self.password]:
            self.logged_in = True
            return httpx.Response(200, html="<html><body>Welcome</body></html>")
        return httpx.Response(200, html=LOGIN_ERROR_PAGE)

    def search(self, request: httpx.Request) -> httpx.Response:
        self.searches.append(request)
        if not self.logged_in:
            return httpx.Response(302, headers={"Location": "/login.php"})
        if request.url.params.get("searchstr") == EMPTY_RESULTS_QUERY:
            return httpx.Response(200, html=EMPTY_SEARCH_PAGE)
        return httpx.Response(200, html=SEARCH_PAGE)

    def download(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=TORRENT_BYTES,
            headers={"Content-Type": "application/x-bittorrent"},
        )

    def mount(self, router: respx.MockRouter) -> None:
        router.get(host=HOST, path="/").mock(side_effect=self.home)
        router.get(host=HOST, path="/profile.php").mock(side_effect=self.profile)
        router.get(host=HOST, path="/login.php").mock(side_effect=self.login_page)
        router.post(host=HOST, path="/login.php").mock(side_effect=self.login_post)
        router.get(host=HOST, path="/torrents.php").mock(side_effect=self.search)
        router.get(host=HOST, path__startswith="/download/").mock(
            side_effect=self.download
        )


@dataclass
class MultiRowTracker(Tracker):
    """Variant that bounces anonymous visitors with a ``Refresh`` header."""

    def profile(self, request: httpx.Request) -> httpx.Response:
        if self.logged_in:
            return httpx.Response(200, html=PROFILE_PAGE)
        return httpx.Response(
            200,
            html="<html><body>Redirecting</body></html>",
            headers={"Refresh": "1; /login.php"},
        )

    def search(self, request: httpx.Request) -> httpx.Response:
        self.searches.append(request)
        return httpx.Response(200, html=MULTIROW_SEARCH_PAGE)

    def mount(self, router: respx.MockRouter) -> None:
        router.get(host=HOST, path="/").mock(side_effect=self.home)
        router.get(host=HOST, path="/profile.php").mock(side_effect=self.profile)
        router.get(host=HOST, path="/login.php").mock(side_effect=self.login_page)
        router.post(host=HOST, path="/login.php").mock(side_effect=self.login_post)
        router.get(host=HOST, path="/search.php").mock(side_effect=self.search)


@pytest.fixture()
def tracker() -> Iterator[Tracker]:
    site = Tracker()
    with respx.mock(assert_all_called=False) as router:
        site.mount(router)
        yield site


@pytest.fixture()
def multirow_tracker() -> Iterator[MultiRowTracker]:
    site = MultiRowTracker()
    with respx.mock(assert_all_called=False) as router:
        site.mount(router)
        yield site
