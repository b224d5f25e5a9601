"""Stateful HTTP session on top of httpx, shaped like a tiny browser.

One ``HttpxBrowser`` holds one cookie jar and one "current page". It is
not safe for concurrent use; every Runner owns its own instance.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional
from urllib.parse import urljoin, urlsplit

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from indexarr.domain.indexers import BrowserError
from indexarr.domain.ports import FormValues
from indexarr.infrastructure.config import AppConfig

log = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

_REFRESH_SPLIT_RE = re.compile(r"\s*;\s*")
_REFRESH_URL_RE = re.compile(r"(?i)^url\s*=\s*")

_SKIPPED_INPUT_TYPES = frozenset({"submit", "button", "image", "reset", "file"})
_META_REFRESH_RE = re.compile(r"(?i)^refresh$")


def _refresh_target(value: str) -> Optional[str]:
    """``"0; url=/x"`` -> ``"/x"``; ``None`` when there is no target."""
    parts = _REFRESH_SPLIT_RE.split(value.strip(), maxsplit=1)
    if len(parts) != 2:
        return None
    target = _REFRESH_URL_RE.sub("", parts[1]).strip("'\" ")
    return target or None


def _as_multidict(values: FormValues) -> dict[str, list[str]]:
    # httpx encodes list values as repeated keys
    out: dict[str, list[str]] = {}
    for key, value in values:
        out.setdefault(key, []).append(value)
    return out


def _collect_form_values(form: Tag) -> list[tuple[str, str]]:
    values: list[tuple[str, str]] = []
    for el in form.find_all(["input", "textarea", "select"]):
        name = el.get("name")
        if not name:
            continue
        if el.name == "input":
            kind = (el.get("type") or "text").lower()
            if kind in _SKIPPED_INPUT_TYPES:
                continue
            if kind in ("checkbox", "radio"):
                if not el.has_attr("checked"):
                    continue
                values.append((name, el.get("value", "on")))
                continue
            values.append((name, el.get("value", "")))
        elif el.name == "textarea":
            values.append((name, el.get_text()))
        else:
            option = el.find("option", selected=True) or el.find("option")
            if option is not None:
                values.append((name, option.get("value", option.get_text().strip())))
    return values


class HtmlForm:
    """A form of the current page; inputs are filled in place, then submitted."""

    def __init__(self, browser: "HttpxBrowser", form: Tag, page_url: str):
        self._browser = browser
        self.method = (form.get("method") or "get").lower()
        self.action = urljoin(page_url, form.get("action") or "")
        self._values = _collect_form_values(form)

    @property
    def values(self) -> list[tuple[str, str]]:
        return list(self._values)

    def input(self, name: str, value: str) -> None:
        """Set the value of an existing field.

        Raises:
            BrowserError: the form has no field called ``name``.
        """
        found = False
        updated: list[tuple[str, str]] = []
        for key, old in self._values:
            if key == name:
                if not found:
                    updated.append((key, value))
                found = True
            else:
                updated.append((key, old))
        if not found:
            raise BrowserError(f"Form has no input named {name!r}")
        self._values = updated

    async def submit(self) -> None:
        if self.method == "post":
            await self._browser.post_form(self.action, self._values)
        else:
            await self._browser.open_form(self.action, self._values)


class HttpxBrowser:
    """``BrowserPort`` implementation backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=follow_redirects,
            headers={"User-Agent": user_agent},
            transport=transport,
        )
        self._response: httpx.Response | None = None
        self._dom: BeautifulSoup | None = None

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "HttpxBrowser":
        return cls(
            timeout=config.http_timeout_seconds,
            user_agent=config.http_user_agent,
            follow_redirects=config.http_follow_redirects,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Current page
    # ------------------------------------------------------------------

    @property
    def url(self) -> str | None:
        if self._response is None:
            return None
        return str(self._response.url)

    @property
    def status_code(self) -> int:
        return self._response.status_code if self._response is not None else 0

    @property
    def response_headers(self) -> Mapping[str, str]:
        if self._response is None:
            return httpx.Headers()
        return self._response.headers

    @property
    def body(self) -> str:
        return self._response.text if self._response is not None else ""

    @property
    def dom(self) -> BeautifulSoup:
        if self._dom is None:
            self._dom = BeautifulSoup(self.body, "lxml")
        return self._dom

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def open(self, url: str) -> None:
        await self._request("GET", url)

    async def open_form(self, url: str, values: FormValues) -> None:
        await self._request("GET", url, params=list(values))

    async def post_form(self, url: str, values: FormValues) -> None:
        await self._request("POST", url, data=_as_multidict(values))

    def form(self, selector: str) -> HtmlForm:
        """Locate a form in the current page.

        Raises:
            BrowserError: no page is loaded or nothing matches ``selector``.
        """
        if self._response is None:
            raise BrowserError("No page loaded")
        el = self.dom.select_one(selector)
        if el is None or el.name != "form":
            raise BrowserError(f"No form found for selector {selector!r}")
        return HtmlForm(self, el, self.url or "")

    async def download(self) -> bytes:
        if self._response is None:
            raise BrowserError("No page loaded")
        return self._response.content

    def set_cookies(self, url: str, cookie_header: str) -> None:
        """Install ``"a=1; b=2"`` style cookies for the host of ``url``."""
        domain = urlsplit(url).hostname or ""
        for pair in cookie_header.split(";"):
            name, sep, value = pair.strip().partition("=")
            if not sep or not name:
                continue
            self._client.cookies.set(name, value, domain=domain)
        log.debug("browser_cookies_set", domain=domain, count=len(self._client.cookies))

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(
        self, method: str, url: str, *, follow_refresh: bool = True, **kwargs: Any
    ) -> None:
        headers = {"Referer": self.url} if self.url else None
        log.debug("browser_request", method=method, url=url)
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            log.warning(
                "browser_request_failed",
                method=method,
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise BrowserError(f"{method} {url} failed: {e}") from e

        self._response = response
        self._dom = None
        log.debug(
            "browser_response",
            method=method,
            url=str(response.url),
            status=response.status_code,
        )

        if follow_refresh:
            target = self._refresh_url()
            if target is not None:
                log.debug("browser_refresh", target=target)
                await self._request("GET", target, follow_refresh=False)

    def _refresh_url(self) -> Optional[str]:
        if self._response is None:
            return None
        header = self._response.headers.get("Refresh")
        target = _refresh_target(header) if header else None

        if target is None and "html" in self._response.headers.get("Content-Type", ""):
            meta = self.dom.find("meta", attrs={"http-equiv": _META_REFRESH_RE})
            if meta is not None:
                target = _refresh_target(meta.get("content", ""))

        if target is None:
            return None
        return urljoin(str(self._response.url), target)
