"""Executes one indexer definition against one live HTTP session.

A :class:`Runner` logs in, submits searches and scrapes result rows into
:class:`ResultItem` values, all driven by the definition document. It owns
exactly one browser session and is strictly sequential: construct one
Runner per concurrent caller.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional
from urllib.parse import parse_qsl, urljoin, urlsplit

import structlog
from bs4 import Tag

from indexarr.domain.definitions import (
    ErrorBlock,
    FieldKind,
    IndexerDefinition,
    PageTestBlock,
)
from indexarr.domain.entities import (
    CUSTOM_CATEGORY_OFFSET,
    Capabilities,
    Info,
    Query,
    ResultItem,
)
from indexarr.domain.indexers import (
    BrowserError,
    ConfigurationError,
    DownloadError,
    LoginError,
    NoWorkingUrlError,
    SearchError,
)
from indexarr.domain.ports import BrowserPort, SiteConfigPort
from indexarr.infrastructure.browser import HttpxBrowser
from indexarr.infrastructure.common import (
    parse_float,
    parse_int,
    parse_size_to_bytes,
)
from indexarr.infrastructure.scraping import (
    FilterContext,
    is_match,
    match_text,
    merge_following_rows,
    parse_fuzzy_time,
    preceding_match,
    render_template,
    text,
)
from indexarr.infrastructure.torznab.query import encode_query

log = structlog.get_logger(__name__)

BrowserFactory = Callable[[], BrowserPort]

# Identifier lookups a front-end may offer on top of the declared params.
_IDENTIFIER_PARAMS: dict[str, tuple[str, ...]] = {
    "search": ("imdbid", "tvdbid", "tvmazeid"),
    "movie-search": ("imdbid",),
    "tv-search": ("tvdbid", "tvmazeid", "rid"),
}

_URL_FIELDS = frozenset({FieldKind.DOWNLOAD, FieldKind.DETAILS, FieldKind.COMMENTS})


def query_context(query: Query) -> dict[str, Any]:
    """Template view of a query (``{{ .Query.Keywords }}`` and friends)."""
    return {
        "Type": query.type,
        "Q": query.q,
        "Season": query.season,
        "Ep": query.ep,
        "Limit": query.limit,
        "Offset": query.offset,
        "Extended": query.extended,
        "Categories": list(query.categories),
        "APIKey": query.apikey,
        "Keywords": query.keywords(),
        "Episode": query.episode(),
    }


@dataclass
class _Row:
    """Mutable scratch state for one scraped row."""

    site: str
    title: str = ""
    link: str = ""
    guid: str = ""
    description: str = ""
    comments: str = ""
    local_category: str = ""
    category: int = 0
    size: int = 0
    seeders: int = 0
    peers: int = 0
    publish_date: Optional[datetime] = None
    minimum_ratio: float = 0.0
    minimum_seed_time: float = 0.0
    files: Optional[int] = None
    grabs: Optional[int] = None
    download_volume_factor: float = 1.0
    upload_volume_factor: float = 1.0
    extracted: dict[str, str] = field(default_factory=dict)

    def to_result(self) -> ResultItem:
        return ResultItem(
            site=self.site,
            title=self.title,
            link=self.link,
            guid=self.guid,
            description=self.description,
            comments=self.comments,
            category=self.category,
            size=self.size,
            seeders=self.seeders,
            peers=self.peers,
            publish_date=self.publish_date,
            minimum_ratio=self.minimum_ratio,
            minimum_seed_time=self.minimum_seed_time,
            files=self.files,
            grabs=self.grabs,
            download_volume_factor=self.download_volume_factor,
            upload_volume_factor=self.upload_volume_factor,
        )


class Runner:
    """``IndexerPort`` implementation for one definition.

    Args:
        definition: Parsed site definition.
        config: Per-site key/value store (credentials, ``url`` override).
        browser: Session to drive; created lazily from ``browser_factory``
            when omitted.
        browser_factory: Zero-argument callable building a ``BrowserPort``.
        clock: Reference time for relative dates (defaults to now, UTC).
    """

    def __init__(
        self,
        definition: IndexerDefinition,
        config: SiteConfigPort,
        *,
        browser: BrowserPort | None = None,
        browser_factory: BrowserFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.definition = definition
        self._config = config
        self._browser = browser
        self._browser_factory = browser_factory or HttpxBrowser
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._log = log.bind(site=definition.site)

    @property
    def site(self) -> str:
        return self.definition.site

    @property
    def browser(self) -> BrowserPort:
        if self._browser is None:
            self._browser = self._browser_factory()
        return self._browser

    async def aclose(self) -> None:
        if self._browser is not None:
            await self._browser.aclose()
            self._browser = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def info(self) -> Info:
        d = self.definition
        return Info(
            id=d.site,
            title=d.name or d.site,
            description=d.description,
            link=d.links[0] if d.links else "",
            language=d.language,
        )

    def capabilities(self) -> Capabilities:
        caps = self.definition.capabilities
        modes = tuple(
            replace(
                mode,
                supported_params=mode.supported_params
                + tuple(
                    p
                    for p in _IDENTIFIER_PARAMS.get(mode.key, ())
                    if p not in mode.supported_params
                ),
            )
            for mode in caps.search_modes
        )
        return Capabilities(search_modes=modes, categories=caps.categories())

    # ------------------------------------------------------------------
    # URLs and pages
    # ------------------------------------------------------------------

    async def _url_works(self, url: str) -> bool:
        self._log.debug("url_check", url=url)
        try:
            await self.browser.open(url)
        except BrowserError as e:
            self._log.warning("url_check_failed", url=url, error=str(e))
            return False
        if self.browser.status_code != 200:
            self._log.warning(
                "url_check_bad_status", url=url, status=self.browser.status_code
            )
            return False
        return True

    async def current_url(self) -> str:
        """Base URL for resolving relative paths.

        The current page if one is loaded, else the configured ``url``
        override, else the first declared link that answers with 200.

        Raises:
            NoWorkingUrlError: nothing answered.
        """
        if self.browser.url:
            return self.browser.url

        config_url = self._config.get(self.site, "url")
        if config_url and await self._url_works(config_url):
            return config_url

        for link in self.definition.links:
            if link != config_url and await self._url_works(link):
                return link

        raise NoWorkingUrlError(f"No working urls found for {self.site}")

    async def resolve_path(self, path: str) -> str:
        if path.startswith("magnet:"):
            return path
        base = await self.current_url()
        resolved = urljoin(base, path)
        self._log.debug("url_resolved", base=base, url=resolved)
        return resolved

    async def _open_page(self, url: str) -> None:
        self._log.debug("page_open", url=url)
        await self.browser.open(url)
        self._log.debug(
            "page_opened", status=self.browser.status_code, url=self.browser.url
        )

    async def _post_to_page(self, url: str, values: Iterable[tuple[str, str]]) -> None:
        values = list(values)
        self._log.debug("page_post", url=url, fields=[k for k, _ in values])
        await self.browser.post_form(url, values)
        self._log.debug(
            "page_posted", status=self.browser.status_code, url=self.browser.url
        )

    def _filter_context(self) -> FilterContext:
        return FilterContext(now=self._clock(), logger=self._log)

    def _render(self, name: str, source: str, ctx: Mapping[str, Any]) -> str:
        result = render_template(source, ctx)
        if "{{" in source:
            self._log.debug("template_processed", template=name, src=source, result=result)
        return result

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def _check_has_config(self) -> None:
        for setting in self.definition.settings:
            if self._config.get(self.site, setting.name) is None:
                raise ConfigurationError(
                    f"No value for {self.site}.{setting.name} in config"
                )

    def _login_inputs(self) -> dict[str, str]:
        ctx = {"Config": self._config.section(self.site)}
        return {
            name: self._render("login_inputs", tpl, ctx)
            for name, tpl in self.definition.login.inputs.items()
        }

    async def _match_page_test(self, test: PageTestBlock) -> bool:
        if test.is_empty():
            return True

        if self.browser.url is None and not test.path:
            await self.current_url()

        if test.path:
            test_url = await self.resolve_path(test.path)
            try:
                await self._open_page(test_url)
            except BrowserError as e:
                self._log.warning("page_test_open_failed", url=test_url, error=str(e))
                return False
            if test_url != self.browser.url:
                self._log.debug(
                    "page_test_redirected", wanted=test_url, got=self.browser.url
                )
                return False

        if test.selector and self.browser.dom.select_one(test.selector) is None:
            self._log.debug("page_test_selector_missing", selector=test.selector)
            return False

        return True

    async def _is_login_required(self) -> bool:
        login = self.definition.login
        if login.is_empty():
            return False
        if login.test.is_empty():
            return True
        if await self._match_page_test(login.test):
            self._log.debug("login_not_needed")
            return False
        return True

    def _error_matches(self, block: ErrorBlock) -> bool:
        if not block.path and not block.selector:
            return False
        if block.path and urlsplit(self.browser.url or "").path != block.path:
            return False
        if block.selector and self.browser.dom.select_one(block.selector) is None:
            return False
        return True

    def _error_text(self, block: ErrorBlock) -> str:
        dom = self.browser.dom
        if block.message.selector or block.message.text:
            return match_text(block.message, dom, self._filter_context())
        found = dom.select_one(block.selector) if block.selector else None
        return found.get_text() if found is not None else ""

    def _raise_on_login_error(self) -> None:
        for block in self.definition.login.errors:
            if self._error_matches(block):
                message = " ".join(self._error_text(block).split())
                raise LoginError(message or "Login failed")

    async def login(self) -> None:
        """Authenticate the session as described by the login block.

        Raises:
            ConfigurationError: a declared setting has no configured value.
            LoginError: the site reported an error or the post-login check failed.
        """
        login = self.definition.login
        if login.is_empty():
            self._log.debug("login_skipped")
            return

        self._check_has_config()
        login_url = await self.resolve_path(login.path)
        values = self._login_inputs()

        try:
            if login.method == "post":
                await self._post_to_page(login_url, values.items())
            elif login.method == "cookie":
                self.browser.set_cookies(login_url, values.get("cookie", ""))
            else:
                await self._login_via_form(login_url, login.form_selector, values)

            if login.errors:
                self._raise_on_login_error()

            if not await self._match_page_test(login.test):
                raise LoginError("Login check after login failed")
        except LoginError as e:
            self._log.error("login_failed", error=e.message)
            raise

        self._log.info("login_succeeded", method=login.method)

    async def _login_via_form(
        self, url: str, selector: str, values: Mapping[str, str]
    ) -> None:
        await self._open_page(url)
        form = self.browser.form(selector)
        for name, value in values.items():
            form.input(name, value)
        self._log.debug("login_form_submit", url=url, form=selector)
        await form.submit()

    async def _ensure_login(self) -> None:
        if await self._is_login_required():
            await self.login()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _local_categories(self, query: Query) -> list[str]:
        if not query.categories:
            return []
        local = self.definition.capabilities.category_map.reverse_map(query.categories)
        self._log.debug("categories_resolved", query_cats=list(query.categories), local=local)
        return local

    def _search_inputs(self, ctx: Mapping[str, Any]) -> list[tuple[str, str]]:
        values: list[tuple[str, str]] = []
        for name, tpl in self.definition.search.inputs.items():
            resolved = self._render("search_inputs", tpl, ctx)
            if name != "$raw":
                values.append((name, resolved))
                continue
            try:
                parsed = parse_qsl(resolved, keep_blank_values=True)
            except ValueError as e:
                raise SearchError(f"Error parsing $raw input: {e}") from e
            self._log.debug("raw_input_processed", source=tpl, parsed=parsed)
            values.extend(parsed)
        return values

    def _select_rows(self) -> list[Tag]:
        rows = self.definition.search.rows
        dom = self.browser.dom

        if rows.after > 0:
            merge_following_rows(dom.select(rows.selector), rows.after)

        if rows.remove:
            removed = [r for r in dom.select(rows.selector) if is_match(r, rows.remove)]
            self._log.debug("rows_removed", selector=rows.remove, count=len(removed))
            for row in removed:
                row.decompose()

        return dom.select(rows.selector)

    async def search(self, query: Query) -> list[ResultItem]:
        """Log in if needed, submit the search and scrape the result rows.

        Rows are kept in page order, filtered client-side by category and
        cut at ``query.limit`` (0 means unlimited).
        """
        await self._ensure_login()

        local_cats = self._local_categories(query)
        ctx = {
            "Query": query_context(query),
            "Keywords": query.keywords(),
            "Categories": local_cats,
        }

        search = self.definition.search
        search_url = await self.resolve_path(self._render("search_path", search.path, ctx))
        values = self._search_inputs(ctx)

        self._log.info("search_started", query=encode_query(query), url=search_url)
        started = time.monotonic()

        if search.method == "post":
            await self._post_to_page(search_url, values)
        else:
            await self.browser.open_form(search_url, values)

        rows = self._select_rows()
        self._log.debug(
            "rows_found",
            count=len(rows),
            selector=search.rows.selector,
            limit=query.limit,
        )

        filter_ctx = self._filter_context()
        results: list[ResultItem] = []
        for idx, el in enumerate(rows, start=1):
            if query.limit > 0 and len(results) >= query.limit:
                break

            row = await self._extract_row(idx, el, filter_ctx)

            if search.has_field(FieldKind.TITLE) and not row.title:
                # an empty title marks a "no results" page
                self._log.info("search_empty_title_row", row=idx)
                return []

            if local_cats and row.local_category not in local_cats:
                self._log.debug(
                    "row_category_skipped", row=idx, local=row.local_category
                )
                continue

            self._map_category(idx, row)

            if not row.link and not row.guid:
                self._log.warning("row_without_identity", row=idx, title=row.title)
                continue

            results.append(row.to_result())

        self._log.info(
            "search_completed",
            results=len(results),
            elapsed_ms=round((time.monotonic() - started) * 1000),
        )
        return results

    def _map_category(self, idx: int, row: _Row) -> None:
        if not row.local_category:
            return
        mapped = self.definition.capabilities.category_map.get(row.local_category)
        if mapped is not None:
            row.category = mapped.id
            return
        self._log.warning("row_unknown_local_category", row=idx, local=row.local_category)
        try:
            row.category = int(row.local_category) + CUSTOM_CATEGORY_OFFSET
        except ValueError:
            pass

    def _unparseable(self, idx: int, kind: FieldKind, value: str, error: Exception) -> None:
        self._log.warning(
            "row_field_unparseable",
            row=idx,
            field=kind.value,
            value=value,
            error=str(error),
        )

    async def _extract_row(self, idx: int, el: Tag, ctx: FilterContext) -> _Row:
        search = self.definition.search
        row = _Row(site=self.site)

        for fd in search.fields:
            row.extracted[fd.kind.value] = match_text(fd.block, el, ctx)
        self._log.debug("row_extracted", row=idx, data=row.extracted)

        for fd in search.fields:
            value = row.extracted[fd.kind.value]
            if fd.kind in _URL_FIELDS:
                if not value:
                    continue
                try:
                    value = await self.resolve_path(value)
                except ValueError as e:
                    self._unparseable(idx, fd.kind, value, e)
                    continue
            try:
                self._assign(row, fd.kind, value, ctx)
            except ValueError as e:
                self._unparseable(idx, fd.kind, value, e)

        if not row.guid and row.link:
            row.guid = row.link

        date_headers = search.rows.date_headers
        if not search.has_field(FieldKind.DATE) and not date_headers.is_empty():
            self._apply_date_header(idx, el, row, ctx)

        return row

    def _assign(self, row: _Row, kind: FieldKind, value: str, ctx: FilterContext) -> None:
        if kind is FieldKind.TITLE:
            row.title = value
        elif kind is FieldKind.DESCRIPTION:
            row.description = value
        elif kind is FieldKind.DOWNLOAD:
            row.link = value
        elif kind is FieldKind.DETAILS:
            row.guid = value
            if not row.comments:
                row.comments = value
        elif kind is FieldKind.COMMENTS:
            row.comments = value
        elif kind is FieldKind.CATEGORY:
            row.local_category = value
        elif kind is FieldKind.SIZE:
            row.size = parse_size_to_bytes(value)
        elif kind is FieldKind.SEEDERS:
            seeders = parse_int(value)
            row.seeders = seeders
            row.peers += seeders
        elif kind is FieldKind.LEECHERS:
            row.peers += parse_int(value)
        elif kind is FieldKind.DATE:
            row.publish_date = parse_fuzzy_time(value, ctx.now)
        elif kind is FieldKind.FILES:
            row.files = parse_int(value)
        elif kind is FieldKind.GRABS:
            row.grabs = parse_int(value)
        elif kind is FieldKind.DOWNLOAD_VOLUME_FACTOR:
            row.download_volume_factor = parse_float(value)
        elif kind is FieldKind.UPLOAD_VOLUME_FACTOR:
            row.upload_volume_factor = parse_float(value)
        elif kind is FieldKind.MINIMUM_RATIO:
            row.minimum_ratio = parse_float(value)
        elif kind is FieldKind.MINIMUM_SEED_TIME:
            row.minimum_seed_time = parse_float(value)

    def _apply_date_header(self, idx: int, el: Tag, row: _Row, ctx: FilterContext) -> None:
        block = self.definition.search.rows.date_headers
        header = preceding_match(el, block.selector)
        if header is None:
            self._log.warning("row_date_header_missing", row=idx, selector=block.selector)
            return
        value = text(block, header, ctx)
        try:
            row.publish_date = parse_fuzzy_time(value, ctx.now)
        except ValueError as e:
            self._unparseable(idx, FieldKind.DATE, value, e)

    # ------------------------------------------------------------------
    # Download and ratio
    # ------------------------------------------------------------------

    async def download(self, url: str) -> tuple[bytes, Mapping[str, str]]:
        """Fetch a download target with the logged-in session.

        Raises:
            DownloadError: the target is a magnet link, or fetching failed.
        """
        await self._ensure_login()

        full_url = await self.resolve_path(url)
        if full_url.startswith("magnet:"):
            raise DownloadError("Magnet links can't be downloaded")

        try:
            await self.browser.open(full_url)
        except BrowserError as e:
            raise DownloadError(f"Failed to fetch {full_url}: {e}") from e

        if self.browser.status_code >= 400:
            raise DownloadError(
                f"Fetching {full_url} returned status {self.browser.status_code}"
            )

        data = await self.browser.download()
        self._log.info("download_completed", url=full_url, size=len(data))
        return data, dict(self.browser.response_headers)

    async def ratio(self) -> str:
        """The account ratio as the site prints it, or ``"unknown"``."""
        ratio = self.definition.ratio
        if ratio.block.text:
            return ratio.block.text
        if not ratio.path:
            return "unknown"

        await self._ensure_login()

        ratio_url = await self.resolve_path(ratio.path)
        try:
            await self._open_page(ratio_url)
        except BrowserError as e:
            self._log.warning("ratio_page_failed", url=ratio_url, error=str(e))
            return "error"

        value = match_text(ratio.block, self.browser.dom, self._filter_context())
        return value.strip("- ")
