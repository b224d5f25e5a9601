"""Port for the HTTP/browser session a Runner drives."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

FormValues = Sequence[tuple[str, str]]


class FormPort(Protocol):
    """A form located in the current page, filled in place and submitted."""

    def input(self, name: str, value: str) -> None: ...

    async def submit(self) -> None: ...


class BrowserPort(Protocol):
    """Stateful session: one current page, one cookie jar.

    Not safe for concurrent use; one browser belongs to one Runner.
    """

    @property
    def url(self) -> str | None: ...

    @property
    def status_code(self) -> int: ...

    @property
    def response_headers(self) -> Mapping[str, str]: ...

    @property
    def body(self) -> str: ...

    @property
    def dom(self) -> Any: ...

    async def open(self, url: str) -> None: ...

    def form(self, selector: str) -> FormPort: ...

    async def open_form(self, url: str, values: FormValues) -> None: ...

    async def post_form(self, url: str, values: FormValues) -> None: ...

    async def download(self) -> bytes: ...

    def set_cookies(self, url: str, cookie_header: str) -> None: ...

    async def aclose(self) -> None: ...
