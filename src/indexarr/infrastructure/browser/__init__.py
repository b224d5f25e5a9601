from __future__ import annotations

from .httpx_browser import HtmlForm, HttpxBrowser

__all__ = ["HtmlForm", "HttpxBrowser"]
