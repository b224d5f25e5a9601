"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "indexarr",
    "environment": "dev",
    "definitions": {
        "dirs": ["./definitions"],
    },
    "http": {
        "timeout_seconds": 10.0,
        "follow_redirects": True,
        "user_agent": (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "sites": {
        "file": "./sites.yml",
    },
    "tester": {
        "search_limit": 3,
    },
}
