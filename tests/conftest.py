"""Shared test fixtures for the indexarr test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from indexarr.domain.definitions import IndexerDefinition
from indexarr.infrastructure.config import MemorySiteConfig
from indexarr.infrastructure.definitions import parse_definition
from indexarr.infrastructure.scraping import FilterContext

# ---------------------------------------------------------------------------
# Definition documents
# ---------------------------------------------------------------------------

EXAMPLE_DEFINITION = """\
site: example
name: Example Tracker
description: A llama themed tracker
links:
  - https://example.org/
caps:
  categories:
    1: TV/Anime
    2: Audio
  modes:
    search: [q]
login:
  path: /login.php
  method: form
  form: form#login
  inputs:
    username: "{{ .Config.username }}"
    llamas_password: "{{ .Config.password }}"
  error:
    - selector: .loginerror
      message:
        selector: .loginerror a
  test:
    path: /profile.php
ratio:
  path: /profile.php
  selector: span.ratio
search:
  path: /torrents.php
  inputs:
    $raw: "{{ range .Categories }}filter_cat[{{.}}]=1&{{end}}"
    searchstr: "{{ .Query.Keywords }}"
  rows:
    selector: table.results tbody tr
  fields:
    category:
      selector: td:nth-child(1) a
      attribute: href
      filters:
        - name: querystring
          args: cat
    title:
      selector: td:nth-child(2) a.title
    details:
      selector: td:nth-child(2) a.title
      attribute: href
    download:
      selector: td:nth-child(3) a
      attribute: href
    size:
      selector: td:nth-child(4)
    seeders:
      selector: td:nth-child(5)
    leechers:
      selector: td:nth-child(6)
"""

MULTIROW_DEFINITION = """\
site: multirow
links: https://example.org/
caps:
  categories:
    1: TV
    2: Audio
login:
  path: /login.php
  method: post
  inputs:
    username: "{{ .Config.username }}"
    password: "{{ .Config.password }}"
  test:
    path: /profile.php
search:
  path: /search.php
  rows:
    selector: table.results tbody tr:not(.dateheader)
    after: 1
    dateheaders:
      selector: .dateheader
      filters:
        - name: regexp
          args: "^Added on (.+?)$"
        - name: dateparse
          args: "Monday, Jan 02, 2006"
  fields:
    category:
      selector: td:nth-child(1) a
      attribute: href
      filters:
        - name: querystring
          args: cat
    title:
      selector: td:nth-child(2) a
    download:
      selector: td:nth-child(3) a
      attribute: href
    size:
      selector: td:nth-child(4)
"""


@pytest.fixture()
def example_definition() -> IndexerDefinition:
    return parse_definition(EXAMPLE_DEFINITION, source="example.yml")


@pytest.fixture()
def multirow_definition() -> IndexerDefinition:
    return parse_definition(MULTIROW_DEFINITION, source="multirow.yml")


@pytest.fixture()
def definitions_dir(tmp_path: Path) -> Path:
    """Directory holding ``example.yml`` and ``multirow.yml``."""
    directory = tmp_path / "definitions"
    directory.mkdir()
    (directory / "example.yml").write_text(EXAMPLE_DEFINITION, encoding="utf-8")
    (directory / "multirow.yml").write_text(MULTIROW_DEFINITION, encoding="utf-8")
    return directory


# ---------------------------------------------------------------------------
# Site settings
# ---------------------------------------------------------------------------


@pytest.fixture()
def site_config() -> MemorySiteConfig:
    """Credentials for both fixture sites."""
    creds = {
        "username": "myusername",
        "password": "mypassword",
        "url": "https://example.org/",
    }
    return MemorySiteConfig({"example": creds, "multirow": dict(creds)})


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


@pytest.fixture()
def now() -> datetime:
    return datetime(2009, 11, 10, 23, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def filter_ctx(now: datetime) -> FilterContext:
    return FilterContext(now=now)
