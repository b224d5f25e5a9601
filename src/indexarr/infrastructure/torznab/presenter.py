"""Torznab XML presenter.

Renders Torznab-compliant documents according to:
- Torznab specification: http://torznab.com/schemas/2015/feed
- RSS 2.0 specification
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable
from xml.etree import ElementTree as ET

from indexarr.domain.entities import Capabilities, Info, ResultItem, TorznabError
from indexarr.domain.entities.categories import sorted_by_id

_TORZNAB_NS = "http://torznab.com/schemas/2015/feed"

ET.register_namespace("torznab", _TORZNAB_NS)

# RFC 2822, as expected by RSS readers.
_PUB_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S %z"


@dataclass(frozen=True)
class TorznabRendered:
    """Rendered Torznab response."""

    payload: bytes
    media_type: str = "application/xml"


def _tostring(root: ET.Element) -> bytes:
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render_caps_xml(caps: Capabilities) -> TorznabRendered:
    """Render the capabilities document (search modes, then categories by id)."""
    root = ET.Element("caps")

    searching = ET.SubElement(root, "searching")
    for mode in caps.search_modes:
        el = ET.SubElement(searching, mode.key)
        el.set("available", "yes" if mode.available else "no")
        el.set("supportedParams", ",".join(mode.supported_params))

    categories = ET.SubElement(root, "categories")
    for cat in sorted_by_id(caps.categories):
        el = ET.SubElement(categories, "category")
        el.set("id", str(cat.id))
        el.set("name", cat.name)

    return TorznabRendered(_tostring(root))


def render_rss_xml(info: Info, items: Iterable[ResultItem]) -> TorznabRendered:
    """Render an RSS 2.0 feed with ``torznab:attr`` extensions.

    Args:
        info: Channel identity (title, description, link, language).
        items: Results, rendered in the given order.
    """
    rss = ET.Element("rss", attrib={"version": "2.0"})
    channel = ET.SubElement(rss, "channel")

    ET.SubElement(channel, "title").text = info.title or info.id
    ET.SubElement(channel, "description").text = info.description or info.title
    ET.SubElement(channel, "link").text = info.link
    ET.SubElement(channel, "language").text = info.language

    for it in items:
        _render_item(channel, it)

    return TorznabRendered(_tostring(rss))


def _render_item(channel: ET.Element, it: ResultItem) -> None:
    item = ET.SubElement(channel, "item")

    ET.SubElement(item, "title").text = it.title
    if it.description:
        ET.SubElement(item, "description").text = it.description
    if it.guid:
        ET.SubElement(item, "guid").text = it.guid
    if it.comments:
        ET.SubElement(item, "comments").text = it.comments
    if it.link:
        ET.SubElement(item, "link").text = it.link
    ET.SubElement(item, "category").text = str(it.category)
    ET.SubElement(item, "size").text = str(it.size)
    if it.publish_date is not None:
        ET.SubElement(item, "pubDate").text = it.publish_date.strftime(_PUB_DATE_FORMAT)

    if it.link:
        enclosure = ET.SubElement(item, "enclosure")
        enclosure.set("url", it.link)
        enclosure.set("length", str(it.size))
        enclosure.set("type", "application/x-bittorrent")

    _add_torznab_attr(item, "site", it.site)
    _add_torznab_attr(item, "category", str(it.category))
    _add_torznab_attr(item, "seeders", str(it.seeders))
    _add_torznab_attr(item, "peers", str(it.peers))
    _add_torznab_attr(item, "minimumratio", f"{it.minimum_ratio:g}")
    _add_torznab_attr(item, "minimumseedtime", f"{it.minimum_seed_time:.0f}")
    _add_torznab_attr(item, "size", str(it.size))
    _add_torznab_attr(item, "downloadvolumefactor", f"{it.download_volume_factor:g}")
    _add_torznab_attr(item, "uploadvolumefactor", f"{it.upload_volume_factor:g}")
    if it.files is not None:
        _add_torznab_attr(item, "files", str(it.files))
    if it.grabs is not None:
        _add_torznab_attr(item, "grabs", str(it.grabs))


def _add_torznab_attr(parent: ET.Element, name: str, value: str) -> None:
    attr = ET.SubElement(parent, f"{{{_TORZNAB_NS}}}attr")
    attr.set("name", name)
    attr.set("value", value)


def render_error_xml(error: TorznabError) -> TorznabRendered:
    """Render ``<error code=".." description=".."/>``.

    Code and description are repeated as child elements for clients that
    read elements instead of attributes.
    """
    root = ET.Element("error")
    root.set("code", str(error.code))
    root.set("description", error.description)
    ET.SubElement(root, "code").text = str(error.code)
    ET.SubElement(root, "description").text = error.description
    return TorznabRendered(_tostring(root))


def result_to_dict(it: ResultItem) -> dict[str, object]:
    return {
        "site": it.site,
        "title": it.title,
        "description": it.description,
        "guid": it.guid,
        "comments": it.comments,
        "link": it.link,
        "category": it.category,
        "size": it.size,
        "seeders": it.seeders,
        "peers": it.peers,
        "publish_date": it.publish_date.isoformat() if it.publish_date else None,
        "minimum_ratio": it.minimum_ratio,
        "minimum_seed_time": it.minimum_seed_time,
        "files": it.files,
        "grabs": it.grabs,
        "download_volume_factor": it.download_volume_factor,
        "upload_volume_factor": it.upload_volume_factor,
    }


def render_results_json(items: Iterable[ResultItem]) -> TorznabRendered:
    payload = json.dumps([result_to_dict(it) for it in items], indent=2)
    return TorznabRendered(payload.encode("utf-8"), media_type="application/json")
