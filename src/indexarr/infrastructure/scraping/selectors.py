"""Selector block evaluation over BeautifulSoup trees."""

from __future__ import annotations

import copy
from typing import Optional

from bs4 import Tag

from indexarr.domain.definitions import SelectorBlock
from indexarr.domain.indexers import ExtractionError, MissingAttributeError

from .filters import FilterContext, apply_filters


def is_match(el: Tag, selector: str) -> bool:
    """True if ``el`` itself matches ``selector``."""
    return bool(el.css.match(selector))


def matches(block: SelectorBlock, node: Tag) -> bool:
    """True iff the block has a literal text or its selector hits under ``node``."""
    if block.text:
        return True
    if block.is_empty():
        return False
    return node.select_one(block.selector) is not None


def match_text(block: SelectorBlock, node: Tag, ctx: FilterContext) -> str:
    """Locate ``block.selector`` under ``node`` and extract its value.

    No match yields ``""``: absent optional fields are legal. Without a
    selector the value is extracted from ``node`` itself.
    """
    if block.text:
        return apply_filters(block.text, block.filters, ctx)
    if block.selector:
        found = node.select_one(block.selector)
        if found is None:
            ctx.logger.debug("selector_no_match", selector=block.selector)
            return ""
        return text(block, found, ctx)
    return text(block, node, ctx)


def text(block: SelectorBlock, el: Tag, ctx: FilterContext) -> str:
    """Extract a value from ``el`` (remove, case, attribute, then filters)."""
    if block.text:
        return apply_filters(block.text, block.filters, ctx)

    if block.remove:
        el = copy.copy(el)
        for sub in el.select(block.remove):
            sub.decompose()

    if block.case:
        for pattern, value in block.case.items():
            if is_match(el, pattern) or el.select_one(pattern) is not None:
                return apply_filters(value, block.filters, ctx)
        raise ExtractionError(f"None of the cases match for {block}")

    if block.attribute:
        value = el.get(block.attribute)
        if value is None:
            raise MissingAttributeError(block.attribute)
        if isinstance(value, list):
            value = " ".join(value)
        output = value
    else:
        output = el.get_text().strip()

    return apply_filters(output, block.filters, ctx)


def preceding_match(el: Tag, selector: str) -> Optional[Tag]:
    """Nearest previous sibling of ``el`` matching ``selector``."""
    for sibling in el.find_previous_siblings():
        if isinstance(sibling, Tag) and is_match(sibling, selector):
            return sibling
    return None


def merge_following_rows(rows: list[Tag], after: int) -> list[Tag]:
    """Fold each lead row's ``after`` trailing rows into it.

    The trailing rows' cells are moved onto the lead row and the trailing
    rows are removed from the document. Returns the lead rows.
    """
    leads: list[Tag] = []
    for i in range(0, len(rows), 1 + after):
        lead = rows[i]
        for trailing in rows[i + 1 : i + 1 + after]:
            for cell in trailing.find_all("td", recursive=False):
                lead.append(cell.extract())
            trailing.decompose()
        leads.append(lead)
    return leads
