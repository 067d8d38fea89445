"""Resolve logical listing fields from a FINN Atom entry.

FINN feeds carry vehicle data in an ``adata`` extension block, but the shape of
that block varies between feed variants: a value can sit in a typed ``field``
element, a ``property`` element or (for prices) a dedicated ``price`` element,
and the value itself can live in a ``value`` attribute or in the element text.
Each lookup below is an ordered list of named strategies; the first one that
yields a value wins and results are never merged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from services.xml_decoder import XmlNode

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")

INSECURE_SCHEME = "http://"
SECURE_SCHEME = "https://"

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "modelYear": ("modelYear", "year"),
    "mileage": ("mileage", "kilometers"),
}

PREFERRED_PRICE_NAMES = ("main", "net")


@dataclass(frozen=True)
class ExtractionStrategy:
    tag: str
    resolve: Callable[[XmlNode], str | None]


def first_match(strategies: Sequence[ExtractionStrategy], node: XmlNode | None) -> str | None:
    if node is None:
        return None
    for strategy in strategies:
        value = strategy.resolve(node)
        if value is not None:
            logger.debug("Resolved value via %s", strategy.tag)
            return value
    return None


def node_value(node: XmlNode | None) -> str | None:
    """Return the value attribute, the text content or a ``text`` child, in that order."""
    if node is None:
        return None
    value = node.attr("value")
    if value is not None:
        return value
    if node.text is not None:
        return node.text
    text_child = node.child("text")
    if text_child is not None:
        return text_child.text
    return None


def _named(nodes: list[XmlNode], name: str) -> XmlNode | None:
    return next((node for node in nodes if node.attr("name") == name), None)


def typed_field_value(adata: XmlNode, name: str) -> str | None:
    return node_value(_named(adata.children("field"), name))


def property_value(adata: XmlNode, name: str) -> str | None:
    return node_value(_named(adata.children("property"), name))


def field_strategies(name: str) -> tuple[ExtractionStrategy, ...]:
    return (
        ExtractionStrategy(f"field[{name}]", lambda adata: typed_field_value(adata, name)),
        ExtractionStrategy(f"property[{name}]", lambda adata: property_value(adata, name)),
    )


def adata_value(adata: XmlNode | None, name: str) -> str | None:
    return first_match(field_strategies(name), adata)


def aliased_value(adata: XmlNode | None, field_name: str) -> str | None:
    for alias in FIELD_ALIASES.get(field_name, (field_name,)):
        value = adata_value(adata, alias)
        if value is not None:
            return value
    return None


def _price_element(adata: XmlNode) -> XmlNode | None:
    prices = adata.children("price")
    for preferred in PREFERRED_PRICE_NAMES:
        hit = _named(prices, preferred)
        if hit is not None:
            return hit
    return prices[0] if prices else None


PRICE_STRATEGIES = (
    ExtractionStrategy("price-element", lambda adata: node_value(_price_element(adata))),
    *field_strategies("price"),
)


def price_value(adata: XmlNode | None) -> str | None:
    return first_match(PRICE_STRATEGIES, adata)


def to_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    digits = _NON_DIGITS.sub("", str(raw))
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        # Python caps int() on very long digit strings.
        logger.debug("Unable to coerce %d digits to an integer", len(digits))
        return None


def upgrade_scheme(url: str | None) -> str | None:
    if url and url[:len(INSECURE_SCHEME)].lower() == INSECURE_SCHEME:
        return SECURE_SCHEME + url[len(INSECURE_SCHEME):]
    return url


def _first_url(nodes: list[XmlNode]) -> str | None:
    return next((node.attr("url") for node in nodes if node.attr("url")), None)


def _image_link_href(entry: XmlNode) -> str | None:
    links = entry.children("link")
    hit = next(
        (link for link in links if (link.attr("type") or "").startswith("image/")),
        None,
    )
    if hit is None:
        hit = next((link for link in links if link.attr("rel") == "enclosure"), None)
    return hit.attr("href") if hit is not None else None


IMAGE_STRATEGIES = (
    ExtractionStrategy("media-content", lambda entry: _first_url(entry.children("content"))),
    ExtractionStrategy("media-thumbnail", lambda entry: _first_url(entry.children("thumbnail"))),
    ExtractionStrategy("image-link", _image_link_href),
)


def image_url(entry: XmlNode) -> str | None:
    return upgrade_scheme(first_match(IMAGE_STRATEGIES, entry))


def ad_url(entry: XmlNode) -> str | None:
    link = next((link for link in entry.children("link") if link.attr("rel") == "alternate"), None)
    if link is None:
        return None
    return upgrade_scheme(link.attr("href"))


def title(entry: XmlNode) -> str:
    return node_value(entry.child("title")) or ""
