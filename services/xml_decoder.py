from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lxml import etree

logger = logging.getLogger(__name__)


class FeedParseError(RuntimeError):
    """Raised when the feed payload is not well-formed XML."""


@dataclass
class XmlNode:
    """Namespace-stripped view of one XML element.

    Child elements are grouped by local name in document order, so an element
    that appears once and one that appears several times are read the same way.
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    _children: dict[str, list[XmlNode]] = field(default_factory=dict, repr=False)

    def attr(self, name: str) -> str | None:
        return self.attributes.get(name)

    def children(self, name: str) -> list[XmlNode]:
        return list(self._children.get(name, ()))

    def child(self, name: str) -> XmlNode | None:
        nodes = self._children.get(name)
        return nodes[0] if nodes else None

    def append(self, node: XmlNode) -> None:
        self._children.setdefault(node.name, []).append(node)


def _local_name(tag: str) -> str:
    return etree.QName(tag).localname


def _to_node(element: etree._Element) -> XmlNode:
    text = (element.text or "").strip()
    node = XmlNode(
        name=_local_name(element.tag),
        attributes={_local_name(key): value for key, value in element.attrib.items()},
        text=text or None,
    )
    for child in element:
        # Comments and processing instructions carry no listing data.
        if not isinstance(child.tag, str):
            continue
        node.append(_to_node(child))
    return node


def decode_feed(xml: str | bytes) -> XmlNode:
    if isinstance(xml, str):
        payload = xml.encode("utf-8")
        parser = etree.XMLParser(
            encoding="utf-8", resolve_entities=False, no_network=True, remove_comments=True
        )
    else:
        payload = xml
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)

    try:
        root = etree.fromstring(payload, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise FeedParseError(f"Invalid feed XML: {exc}") from exc
    if root is None:
        raise FeedParseError("Invalid feed XML: empty document")

    return _to_node(root)


def iter_entries(root: XmlNode) -> list[XmlNode]:
    if root.name != "feed":
        logger.debug("Feed root element is %r, not 'feed'; no entries read", root.name)
        return []
    return root.children("entry")
