import json
import logging
import re
from typing import Any, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from selectolax.parser import HTMLParser, Node


logger = logging.getLogger(__name__)

CITY_STATE_ZIP_SUFFIX = re.compile(r", [^,]+, \w{2} \d{5}")


class Markup:
    """CSS-selector queries over a page or a fragment of one."""

    def __init__(self, source, base_url: Optional[str] = None):
        self.root = HTMLParser(source) if isinstance(source, str) else source
        self.base_url = base_url

    def nodes(self, selector: str) -> List["Markup"]:
        return [Markup(node, self.base_url) for node in self.root.css(selector)]

    def exists(self, selector: str) -> bool:
        return self.root.css_first(selector) is not None

    def text(self, selector: Optional[str] = None, strip: bool = True) -> str:
        """Text of the first match (or of this node), '' when nothing matches."""
        node = self._first(selector)
        if node is None:
            return ""
        return _node_text(node, strip)

    def texts(self, selector: str, strip: bool = True) -> List[str]:
        return [_node_text(node, strip) for node in self.root.css(selector)]

    def attr(self, selector: str, name: str) -> Optional[str]:
        node = self._first(selector)
        if node is None:
            return None
        return node.attributes.get(name)

    def attrs(self, selector: str, name: str) -> List[str]:
        values = []
        for node in self.root.css(selector):
            value = node.attributes.get(name)
            if value:
                values.append(value)
        return values

    def links(self, selector: str) -> List[str]:
        """Absolute hrefs of every match."""
        return [absolute_url(self.base_url, href) for href in self.attrs(selector, "href")]

    def html(self, selector: Optional[str] = None) -> str:
        node = self._first(selector)
        if node is None:
            return ""
        return node.html or ""

    def ld_json(self) -> List[Any]:
        """Parsed JSON-LD blocks; malformed blocks are skipped."""
        blocks = []
        for node in self.root.css('script[type="application/ld+json"]'):
            raw = node.text(strip=False).strip()
            if not raw:
                continue
            try:
                blocks.append(json.loads(raw))
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed JSON-LD block on {self.base_url}")
        return blocks

    def _first(self, selector: Optional[str]) -> Optional[Node]:
        if selector is None:
            return self.root if isinstance(self.root, Node) else self.root.body
        return self.root.css_first(selector)


def _node_text(node: Node, strip: bool) -> str:
    # selectolax's own strip trims every text fragment and glues words together
    text = node.text(deep=True, strip=False)
    return text.strip() if strip else text


def digits_only(text: Optional[str]) -> str:
    return re.sub(r"\D", "", text or "")


def strip_city_state_zip(address: Optional[str]) -> str:
    """'1 Main St, Springfield, IL 62701' -> '1 Main St'."""
    return CITY_STATE_ZIP_SUFFIX.sub("", address or "", count=1)


def title_case(text: str) -> str:
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def clean_sites(sites: Iterable[Optional[str]]) -> List[str]:
    return [site.strip() for site in sites if isinstance(site, str) and site.strip()]


def absolute_url(base_url: Optional[str], href: str) -> str:
    if not base_url or href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url, href)


def origin_and_path(url: str) -> str:
    """Drop query string and fragment."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
