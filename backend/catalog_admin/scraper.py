"""
Product page scraper behind the fetch-specs endpoint.

Results are hints for pre-filling an edit form, never saved directly.
"""
import json
import random
import re
from typing import Any, Dict, Iterable, Optional

import httpx
from bs4 import BeautifulSoup

from catalog_admin.config import settings
from catalog_admin.exceptions import ScrapeError
from catalog_admin.logging_config import get_logger
from catalog_admin.schemas import ScrapedSpecs
from catalog_admin.static_fields import parse_number

logger = get_logger(__name__)

USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

MAX_SPEC_ROWS = 100

_PRICE_RE = re.compile(r"(\d[\d,]*\.?\d*)", re.ASCII)


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    cleaned = " ".join(str(text).split())
    return cleaned or None


def parse_price(raw: Any) -> Optional[float]:
    """Extract a number from price text (e.g. "₹19,999.00" -> 19999.0)."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return parse_number(raw)
    match = _PRICE_RE.search(str(raw))
    if not match:
        return None
    return parse_number(match.group(1).replace(",", ""))


def _iter_json_ld(soup: BeautifulSoup) -> Iterable[Dict[str, Any]]:
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except json.JSONDecodeError:
            continue
        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                continue
            graph = item.get("@graph")
            if isinstance(graph, list):
                for node in graph:
                    if isinstance(node, dict):
                        yield node
            else:
                yield item


def _is_product(node: Dict[str, Any]) -> bool:
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Product" in node_type
    return node_type == "Product"


def _brand_name(brand: Any) -> Optional[str]:
    if isinstance(brand, dict):
        return _clean(brand.get("name"))
    if isinstance(brand, list) and brand:
        return _brand_name(brand[0])
    return _clean(brand) if isinstance(brand, str) else None


def _offer_price(offers: Any) -> Optional[float]:
    if isinstance(offers, list):
        for offer in offers:
            price = _offer_price(offer)
            if price is not None:
                return price
        return None
    if isinstance(offers, dict):
        return parse_price(offers.get("price") or offers.get("lowPrice"))
    return None


def parse_product_page(html: str) -> ScrapedSpecs:
    """
    Parse a product page into scraped hints.

    JSON-LD ``Product`` data is preferred; HTML meta tags, headings and
    spec tables fill whatever is still missing.
    """
    soup = BeautifulSoup(html, "html.parser")
    result: Dict[str, Any] = {"specs": {}}

    for node in _iter_json_ld(soup):
        if not _is_product(node):
            continue
        result.setdefault("manufacturer", _brand_name(node.get("brand") or node.get("manufacturer")))
        result.setdefault("model_name", _clean(node.get("name")))
        result.setdefault("model_number", _clean(node.get("mpn") or node.get("sku")))
        result.setdefault("price", _offer_price(node.get("offers")))
        for prop in node.get("additionalProperty") or []:
            if isinstance(prop, dict):
                name, value = _clean(prop.get("name")), _clean(prop.get("value"))
                if name and value:
                    result["specs"].setdefault(name, value)
        break

    if not result.get("model_name"):
        og_title = soup.find("meta", property="og:title")
        heading = soup.find("h1")
        if og_title and og_title.get("content"):
            result["model_name"] = _clean(og_title["content"])
        elif heading:
            result["model_name"] = _clean(heading.get_text())

    if not result.get("manufacturer"):
        brand = soup.select_one('[itemprop="brand"]')
        if brand:
            result["manufacturer"] = _clean(brand.get("content") or brand.get_text())

    if not result.get("model_number"):
        mpn = soup.select_one('[itemprop="mpn"], [itemprop="sku"]')
        if mpn:
            result["model_number"] = _clean(mpn.get("content") or mpn.get_text())

    if result.get("price") is None:
        price_meta = soup.find("meta", property="product:price:amount")
        price_elem = soup.select_one('[itemprop="price"]')
        if price_meta and price_meta.get("content"):
            result["price"] = parse_price(price_meta["content"])
        elif price_elem:
            result["price"] = parse_price(price_elem.get("content") or price_elem.get_text())

    specs: Dict[str, str] = result["specs"]
    for row in soup.select("table tr"):
        if len(specs) >= MAX_SPEC_ROWS:
            break
        label = row.find("th")
        cells = row.find_all("td")
        if label and cells:
            name, value = _clean(label.get_text()), _clean(cells[0].get_text())
        elif len(cells) >= 2:
            name, value = _clean(cells[0].get_text()), _clean(cells[1].get_text())
        else:
            continue
        if name and value:
            specs.setdefault(name, value)

    for term in soup.find_all("dt"):
        if len(specs) >= MAX_SPEC_ROWS:
            break
        definition = term.find_next_sibling("dd")
        if definition:
            name, value = _clean(term.get_text()), _clean(definition.get_text())
            if name and value:
                specs.setdefault(name, value)

    return ScrapedSpecs(**{k: v for k, v in result.items() if v is not None})


class SpecScraper:
    """Fetches product pages and extracts spec hints."""

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.client = httpx.AsyncClient(
            timeout=timeout or settings.SCRAPER_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )

    def _get_default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": random.choice(USER_AGENTS),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    async def fetch(self, url: str) -> str:
        """Fetch page HTML or raise ScrapeError."""
        try:
            response = await self.client.get(url, headers=self._get_default_headers())
        except httpx.TimeoutException as e:
            logger.warning("[Scraper] Timeout fetching %s", url)
            raise ScrapeError(f"Timeout fetching {url}") from e
        except httpx.HTTPError as e:
            logger.warning("[Scraper] Error fetching %s: %s", url, e)
            raise ScrapeError(f"Error fetching {url}: {e}") from e

        if response.status_code != 200:
            logger.warning("[Scraper] HTTP %s for %s", response.status_code, url)
            raise ScrapeError(f"HTTP {response.status_code} for {url}")
        return response.text

    async def scrape(self, url: str) -> ScrapedSpecs:
        """Fetch and parse a product page."""
        html = await self.fetch(url)
        scraped = parse_product_page(html)
        logger.info(
            "[Scraper] %s: manufacturer=%s model=%s price=%s, %d spec rows",
            url,
            scraped.manufacturer,
            scraped.model_name,
            scraped.price,
            len(scraped.specs),
        )
        return scraped

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
