"""
Section categorization for dynamic fields.

A field's section is resolved in two stages: an explicit section tag wins
when it is valid, otherwise the key is matched against two keyword lists.
"""
from typing import Any, Optional

from catalog_admin.fields import Section

CORE_KEYWORDS = (
    "name",
    "model",
    "brand",
    "vendor",
    "price",
    "cost",
    "url",
    "link",
    "image",
    "photo",
    "description",
    "review",
    "source",
    "manufacturer",
    "company",
    "title",
    "category",
    "color",
    "size",
    "weight",
    "material",
    "style",
    "type",
    "series",
    "edition",
)

TECHNICAL_KEYWORDS = (
    "socket",
    "core",
    "thread",
    "speed",
    "frequency",
    "capacity",
    "memory",
    "storage",
    "wattage",
    "voltage",
    "tdp",
    "gpu",
    "cooler",
    "fan",
    "temperature",
    "performance",
    "benchmark",
    "mhz",
    "ghz",
    "gb",
    "mb",
    "watts",
    "rpm",
    "clock",
    "cache",
    "bus",
    "bandwidth",
    "latency",
    "power",
    "thermal",
    "pcie",
    "sata",
    "ddr",
    "interface",
)


def _matches_any(key: str, keywords) -> bool:
    return any(keyword in key for keyword in keywords)


def categorize_key(key: str) -> Section:
    """
    Keyword heuristic for a key without an explicit section.

    Technical only when a technical keyword matches and no core keyword
    does. Both or neither fall back to core identity.
    """
    lowered = key.lower()
    is_technical = _matches_any(lowered, TECHNICAL_KEYWORDS)
    is_core = _matches_any(lowered, CORE_KEYWORDS)
    if is_technical and not is_core:
        return Section.TECHNICAL_SPECS
    return Section.CORE_IDENTITY


def parse_section(value: Any) -> Optional[Section]:
    """Return the section for a valid tag, None for anything else."""
    if isinstance(value, Section):
        return value
    if isinstance(value, str):
        try:
            return Section(value)
        except ValueError:
            return None
    return None


def resolve_section(key: str, explicit: Any = None) -> Section:
    """Explicit tag first, keyword heuristic otherwise."""
    section = parse_section(explicit)
    if section is not None:
        return section
    return categorize_key(key)
