"""Metric naming and descriptor uniqueness checks."""

from collections.abc import Iterable
from types import MappingProxyType
from typing import TYPE_CHECKING

from dbscrape.core.models import MetricDescriptor

if TYPE_CHECKING:
    from dbscrape.core.ports import Scraper

# Process-wide metric namespace
NAMESPACE = "mysql"

# Schema holding the sys diagnostic views
SYS_SCHEMA = "sys"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores.

    Args:
        namespace: Process-wide namespace (e.g., "mysql")
        subsystem: Diagnostic view family (e.g., "sys")
        name: Metric specific suffix

    Returns:
        Fully qualified metric name, or "" if name is empty
    """
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


def check_unique_names(
    scrapers: Iterable["Scraper"],
) -> MappingProxyType[str, MetricDescriptor]:
    """Index descriptors of all scrapers by name.

    Raises:
        ValueError: If two descriptors share a qualified name.

    Returns:
        Read-only mapping of qualified name to descriptor.
    """
    index: dict[str, MetricDescriptor] = {}
    owners: dict[str, str] = {}
    for scraper in scrapers:
        for descriptor in scraper.descriptors():
            if descriptor.name in index:
                raise ValueError(
                    f"descriptor {descriptor.name!r} of {scraper.name()!r} is "
                    f"already registered by {owners[descriptor.name]!r}"
                )
            index[descriptor.name] = descriptor
            owners[descriptor.name] = scraper.name()
    return MappingProxyType(index)
