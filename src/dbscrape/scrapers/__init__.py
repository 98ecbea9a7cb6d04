"""Explicit registration list of available scrapers."""

from dbscrape.core.descriptors import check_unique_names
from dbscrape.core.ports import Scraper
from dbscrape.scrapers.sys_user_summary_by_statement_type import (
    SysUserSummaryByStatementType,
)

SCRAPERS: tuple[Scraper, ...] = (SysUserSummaryByStatementType(),)

# Fails at import if two scrapers claim the same metric name
DESCRIPTORS = check_unique_names(SCRAPERS)


def get_scraper(name: str) -> Scraper | None:
    """Return the registered scraper with the given name, or None."""
    for scraper in SCRAPERS:
        if scraper.name() == name:
            return scraper
    return None


__all__ = [
    "DESCRIPTORS",
    "SCRAPERS",
    "SysUserSummaryByStatementType",
    "get_scraper",
]
