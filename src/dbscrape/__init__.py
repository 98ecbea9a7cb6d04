"""dbscrape - turn database diagnostic views into metric observations."""

from dbscrape.adapters import (
    InMemorySink,
    QueueSink,
    SQLiteDataSource,
    collect_observations,
    collect_observations_sync,
)
from dbscrape.core.context import ScrapeContext
from dbscrape.core.encoding.prometheus import encode_observations
from dbscrape.core.errors import Cancelled, DecodeFailure, QueryFailure, ScrapeError
from dbscrape.core.metrics import counter
from dbscrape.core.models import MetricDescriptor, Observation, ValueType
from dbscrape.core.ports import (
    Connection,
    Cursor,
    DataSource,
    ObservationSink,
    Scraper,
)
from dbscrape.scrapers import SCRAPERS, SysUserSummaryByStatementType, get_scraper

__all__ = [
    "SCRAPERS",
    "Cancelled",
    "Connection",
    "Cursor",
    "DataSource",
    "DecodeFailure",
    "InMemorySink",
    "MetricDescriptor",
    "Observation",
    "ObservationSink",
    "QueryFailure",
    "QueueSink",
    "SQLiteDataSource",
    "ScrapeContext",
    "ScrapeError",
    "Scraper",
    "SysUserSummaryByStatementType",
    "ValueType",
    "collect_observations",
    "collect_observations_sync",
    "counter",
    "encode_observations",
    "get_scraper",
]
