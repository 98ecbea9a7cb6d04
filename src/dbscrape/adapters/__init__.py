"""Adapters implementing core ports."""

from dbscrape.adapters.async_utils import (
    collect_observations,
    collect_observations_sync,
)
from dbscrape.adapters.sinks import InMemorySink, QueueSink
from dbscrape.adapters.sqlite_source import SQLiteDataSource

__all__ = [
    "InMemorySink",
    "QueueSink",
    "SQLiteDataSource",
    "collect_observations",
    "collect_observations_sync",
]
