"""Error taxonomy for a scrape cycle.

All errors are terminal for the current cycle of a single scraper and are
raised unchanged to the collection engine. Nothing here is retried.
"""


class ScrapeError(Exception):
    """Base class for scrape failures."""


class QueryFailure(ScrapeError):
    """The query could not be issued or a row could not be fetched.

    Covers connectivity, permission and missing view or column errors. The
    driver error is available as ``__cause__``.
    """


class DecodeFailure(ScrapeError):
    """A fetched row does not match the expected column count or types."""


class Cancelled(ScrapeError):
    """The scrape context was cancelled or its deadline passed."""
