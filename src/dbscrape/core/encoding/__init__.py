"""Exposition encoders for observations."""

from dbscrape.core.encoding.prometheus import encode_observations

__all__ = ["encode_observations"]
