"""Core models, ports and pipeline pieces."""
