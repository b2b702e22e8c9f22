"""Feed to JSON conversion service with a write-once on-disk cache."""

__version__ = "1.0.0"
