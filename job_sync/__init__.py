"""Job aggregation and sync: pull postings from several job boards into one cache."""

__version__ = "0.1.0"
