"""Featured content curation from a release indexer and a metadata database."""

__version__ = "0.1.0"
