from .aggregate import AggregateIndexer, interleave

__all__ = ["AggregateIndexer", "interleave"]
