"""
Stock splits: integrity validation and index build.

This package validates a year-partitioned dataset of corporate stock split
events and folds it into a denormalized lookup index keyed by symbol and ISIN.
"""

from importlib.metadata import version

__version__ = version("stock-splits")

__all__ = ["__version__"]
