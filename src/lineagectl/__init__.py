"""lineagectl — predicate lineage graphs for regulated devices."""

__version__ = "0.1.0"
