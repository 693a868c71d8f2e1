"""deckcache: typed reactive resource cache for Deckhouse cluster resources."""

__version__ = "0.1.0"
