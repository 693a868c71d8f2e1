"""deckcache command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``deckcache`` script).
"""

from deckcache.cli.main import cli

__all__ = ["cli"]
