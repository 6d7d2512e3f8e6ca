"""kubedep command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubedep`` script).
"""

from kubedep.cli.main import cli

__all__ = ["cli"]
