"""issuegraph - issue tracker with a dependency graph."""

__version__ = "0.1.0"
