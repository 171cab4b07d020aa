"""mdbook-backlinks: an mdBook preprocessor that inserts backlinks."""

__version__ = "0.3.0"
