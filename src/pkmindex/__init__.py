"""pkmindex - thread-aware semantic indexing of personal records."""

__version__ = "0.1.0"
