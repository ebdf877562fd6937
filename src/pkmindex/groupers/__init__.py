"""Strategies for grouping items into indexable documents."""

from pkmindex.groupers.thread_grouper import ThreadGrouper

__all__ = ["ThreadGrouper"]
