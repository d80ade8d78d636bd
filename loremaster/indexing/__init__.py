"""Inverted indices and relevance search over the timeline."""

from .builder import IndexBuilder, TimelineIndices, extract_proper_nouns, tokenize
from .search import SearchEngine

__all__ = ["IndexBuilder", "TimelineIndices", "SearchEngine", "extract_proper_nouns", "tokenize"]
