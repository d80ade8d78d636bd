"""Timeline snapshot ownership, persistence and rebuilds."""

from .manager import CacheManager, TimelineSnapshot

__all__ = ["CacheManager", "TimelineSnapshot"]
