"""Cache module - Single-slot response cache."""

from .cache_manager import CacheEntry, ResponseCache, response_cache

__all__ = ['CacheEntry', 'ResponseCache', 'response_cache']
