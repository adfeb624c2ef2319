"""Two-tier (memory + disk) expiring cache for binary assets.

Re-exports :class:`AssetCache` and its building blocks from
:mod:`anidex.cache.asset_cache` for convenient top-level access::

    from anidex.cache import AssetCache
"""

from anidex.cache.asset_cache import AssetCache, CacheEntry, MemoryTier, disk_filename

__all__ = ["AssetCache", "CacheEntry", "MemoryTier", "disk_filename"]
