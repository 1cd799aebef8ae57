"""
Cache module for persisted discovery results
"""

from .manager import DiscoveryCache
from .models import CacheEntry

__all__ = ['DiscoveryCache', 'CacheEntry']
