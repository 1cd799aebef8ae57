"""
Cache models and data structures
"""

from typing import Any
from dataclasses import dataclass
from datetime import datetime, timezone

@dataclass
class CacheEntry:
    """One stored key -> value row"""
    key: str
    value: Any
    created_at: datetime

    def is_expired(self, ttl_seconds: float) -> bool:
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        age = (datetime.now(timezone.utc) - created_at).total_seconds()
        return age > ttl_seconds
