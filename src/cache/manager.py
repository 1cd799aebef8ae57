"""
Discovery cache backed by PostgreSQL
Key -> JSON value store with a compute-if-absent contract
"""

import asyncpg
import logging
import json
from typing import Any, Awaitable, Callable, Dict, Optional

from .models import CacheEntry

logger = logging.getLogger(__name__)

class DiscoveryCache:
    """Persists discovery results between process runs"""

    def __init__(self, config: Dict):
        cache_config = config['cache']
        self.pool = None
        self.db_host = cache_config['host']
        self.db_port = cache_config['port']
        self.db_name = cache_config['database']
        self.db_user = cache_config['username']
        self.db_password = cache_config['password']
        self.ttl_seconds = cache_config.get('ttl_seconds', 3600)

    async def initialize(self):
        """Initialize database connection pool and schema"""
        try:
            self.pool = await asyncpg.create_pool(
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
                user=self.db_user,
                password=self.db_password,
                min_size=1,
                max_size=5,
                command_timeout=10
            )
            logger.info("Cache connection pool created")

            await self.create_schema()
            logger.info("Cache schema initialized")

        except Exception as e:
            logger.error(f"Cache initialization failed: {e}")
            raise

    async def create_schema(self):
        """Create the cache table if it doesn't exist"""
        schema_sql = """
        CREATE TABLE IF NOT EXISTS discovery_cache (
            key TEXT PRIMARY KEY,
            value JSONB NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
        async with self.pool.acquire() as conn:
            await conn.execute(schema_sql)

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Fetch a stored entry, expired or not"""
        if not self.pool:
            return None
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT key, value, created_at FROM discovery_cache WHERE key = $1
                """, key)
        except Exception as e:
            logger.error(f"Failed to read cache key {key}: {e}")
            return None

        if not row:
            return None
        return CacheEntry(key=row['key'], value=json.loads(row['value']), created_at=row['created_at'])

    async def set(self, key: str, value: Any) -> bool:
        if not self.pool:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO discovery_cache (key, value, created_at)
                    VALUES ($1, $2::jsonb, CURRENT_TIMESTAMP)
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        created_at = EXCLUDED.created_at
                """, key, json.dumps(value))
            return True
        except Exception as e:
            logger.error(f"Failed to store cache key {key}: {e}")
            return False

    async def invalidate(self, key: str):
        if not self.pool:
            return
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM discovery_cache WHERE key = $1", key)
        except Exception as e:
            logger.error(f"Failed to invalidate cache key {key}: {e}")

    async def compute_if_absent(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for key, or await producer() and store its result.
        Empty results are returned but not stored.
        """
        entry = await self.get(key)
        if entry is not None and not entry.is_expired(self.ttl_seconds):
            logger.debug(f"[CACHE] Hit for '{key}'")
            return entry.value

        logger.debug(f"[CACHE] Miss for '{key}'")
        value = await producer()
        if value:
            await self.set(key, value)
        return value

    async def close(self):
        """Close database connection pool"""
        if self.pool:
            pool, self.pool = self.pool, None
            await pool.close()
            logger.info("Cache connection pool closed")
