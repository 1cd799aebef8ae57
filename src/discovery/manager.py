"""
Discovery manager: cache-aware address discovery for speaker devices
"""

import logging
import time
from typing import List, Dict, Optional

from .models import DiscoveryResult
from .network_discovery import SSDPBroadcaster, parse_replies, unique_addresses

logger = logging.getLogger(__name__)

CACHE_KEY = 'ip-addresses'

class SpeakerDiscovery:
    """Finds speaker addresses via SSDP, optionally through the discovery cache"""

    def __init__(self, config: Dict, cache=None, broadcaster: Optional[SSDPBroadcaster] = None):
        self.config = config
        self.cache = cache  # anything with compute_if_absent(key, producer) / invalidate(key)
        self.broadcaster = broadcaster or SSDPBroadcaster(config)
        self.cache_key = config.get('cache_key', CACHE_KEY)
        self.last_result: Optional[DiscoveryResult] = None

    async def discover_udp_only(self) -> DiscoveryResult:
        """One live broadcast/collect/parse pass"""
        start_time = time.time()

        replies = await self.broadcaster.discover()
        records = parse_replies(replies)
        addresses = unique_addresses(records)

        duration = time.time() - start_time
        logger.info(f"[DISCOVERY] {len(replies)} replies -> {len(records)} unique devices in {duration:.1f}s")
        if addresses:
            logger.info(f"[DISCOVERY] IPs: {', '.join(addresses)}")

        return DiscoveryResult(addresses, "udp_multicast", duration, len(replies), len(records))

    async def discover_addresses(self) -> List[str]:
        """Discovery step of a network snapshot; cached under a fixed key when a cache is set"""
        if self.cache is None:
            result = await self.discover_udp_only()
        else:
            start_time = time.time()
            live_results = []

            async def producer():
                live = await self.discover_udp_only()
                live_results.append(live)
                return live.addresses

            addresses = await self.cache.compute_if_absent(self.cache_key, producer)
            if live_results:
                result = live_results[0]
            else:
                logger.info(f"[CACHE] Using {len(addresses)} cached addresses")
                result = DiscoveryResult(list(addresses), "cache", time.time() - start_time,
                                         0, len(addresses))

        self.last_result = result
        return list(result.addresses)

    async def invalidate_cache(self):
        """Drop the cached address list so the next pass broadcasts again"""
        if self.cache is not None:
            await self.cache.invalidate(self.cache_key)
            logger.info(f"[CACHE] Invalidated '{self.cache_key}'")
