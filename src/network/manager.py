"""
Speaker network context: owns one discovery snapshot and answers lookups against it
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any, Callable

from devices.models import Playlist, parse_playlists
from devices.speaker import Speaker, Controller
from discovery.manager import SpeakerDiscovery
from discovery.registry import build_registry
from discovery.topology import TopologyResolver, controllers_for
from exceptions import NoControllersError, NotFoundError
from .lookup import find_by_name
from .radio import Radio

logger = logging.getLogger(__name__)

class SpeakerNetwork:
    """
    Discovers the speakers on the local network once and serves lookups
    (rooms, controllers, playlists, radio favourites) from that snapshot.

    The snapshot lives until reset() or refresh(); the address discovery step
    goes through the cache when one is configured, topology is always live.
    """

    def __init__(self, config: Dict, cache=None,
                 discovery: Optional[SpeakerDiscovery] = None,
                 resolver: Optional[TopologyResolver] = None,
                 speaker_factory: Optional[Callable[[str], Speaker]] = None):
        self.config = config
        self.request_timeout = config.get('request_timeout', 5)
        self.device_port = config.get('device_port', 1400)
        self.browse_count = config.get('browse_count', 100)

        self.discovery = discovery or SpeakerDiscovery(config, cache)
        self.resolver = resolver or TopologyResolver(config)
        self.speaker_factory = speaker_factory or self._create_speaker

        self._speakers: Optional[Dict[str, Speaker]] = None
        self._controllers: Optional[Dict[str, Controller]] = None
        self._playlists: Optional[List[Playlist]] = None
        self._lock = asyncio.Lock()
        self.last_discovery: Optional[datetime] = None

    def _create_speaker(self, ip: str) -> Speaker:
        return Speaker(ip, port=self.device_port, request_timeout=self.request_timeout)

    # ================== SNAPSHOT ==================

    async def get_speakers(self) -> Dict[str, Speaker]:
        """All discovered speakers keyed by address; discovers on first call only"""
        if self._speakers is not None:
            return self._speakers

        async with self._lock:
            if self._speakers is None:
                self._speakers = await self._build_snapshot()
        return self._speakers

    async def _build_snapshot(self) -> Dict[str, Speaker]:
        logger.info("[DISCOVERY] Starting discovery pass...")

        addresses = await self.discovery.discover_addresses()
        registry = build_registry(addresses, self.speaker_factory)
        await self.resolver.resolve(registry)

        self.last_discovery = datetime.now(timezone.utc)
        groups = {s.group for s in registry.values() if s.group is not None}
        logger.info(f"[SUCCESS] Network ready: {len(registry)} speakers in {len(groups)} groups")
        return registry

    async def discover_addresses(self) -> List[str]:
        """The cacheable discovery step on its own: broadcast and parse, no topology"""
        return await self.discovery.discover_addresses()

    def reset(self):
        """Forget the in-memory snapshot; the next lookup runs a new pass"""
        self._speakers = None
        self._controllers = None
        self._playlists = None

    async def refresh(self) -> Dict[str, Speaker]:
        """Bypass every cache and rediscover the network"""
        async with self._lock:
            self.reset()
            await self.discovery.invalidate_cache()
        return await self.get_speakers()

    # ================== SPEAKERS & CONTROLLERS ==================

    async def get_controllers(self) -> Dict[str, Controller]:
        """Coordinator speakers as controllers, keyed by address"""
        if self._controllers is None:
            self._controllers = controllers_for(await self.get_speakers())
        return self._controllers

    async def get_controller(self) -> Controller:
        controllers = await self.get_controllers()
        if not controllers:
            raise NoControllersError()
        return next(iter(controllers.values()))

    async def get_speaker_by_room(self, room: str) -> Speaker:
        speakers = await self.get_speakers()
        for speaker in speakers.values():
            if speaker.room == room:
                return speaker

        raise NotFoundError(f"No speaker found with the room name '{room}'")

    async def get_speakers_by_room(self, room: str) -> List[Speaker]:
        speakers = await self.get_speakers()
        matches = [speaker for speaker in speakers.values() if speaker.room == room]

        if not matches:
            raise NotFoundError(f"No speakers found with the room name '{room}'")
        return matches

    async def get_controller_by_room(self, room: str) -> Controller:
        """The controller governing the group that this room belongs to"""
        speaker = await self.get_speaker_by_room(room)
        group = speaker.get_group()

        controllers = await self.get_controllers()
        for controller in controllers.values():
            if controller.get_group() == group:
                return controller

        raise NotFoundError(f"No controller found with the room name '{room}'")

    # ================== CONTENT ==================

    async def get_playlists(self) -> List[Playlist]:
        if self._playlists is not None:
            return self._playlists

        speakers = await self.get_speakers()
        controller = await self.get_controller()
        result = await controller.soap("ContentDirectory", "Browse", {
            "ObjectID": "SQ:",
            "BrowseFlag": "BrowseDirectChildren",
            "Filter": "",
            "StartingIndex": 0,
            "RequestedCount": self.browse_count,
            "SortCriteria": "",
        })

        playlists = parse_playlists(result.get("Result", ""))
        logger.info(f"Loaded {len(playlists)} playlists from {controller.ip}")

        # Only memoize into the snapshot the controller came from
        if self._speakers is speakers:
            self._playlists = playlists
        return playlists

    async def get_playlist_by_name(self, name: str) -> Playlist:
        playlists = await self.get_playlists()
        return find_by_name(playlists, name, lambda p: p.name, "playlist")

    async def get_radio(self) -> Radio:
        return Radio(await self.get_controller(), requested_count=self.browse_count)

    # ================== MONITORING ==================

    def get_status(self) -> Dict[str, Any]:
        """Snapshot summary for monitoring"""
        speakers = self._speakers or {}
        result = self.discovery.last_result
        return {
            "discovered": self._speakers is not None,
            "speaker_count": len(speakers),
            "controller_count": sum(1 for s in speakers.values() if s.is_coordinator()),
            "group_count": len({s.group for s in speakers.values() if s.group is not None}),
            "cache_enabled": self.discovery.cache is not None,
            "last_discovery": self.last_discovery.isoformat() if self.last_discovery else None,
            "discovery_method": result.method if result else None,
            "discovery_duration_seconds": result.duration_seconds if result else None,
        }
