"""
Radio favourites (stations and shows) from the content directory
"""

import logging
from typing import List

from devices.models import Stream, parse_streams
from devices.speaker import Controller
from .lookup import find_by_name

logger = logging.getLogger(__name__)

# Favourite type keys
STATIONS = 2
SHOWS = 1

class Radio:
    """Favourite radio stations and shows, read through a controller"""

    def __init__(self, controller: Controller, requested_count: int = 100):
        self.controller = controller
        self.requested_count = requested_count

    async def _get_favourites(self, favourite_type: int) -> List[Stream]:
        result = await self.controller.soap("ContentDirectory", "Browse", {
            "ObjectID": f"FV/{favourite_type}",
            "BrowseFlag": "BrowseDirectChildren",
            "Filter": "",
            "StartingIndex": 0,
            "RequestedCount": self.requested_count,
            "SortCriteria": "",
        })

        # Stations are items, shows are containers
        tag_name = "item" if favourite_type == STATIONS else "container"
        streams = parse_streams(result.get("Result", ""), tag_name)
        logger.debug(f"Loaded {len(streams)} favourite {tag_name}s from {self.controller.ip}")
        return streams

    async def get_favourite_stations(self) -> List[Stream]:
        return await self._get_favourites(STATIONS)

    async def get_favourite_station(self, name: str) -> Stream:
        """
        Get the favourite radio station with the specified name.
        Falls back to a case-insensitive match when no exact one exists.
        """
        stations = await self.get_favourite_stations()
        return find_by_name(stations, name, lambda s: s.title, "radio station")

    async def get_favourite_shows(self) -> List[Stream]:
        return await self._get_favourites(SHOWS)

    async def get_favourite_show(self, name: str) -> Stream:
        """
        Get the favourite radio show with the specified name.
        Falls back to a case-insensitive match when no exact one exists.
        """
        shows = await self.get_favourite_shows()
        return find_by_name(shows, name, lambda s: s.title, "radio show")
