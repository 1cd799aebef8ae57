"""
Main FastAPI application setup

Local HTTP API for the Speaker Network Server
Read-only access to discovered speakers, groups, playlists and radio favourites
"""

from fastapi import FastAPI
from typing import Dict
import logging

# Import modular route factories
from .speaker_routes import create_speaker_routes
from .system_routes import create_system_routes

logger = logging.getLogger(__name__)


class SpeakerAPI:
    """Local HTTP API over a SpeakerNetwork"""

    def __init__(self, network, config: Dict):
        self.network = network
        self.config = config
        self.app = FastAPI(
            title="Speaker Network Local Server",
            description="Local API for speaker discovery, group topology and content lookups",
            version="1.0.0"
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup FastAPI routes using modular approach"""
        speaker_router = create_speaker_routes(self.network)
        system_router = create_system_routes(self.network)

        self.app.include_router(speaker_router)
        self.app.include_router(system_router)
