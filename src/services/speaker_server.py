"""
Speaker Server - Main orchestrator for discovery, cache and API services
"""

import logging
from typing import Optional
import uvicorn

# Local imports
from config_loader import load_config, setup_logging
from cache.manager import DiscoveryCache
from network.manager import SpeakerNetwork
from api.main_api import SpeakerAPI
from exceptions import SpeakerNetworkError

logger = logging.getLogger(__name__)

class SpeakerServer:
    """Main server wiring the discovery cache, speaker network and HTTP API"""

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config = load_config(config_path)
        setup_logging(self.config)

        self.cache: Optional[DiscoveryCache] = None
        if self.config['cache'].get('enabled', False):
            self.cache = DiscoveryCache(self.config)

        self.network = SpeakerNetwork(self.config['network'], cache=self.cache)
        self.api = SpeakerAPI(self.network, self.config)
        self.running = False
        self.stopped = False

    async def start(self):
        """Start all server services"""
        logger.info("Starting Speaker Network Local Server...")

        try:
            await self.start_cache()
            await self.warm_up()
            self.running = True

            await self._start_api_server()

        except Exception as e:
            logger.error(f"Server startup failed: {e}")
            await self.stop()
            raise

    async def start_cache(self):
        if self.cache:
            await self.cache.initialize()
            logger.info("Discovery cache initialized")
        else:
            logger.info("[LOCAL] Discovery cache disabled - every start broadcasts")

    async def warm_up(self):
        """
        Run the first discovery pass before serving requests.
        An empty or unreachable network is logged, not fatal; the API retries on demand.
        """
        try:
            speakers = await self.network.get_speakers()
            controllers = await self.network.get_controllers()
            rooms = sorted({s.room for s in speakers.values() if s.room})
            logger.info(f"[SUCCESS] {len(speakers)} speakers, {len(controllers)} controllers")
            if rooms:
                logger.info(f"[ROOMS] {', '.join(rooms)}")
        except SpeakerNetworkError as e:
            logger.warning(f"[WARNING] Initial discovery failed: {e}")

    async def stop(self):
        """Stop all server services gracefully; later calls are no-ops"""
        if self.stopped:
            return
        self.stopped = True
        logger.info("Stopping server...")
        self.running = False

        if self.cache:
            await self.cache.close()
        logger.info("Server stopped")

    async def _start_api_server(self):
        """Start the FastAPI server"""
        config = uvicorn.Config(
            self.api.app,
            host=self.config['api']['host'],
            port=self.config['api']['port'],
            log_level="info",
            access_log=False  # We handle our own logging
        )

        server = uvicorn.Server(config)

        logger.info(f"Starting API server on {self.config['api']['host']}:{self.config['api']['port']}")
        logger.info(f"API documentation: http://localhost:{self.config['api']['port']}/docs")

        await server.serve()
