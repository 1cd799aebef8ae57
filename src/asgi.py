"""
ASGI entry point for uvicorn
This module exposes the FastAPI app for use with uvicorn command line
"""

import logging
import os

from config_loader import load_config, setup_logging
from cache.manager import DiscoveryCache
from network.manager import SpeakerNetwork
from api.main_api import SpeakerAPI

# Load configuration
config = load_config(os.environ.get('CONFIG_FILE', 'config/config.yaml'))
setup_logging(config)

logger = logging.getLogger(__name__)

logger.info("Initializing application components...")

cache = DiscoveryCache(config) if config['cache'].get('enabled', False) else None
network = SpeakerNetwork(config['network'], cache=cache)

# Create API (which contains the FastAPI app)
api = SpeakerAPI(network, config)

# Expose the FastAPI app for uvicorn
app = api.app

@app.on_event("startup")
async def startup_event():
    """Initialize the discovery cache on startup"""
    logger.info("Starting up application...")
    if cache:
        await cache.initialize()
        logger.info("Discovery cache initialized")

@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on shutdown"""
    logger.info("Shutting down application...")
    if cache:
        await cache.close()
    logger.info("Application shut down complete")

logger.info("ASGI app ready for uvicorn")
