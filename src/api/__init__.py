"""
API module for speaker network lookups and monitoring
"""

from .main_api import SpeakerAPI
from .speaker_routes import create_speaker_routes
from .system_routes import create_system_routes

__all__ = ['SpeakerAPI', 'create_speaker_routes', 'create_system_routes']
