"""
Device handles and content directory models
"""

from .speaker import Speaker, Controller
from .models import Playlist, Stream, parse_playlists, parse_streams

__all__ = ['Speaker', 'Controller', 'Playlist', 'Stream', 'parse_playlists', 'parse_streams']
