"""
Services module for the speaker server orchestrator
"""

from .speaker_server import SpeakerServer

__all__ = ['SpeakerServer']
