"""
Network module: speaker network snapshot and lookups
"""

from .manager import SpeakerNetwork
from .radio import Radio
from .lookup import find_by_name

__all__ = ['SpeakerNetwork', 'Radio', 'find_by_name']
