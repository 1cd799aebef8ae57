"""
Discovery module for speaker device discovery and topology resolution
"""

from .manager import SpeakerDiscovery
from .models import DiscoveryRecord, DiscoveryResult, RawReply, extract_address
from .network_discovery import SSDPBroadcaster, parse_replies, unique_addresses
from .registry import build_registry
from .topology import TopologyResolver, apply_topology, controllers_for

__all__ = [
    'SpeakerDiscovery', 'DiscoveryRecord', 'DiscoveryResult', 'RawReply', 'extract_address',
    'SSDPBroadcaster', 'parse_replies', 'unique_addresses', 'build_registry',
    'TopologyResolver', 'apply_topology', 'controllers_for'
]
