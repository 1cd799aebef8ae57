"""
Discovery data structures and models
"""

from typing import Dict, List, NamedTuple, Optional
from dataclasses import dataclass
from urllib.parse import urlparse


class RawReply(NamedTuple):
    """One datagram received during a discovery pass"""
    source_address: str
    payload: bytes


def extract_address(location: Optional[str]) -> Optional[str]:
    """
    Extract the device host from a location URL.
    Shared by discovery replies and topology entries so both phases key
    speakers identically.
    """
    if not location:
        return None
    try:
        host = urlparse(location.strip()).hostname
    except ValueError:
        return None
    return host or None


@dataclass(frozen=True)
class DiscoveryRecord:
    """A validated SSDP reply: unique service name plus location URL"""
    usn: str
    location: str
    address: str

    @classmethod
    def from_headers(cls, headers: Dict[str, str]) -> Optional['DiscoveryRecord']:
        """Build a record from a lowercased header map, or None if incomplete"""
        usn = headers.get('usn')
        location = headers.get('location')
        if not usn or not location:
            return None

        address = extract_address(location)
        if not address:
            return None

        return cls(usn=usn, location=location, address=address)


@dataclass
class DiscoveryResult:
    """Results from one discovery pass"""
    addresses: List[str]
    method: str  # "udp_multicast", "cache"
    duration_seconds: float
    replies_received: int = 0
    unique_devices: int = 0
