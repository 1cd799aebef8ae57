"""
Network discovery methods for speaker devices
SSDP multicast broadcast plus reply parsing and deduplication
"""

import socket
import select
import asyncio
import time
import logging
from typing import Dict, Iterable, List, Optional

from exceptions import TransportError
from .models import DiscoveryRecord, RawReply

logger = logging.getLogger(__name__)

SSDP_ADDRESS = '239.255.255.250'
SSDP_PORT = 1900
SEARCH_TARGET = 'urn:schemas-upnp-org:device:ZonePlayer:1'


class SSDPBroadcaster:
    """Sends one M-SEARCH and collects every reply inside the timeout window"""

    def __init__(self, config: dict):
        self.config = config
        self.discovery_timeout = config.get('discovery_timeout', 1.0)
        self.multicast_address = config.get('multicast_address', SSDP_ADDRESS)
        self.multicast_port = config.get('multicast_port', SSDP_PORT)
        self.multicast_ttl = config.get('multicast_ttl', 2)
        self.search_target = config.get('search_target', SEARCH_TARGET)
        self.buffer_size = config.get('buffer_size', 2048)

    def build_search_request(self) -> bytes:
        """M-SEARCH request for the configured service type"""
        message = (
            "M-SEARCH * HTTP/1.1\r\n"
            f"HOST: {self.multicast_address}:{self.multicast_port}\r\n"
            'MAN: "ssdp:discover"\r\n'
            "MX: 1\r\n"
            f"ST: {self.search_target}\r\n"
            "\r\n"
        )
        return message.encode('utf-8')

    async def discover(self, timeout: Optional[float] = None) -> List[RawReply]:
        """UDP multicast discovery, run in the default executor"""
        window = self.discovery_timeout if timeout is None else timeout
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._broadcast, window)

    def _broadcast(self, timeout: float) -> List[RawReply]:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            raise TransportError(f"Unable to create discovery socket: {e}") from e

        replies = []
        try:
            try:
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.multicast_ttl)
                sock.setblocking(False)
                logger.info(f"[DISCOVERY] Sending SSDP search to {self.multicast_address}:{self.multicast_port}")
                sock.sendto(self.build_search_request(), (self.multicast_address, self.multicast_port))
            except OSError as e:
                raise TransportError(f"Unable to send discovery request: {e}") from e

            deadline = time.monotonic() + timeout
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                readable, _, _ = select.select([sock], [], [], remaining)
                if not readable:
                    break
                try:
                    data, addr = sock.recvfrom(self.buffer_size)
                except BlockingIOError:
                    continue
                except OSError as e:
                    logger.warning(f"Error receiving discovery reply: {e}")
                    break
                replies.append(RawReply(addr[0], data))
        finally:
            sock.close()

        logger.info(f"[DISCOVERY] Received {len(replies)} replies in {timeout:.1f}s window")
        return replies


def parse_headers(block: str) -> Dict[str, str]:
    """Parse one header block into a lowercased key map"""
    headers = {}
    for line in block.splitlines():
        pos = line.find(':')
        if pos < 1:
            continue
        key = line[:pos].strip().lower()
        headers[key] = line[pos + 1:].strip()
    return headers


def split_blocks(payload: bytes) -> List[str]:
    """Split a payload into header blocks on blank-line boundaries"""
    text = payload.decode('utf-8', errors='ignore').replace('\r\n', '\n')
    return [block for block in text.split('\n\n') if block.strip()]


def parse_replies(replies: Iterable[RawReply]) -> List[DiscoveryRecord]:
    """
    Parse raw replies into discovery records, deduplicated by usn.
    First occurrence wins; incomplete blocks are dropped.
    """
    records = []
    seen = set()
    for reply in replies:
        for block in split_blocks(reply.payload):
            record = DiscoveryRecord.from_headers(parse_headers(block))
            if record is None:
                logger.debug(f"Skipping incomplete discovery reply from {reply.source_address}")
                continue
            if record.usn in seen:
                continue
            seen.add(record.usn)
            records.append(record)
    return records


def unique_addresses(records: Iterable[DiscoveryRecord]) -> List[str]:
    """Reduce discovery records to their device addresses, keeping order"""
    addresses = []
    for record in records:
        if record.address not in addresses:
            addresses.append(record.address)
    return addresses
