"""
Shared pytest fixtures for speaker network tests.

Provides:
- SSDP reply payload builders
- Topology and DIDL-Lite documents
- Fake broadcaster, speaker and cache collaborators
"""

import asyncio
import pytest
from typing import Dict, List
from xml.etree import ElementTree

from devices.speaker import Speaker
from discovery.manager import SpeakerDiscovery
from discovery.models import RawReply
from network.manager import SpeakerNetwork


TOPOLOGY_XML = """<?xml version="1.0" ?>
<ZPSupportInfo>
  <ZonePlayers>
    <ZonePlayer group="RINCON_A1400:12" coordinator="true" wirelessmode="0" uuid="RINCON_A1400"
        location="http://192.168.1.10:1400/xml/device_description.xml" version="63.2-88230">Living Room</ZonePlayer>
    <ZonePlayer group="RINCON_A1400:12" coordinator="false" wirelessmode="0" uuid="RINCON_B1400"
        location="http://192.168.1.11:1400/xml/device_description.xml" version="63.2-88230">Kitchen</ZonePlayer>
    <ZonePlayer group="RINCON_C1400:5" coordinator="true" wirelessmode="0" uuid="RINCON_C1400"
        location="http://192.168.1.12:1400/xml/device_description.xml" version="63.2-88230">Bedroom</ZonePlayer>
    <ZonePlayer group="RINCON_D1400:2" coordinator="true" wirelessmode="0" uuid="RINCON_D1400"
        location="http://192.168.1.99:1400/xml/device_description.xml" version="63.2-88230">Garage</ZonePlayer>
  </ZonePlayers>
</ZPSupportInfo>
"""

DIDL_HEADER = (
    '<DIDL-Lite xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:upnp="urn:schemas-upnp-org:metadata-1-0/upnp/" '
    'xmlns="urn:schemas-upnp-org:metadata-1-0/DIDL-Lite/">'
)


def ssdp_reply(ip: str, uuid: str) -> bytes:
    """One SSDP search response as a speaker sends it"""
    return (
        "HTTP/1.1 200 OK\r\n"
        "CACHE-CONTROL: max-age = 1800\r\n"
        "EXT:\r\n"
        f"LOCATION: http://{ip}:1400/xml/device_description.xml\r\n"
        "SERVER: Linux UPnP/1.0 Sonos/63.2-88230 (ZPS9)\r\n"
        "ST: urn:schemas-upnp-org:device:ZonePlayer:1\r\n"
        f"USN: uuid:{uuid}::urn:schemas-upnp-org:device:ZonePlayer:1\r\n"
        "\r\n"
    ).encode("utf-8")


def didl_containers(names: List[str]) -> str:
    body = "".join(
        f'<container id="SQ:{i}" parentID="SQ:" restricted="true">'
        f'<dc:title>{name}</dc:title>'
        f'<res protocolInfo="file:*:audio/mpegurl:*">file:///jffs/settings/savedqueues.rsq#{i}</res>'
        f'</container>'
        for i, name in enumerate(names)
    )
    return f"{DIDL_HEADER}{body}</DIDL-Lite>"


def didl_items(names: List[str]) -> str:
    body = "".join(
        f'<item id="FV:2/{i}" parentID="FV:2" restricted="false">'
        f'<dc:title>{name}</dc:title>'
        f'<res protocolInfo="x-rincon-mp3radio:*:*:*">x-sonosapi-stream:s{i}?sid=254</res>'
        f'</item>'
        for i, name in enumerate(names)
    )
    return f"{DIDL_HEADER}{body}</DIDL-Lite>"


class FakeBroadcaster:
    """Returns canned replies and counts discovery passes"""

    def __init__(self, replies: List[RawReply]):
        self.replies = replies
        self.calls = 0
        self.delay = 0
        self.error = None

    async def discover(self, timeout=None) -> List[RawReply]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.replies)


class FakeSpeaker(Speaker):
    """Speaker that answers topology and SOAP requests from memory"""

    def __init__(self, ip: str, topology: str, soap_results: Dict[str, str], log: List[str]):
        super().__init__(ip)
        self.topology = topology
        self.soap_results = soap_results
        self.log = log

    async def get_xml(self, path: str):
        self.log.append(f"GET {self.ip}{path}")
        return ElementTree.fromstring(self.topology)

    async def soap(self, service, action, params):
        self.log.append(f"SOAP {self.ip} {service}.{action} {params['ObjectID']}")
        result = self.soap_results.get(params["ObjectID"], f"{DIDL_HEADER}</DIDL-Lite>")
        if isinstance(result, Exception):
            raise result
        return {"Result": result}


class InMemoryCache:
    """compute_if_absent cache kept in a dict"""

    def __init__(self):
        self.values = {}
        self.invalidated = []

    async def compute_if_absent(self, key, producer):
        if key not in self.values:
            value = await producer()
            if value:
                self.values[key] = value
            return value
        return self.values[key]

    async def invalidate(self, key):
        self.invalidated.append(key)
        self.values.pop(key, None)


class NetworkHarness:
    """Builds SpeakerNetwork instances wired to fakes"""

    def __init__(self):
        self.replies = [
            RawReply("192.168.1.10", ssdp_reply("192.168.1.10", "RINCON_A1400")),
            RawReply("192.168.1.11", ssdp_reply("192.168.1.11", "RINCON_B1400")),
            RawReply("192.168.1.12", ssdp_reply("192.168.1.12", "RINCON_C1400")),
            # multicast retransmission
            RawReply("192.168.1.10", ssdp_reply("192.168.1.10", "RINCON_A1400")),
        ]
        self.topology = TOPOLOGY_XML
        self.soap_results = {}
        self.requests: List[str] = []
        self.broadcaster = FakeBroadcaster(self.replies)

    def speaker_factory(self, ip: str) -> FakeSpeaker:
        return FakeSpeaker(ip, self.topology, self.soap_results, self.requests)

    def build(self, cache=None) -> SpeakerNetwork:
        config = {'discovery_timeout': 1}
        discovery = SpeakerDiscovery(config, cache=cache, broadcaster=self.broadcaster)
        return SpeakerNetwork(config, discovery=discovery, speaker_factory=self.speaker_factory)


@pytest.fixture
def topology_document():
    return ElementTree.fromstring(TOPOLOGY_XML)


@pytest.fixture
def harness():
    return NetworkHarness()


@pytest.fixture
def registry():
    return {ip: Speaker(ip) for ip in ("192.168.1.10", "192.168.1.11", "192.168.1.12")}
