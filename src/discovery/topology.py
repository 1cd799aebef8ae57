"""
Topology resolver: annotates registered speakers with room, group and coordinator role
"""

import logging
from typing import Dict
from xml.etree import ElementTree

from devices.speaker import Speaker, Controller
from .models import extract_address

logger = logging.getLogger(__name__)

TOPOLOGY_PATH = '/status/topology'

def apply_topology(registry: Dict[str, Speaker], document: ElementTree.Element) -> int:
    """
    Annotate speakers from a topology document.

    Only speakers already in the registry are touched; entries pointing at
    unknown addresses are ignored. Returns the number of speakers annotated.
    Re-applying the same document leaves the registry unchanged.
    """
    if _local_name(document.tag) == 'ZonePlayers':
        container = document
    else:
        container = document.find('.//{*}ZonePlayers')
    if container is None:
        logger.warning("[TOPOLOGY] Document has no ZonePlayers element")
        return 0

    annotated = 0
    for player in container.findall('{*}ZonePlayer'):
        attributes = dict(player.attrib)
        address = extract_address(attributes.get('location'))
        if address is None or address not in registry:
            logger.debug(f"[TOPOLOGY] Ignoring entry for unknown address {address}")
            continue

        room = (player.text or '').strip() or None
        registry[address].set_topology(attributes, room=room)
        annotated += 1

    return annotated


def controllers_for(registry: Dict[str, Speaker]) -> Dict[str, Controller]:
    """One controller per coordinator speaker, keyed by address"""
    return {
        address: Controller(speaker)
        for address, speaker in registry.items()
        if speaker.is_coordinator()
    }


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


class TopologyResolver:
    """Queries one speaker for the group topology and applies it to the registry"""

    def __init__(self, config: dict = None):
        config = config or {}
        self.topology_path = config.get('topology_path', TOPOLOGY_PATH)

    async def resolve(self, registry: Dict[str, Speaker]) -> Dict[str, Speaker]:
        # Any speaker can answer for the whole network
        speaker = next(iter(registry.values()))
        logger.info(f"[TOPOLOGY] Fetching topology from {speaker.ip}")

        document = await speaker.get_xml(self.topology_path)
        annotated = apply_topology(registry, document)

        unjoined = [s.ip for s in registry.values() if s.group is None]
        logger.info(f"[TOPOLOGY] Annotated {annotated}/{len(registry)} speakers")
        if unjoined:
            logger.info(f"[TOPOLOGY] Not in any group yet: {', '.join(unjoined)}")

        return registry
