"""
Device registry: one speaker handle per discovered address
"""

import logging
from typing import Callable, Dict, Iterable

from devices.speaker import Speaker
from exceptions import NoDevicesFoundError

logger = logging.getLogger(__name__)

def build_registry(addresses: Iterable[str],
                   speaker_factory: Callable[[str], Speaker] = Speaker) -> Dict[str, Speaker]:
    """
    Build the address -> Speaker map for a discovery pass.
    No network I/O happens here.
    """
    registry = {}
    for address in addresses:
        if address not in registry:
            registry[address] = speaker_factory(address)

    if not registry:
        raise NoDevicesFoundError()

    logger.debug(f"Registry built with {len(registry)} speakers: {', '.join(registry)}")
    return registry
