"""
Speaker and Controller device handles
Addressable by IP; carry the group topology attributes assigned during discovery
"""

import asyncio
import logging
from typing import Dict, Optional, Any
from xml.etree import ElementTree

import aiohttp

from exceptions import DeviceRequestError
from http_helper import build_soap_request, create_speaker_session

logger = logging.getLogger(__name__)

DEVICE_PORT = 1400

# service name -> control path
SERVICE_CONTROL_PATHS = {
    'ContentDirectory': '/MediaServer/ContentDirectory/Control',
    'AVTransport': '/MediaRenderer/AVTransport/Control',
    'RenderingControl': '/MediaRenderer/RenderingControl/Control',
    'DeviceProperties': '/DeviceProperties/Control',
    'ZoneGroupTopology': '/ZoneGroupTopology/Control',
}


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


class Speaker:
    """A single physical speaker on the network"""

    def __init__(self, ip: str, port: int = DEVICE_PORT, request_timeout: float = 5):
        self.ip = ip
        self.port = port
        self.request_timeout = request_timeout

        # Assigned by the topology resolver
        self.room: Optional[str] = None
        self.group: Optional[str] = None
        self.uuid: Optional[str] = None
        self.coordinator = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ip={self.ip!r}, room={self.room!r}, group={self.group!r})"

    @property
    def base_url(self) -> str:
        return f"http://{self.ip}:{self.port}"

    def set_topology(self, attributes: Dict[str, str], room: Optional[str] = None):
        """Apply one ZonePlayer topology entry to this speaker"""
        self.room = room
        self.group = attributes.get('group')
        self.uuid = attributes.get('uuid')
        self.coordinator = attributes.get('coordinator') == 'true'

    def is_coordinator(self) -> bool:
        return self.coordinator

    def get_group(self) -> Optional[str]:
        return self.group

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ip': self.ip,
            'room': self.room,
            'group': self.group,
            'uuid': self.uuid,
            'coordinator': self.coordinator
        }

    async def get_xml(self, path: str) -> ElementTree.Element:
        """Fetch an XML document from the speaker's HTTP interface"""
        url = f"{self.base_url}{path}"
        try:
            async with create_speaker_session(self.request_timeout) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise DeviceRequestError(self.ip, f"HTTP {response.status} for {path}")
                    text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeviceRequestError(self.ip, f"GET {path}: {e}") from e

        try:
            return ElementTree.fromstring(text)
        except ElementTree.ParseError as e:
            raise DeviceRequestError(self.ip, f"Invalid XML from {path}: {e}") from e

    async def soap(self, service: str, action: str, params: Dict[str, Any]) -> Dict[str, str]:
        """
        Invoke a SOAP action on one of the speaker's UPnP services.
        Returns the children of the <action>Response element as a dict.
        """
        control_path = SERVICE_CONTROL_PATHS.get(service)
        if control_path is None:
            raise ValueError(f"Unknown service: {service}")

        data, headers = build_soap_request(service, action, params)

        logger.debug(f"SOAP {service}.{action} -> {self.ip}")
        try:
            async with create_speaker_session(self.request_timeout) as session:
                async with session.post(f"{self.base_url}{control_path}",
                                        data=data, headers=headers) as response:
                    status = response.status
                    text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeviceRequestError(self.ip, f"{service}.{action}: {e}") from e

        try:
            root = ElementTree.fromstring(text)
        except ElementTree.ParseError as e:
            raise DeviceRequestError(self.ip, f"{service}.{action} returned invalid XML (HTTP {status})") from e

        if root.find(".//{*}Fault") is not None:
            error_code = (root.findtext(".//{*}errorCode") or "").strip()
            raise DeviceRequestError(self.ip, f"{service}.{action} UPnPError {error_code or 'unknown'}")
        if status != 200:
            raise DeviceRequestError(self.ip, f"{service}.{action} HTTP {status}")

        body = root.find(f".//{{*}}{action}Response")
        if body is None:
            return {}
        return {_local_name(child.tag): child.text or "" for child in body}


class Controller(Speaker):
    """Handle for the coordinator speaker of a group"""

    def __init__(self, speaker: Speaker):
        super().__init__(speaker.ip, speaker.port, speaker.request_timeout)
        self.room = speaker.room
        self.group = speaker.group
        self.uuid = speaker.uuid
        self.coordinator = speaker.coordinator
        self.speaker = speaker

    async def get_xml(self, path: str) -> ElementTree.Element:
        return await self.speaker.get_xml(path)

    async def soap(self, service: str, action: str, params: Dict[str, Any]) -> Dict[str, str]:
        return await self.speaker.soap(service, action, params)
