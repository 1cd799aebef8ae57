"""
Content directory value objects and DIDL-Lite parsing
"""

import logging
from typing import List
from dataclasses import dataclass
from xml.etree import ElementTree

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Playlist:
    """A saved playlist on the content directory"""
    id: str
    name: str

@dataclass(frozen=True)
class Stream:
    """A radio favourite (station or show)"""
    uri: str
    title: str


def _child_text(element: ElementTree.Element, tag: str) -> str:
    child = element.find(f"{{*}}{tag}")
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_didl(result: str) -> ElementTree.Element:
    try:
        return ElementTree.fromstring(result)
    except ElementTree.ParseError as e:
        logger.warning(f"Unparsable content directory result: {e}")
        return ElementTree.Element("DIDL-Lite")


def parse_playlists(result: str) -> List[Playlist]:
    """Build playlists from the container tags of a Browse result"""
    playlists = []
    for container in _parse_didl(result).findall(".//{*}container"):
        playlists.append(Playlist(
            id=container.get("id", ""),
            name=_child_text(container, "title")
        ))
    return playlists


def parse_streams(result: str, tag_name: str) -> List[Stream]:
    """Build streams from the item or container tags of a Browse result"""
    streams = []
    for tag in _parse_didl(result).findall(f".//{{*}}{tag_name}"):
        streams.append(Stream(
            uri=_child_text(tag, "res"),
            title=_child_text(tag, "title")
        ))
    return streams
