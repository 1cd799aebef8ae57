"""
Speaker, room and content lookup API routes
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Optional
import logging

from exceptions import (
    SpeakerNetworkError, NotFoundError, NoDevicesFoundError, NoControllersError
)

logger = logging.getLogger(__name__)

# Response models
class SpeakerResponse(BaseModel):
    ip: str
    room: Optional[str] = None
    group: Optional[str] = None
    uuid: Optional[str] = None
    coordinator: bool = False

class PlaylistResponse(BaseModel):
    id: str
    name: str

class StreamResponse(BaseModel):
    uri: str
    title: str


def http_error(error: SpeakerNetworkError) -> HTTPException:
    """Map a network error to the matching HTTP status"""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, (NoDevicesFoundError, NoControllersError)):
        return HTTPException(status_code=503, detail=str(error))
    logger.error(f"Speaker network request failed: {error}")
    return HTTPException(status_code=502, detail=str(error))


def _speaker_response(speaker) -> SpeakerResponse:
    return SpeakerResponse(**speaker.to_dict())


def create_speaker_routes(network):
    """Create speaker and content routes bound to a SpeakerNetwork"""
    router = APIRouter(prefix="/api", tags=["speakers"])

    @router.get("/speakers", response_model=List[SpeakerResponse])
    async def list_speakers():
        """All discovered speakers"""
        try:
            speakers = await network.get_speakers()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [_speaker_response(s) for s in speakers.values()]

    @router.get("/controllers", response_model=List[SpeakerResponse])
    async def list_controllers():
        """One controller per group"""
        try:
            controllers = await network.get_controllers()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [_speaker_response(c) for c in controllers.values()]

    @router.get("/rooms/{room}/speakers", response_model=List[SpeakerResponse])
    async def room_speakers(room: str):
        try:
            speakers = await network.get_speakers_by_room(room)
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [_speaker_response(s) for s in speakers]

    @router.get("/rooms/{room}/controller", response_model=SpeakerResponse)
    async def room_controller(room: str):
        """Controller of the group the room belongs to"""
        try:
            controller = await network.get_controller_by_room(room)
        except SpeakerNetworkError as e:
            raise http_error(e)
        return _speaker_response(controller)

    @router.get("/playlists", response_model=List[PlaylistResponse])
    async def list_playlists():
        try:
            playlists = await network.get_playlists()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [PlaylistResponse(id=p.id, name=p.name) for p in playlists]

    @router.get("/playlists/{name}", response_model=PlaylistResponse)
    async def playlist_by_name(name: str):
        try:
            playlist = await network.get_playlist_by_name(name)
        except SpeakerNetworkError as e:
            raise http_error(e)
        return PlaylistResponse(id=playlist.id, name=playlist.name)

    @router.get("/radio/stations", response_model=List[StreamResponse])
    async def list_stations():
        try:
            radio = await network.get_radio()
            stations = await radio.get_favourite_stations()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [StreamResponse(uri=s.uri, title=s.title) for s in stations]

    @router.get("/radio/stations/{name}", response_model=StreamResponse)
    async def station_by_name(name: str):
        try:
            radio = await network.get_radio()
            station = await radio.get_favourite_station(name)
        except SpeakerNetworkError as e:
            raise http_error(e)
        return StreamResponse(uri=station.uri, title=station.title)

    @router.get("/radio/shows", response_model=List[StreamResponse])
    async def list_shows():
        try:
            radio = await network.get_radio()
            shows = await radio.get_favourite_shows()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return [StreamResponse(uri=s.uri, title=s.title) for s in shows]

    @router.get("/radio/shows/{name}", response_model=StreamResponse)
    async def show_by_name(name: str):
        try:
            radio = await network.get_radio()
            show = await radio.get_favourite_show(name)
        except SpeakerNetworkError as e:
            raise http_error(e)
        return StreamResponse(uri=show.uri, title=show.title)

    return router
