"""
Tests for the SpeakerNetwork context: memoization, lookups, content and caching
"""

import asyncio
import pytest

from conftest import InMemoryCache, didl_containers, didl_items
from devices.models import Playlist
from devices.speaker import Controller
from exceptions import NoControllersError, NoDevicesFoundError, NotFoundError
from network.lookup import find_by_name
from network.radio import Radio


class TestFindByName:
    """Tests for two-pass name resolution"""

    def test_exact_match_wins(self):
        items = ["Jazz", "jazz", "Rock"]

        assert find_by_name(items, "Jazz", str) is items[0]

    def test_exact_match_after_rough_match_wins(self):
        items = [Playlist("SQ:0", "jazz"), Playlist("SQ:1", "Jazz")]

        assert find_by_name(items, "Jazz", lambda p: p.name).id == "SQ:1"

    def test_case_insensitive_fallback(self):
        assert find_by_name(["Jazz", "jazz", "Rock"], "ROCK", str) == "Rock"

    def test_first_rough_match_returned(self):
        items = [Playlist("SQ:0", "rock"), Playlist("SQ:1", "Rock")]

        assert find_by_name(items, "ROCK", lambda p: p.name).id == "SQ:0"

    def test_no_match(self):
        with pytest.raises(NotFoundError, match="No playlist found with the name 'Blues'"):
            find_by_name(["Jazz", "jazz", "Rock"], "Blues", str, "playlist")


class TestSpeakerDiscoveryPass:
    """Tests for the discovery snapshot"""

    @pytest.mark.asyncio
    async def test_discovers_once(self, harness):
        network = harness.build()

        first = await network.get_speakers()
        second = await network.get_speakers()

        assert first is second
        assert harness.broadcaster.calls == 1
        assert len([r for r in harness.requests if r.startswith("GET")]) == 1

    @pytest.mark.asyncio
    async def test_snapshot_contents(self, harness):
        network = harness.build()

        speakers = await network.get_speakers()

        assert list(speakers) == ["192.168.1.10", "192.168.1.11", "192.168.1.12"]
        assert speakers["192.168.1.11"].room == "Kitchen"
        assert "192.168.1.99" not in speakers

    @pytest.mark.asyncio
    async def test_zero_replies_raise(self, harness):
        harness.broadcaster.replies = []
        network = harness.build()

        with pytest.raises(NoDevicesFoundError):
            await network.get_speakers()

    @pytest.mark.asyncio
    async def test_failed_pass_is_retried_on_next_call(self, harness):
        harness.broadcaster.replies = []
        network = harness.build()
        with pytest.raises(NoDevicesFoundError):
            await network.get_speakers()

        harness.broadcaster.replies = harness.replies
        speakers = await network.get_speakers()

        assert len(speakers) == 3
        assert harness.broadcaster.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_share_one_pass(self, harness):
        harness.broadcaster.delay = 0.05
        network = harness.build()

        results = await asyncio.gather(*(network.get_speakers() for _ in range(5)))

        assert harness.broadcaster.calls == 1
        assert all(result is results[0] for result in results)
        assert len([r for r in harness.requests if r.startswith("GET")]) == 1

    @pytest.mark.asyncio
    async def test_separate_networks_are_isolated(self, harness):
        await harness.build().get_speakers()
        await harness.build().get_speakers()

        assert harness.broadcaster.calls == 2

    @pytest.mark.asyncio
    async def test_reset_forces_new_pass(self, harness):
        network = harness.build()
        await network.get_speakers()

        network.reset()
        await network.get_speakers()

        assert harness.broadcaster.calls == 2

    @pytest.mark.asyncio
    async def test_status(self, harness):
        network = harness.build()
        assert network.get_status()["discovered"] is False

        await network.get_speakers()
        status = network.get_status()

        assert status["discovered"] is True
        assert status["speaker_count"] == 3
        assert status["controller_count"] == 2
        assert status["group_count"] == 2
        assert status["cache_enabled"] is False
        assert status["discovery_method"] == "udp_multicast"


class TestControllers:
    """Tests for controller lookups"""

    @pytest.mark.asyncio
    async def test_controllers_match_groups(self, harness):
        network = harness.build()

        controllers = await network.get_controllers()
        speakers = await network.get_speakers()
        groups = {s.group for s in speakers.values() if s.group is not None}

        assert len(controllers) == len(groups)
        for group in groups:
            coordinators = [s for s in speakers.values() if s.group == group and s.is_coordinator()]
            assert len(coordinators) == 1

    @pytest.mark.asyncio
    async def test_get_controller_returns_first(self, harness):
        controller = await harness.build().get_controller()

        assert isinstance(controller, Controller)
        assert controller.ip == "192.168.1.10"

    @pytest.mark.asyncio
    async def test_no_coordinators_raises(self, harness):
        harness.topology = harness.topology.replace('coordinator="true"', 'coordinator="false"')
        network = harness.build()

        with pytest.raises(NoControllersError):
            await network.get_controller()

    @pytest.mark.asyncio
    async def test_controller_by_room_for_non_coordinator(self, harness):
        network = harness.build()

        controller = await network.get_controller_by_room("Kitchen")
        kitchen = await network.get_speaker_by_room("Kitchen")

        assert kitchen.is_coordinator() is False
        assert controller.group == kitchen.group
        assert controller.ip == "192.168.1.10"
        assert controller.room == "Living Room"

    @pytest.mark.asyncio
    async def test_controller_by_room_without_controller(self, harness):
        harness.topology = harness.topology.replace(
            'group="RINCON_C1400:5" coordinator="true"', 'group="RINCON_C1400:5" coordinator="false"'
        )
        network = harness.build()

        with pytest.raises(NotFoundError, match="No controller found with the room name 'Bedroom'"):
            await network.get_controller_by_room("Bedroom")


class TestRoomLookups:
    """Tests for exact room name lookups"""

    @pytest.mark.asyncio
    async def test_speaker_by_room(self, harness):
        speaker = await harness.build().get_speaker_by_room("Bedroom")

        assert speaker.ip == "192.168.1.12"

    @pytest.mark.asyncio
    async def test_room_lookup_is_case_sensitive(self, harness):
        network = harness.build()

        with pytest.raises(NotFoundError):
            await network.get_speaker_by_room("bedroom")
        with pytest.raises(NotFoundError):
            await network.get_speakers_by_room("KITCHEN")

    @pytest.mark.asyncio
    async def test_speakers_by_room_returns_all_matches(self, harness):
        harness.topology = harness.topology.replace(">Bedroom<", ">Kitchen<")

        speakers = await harness.build().get_speakers_by_room("Kitchen")

        assert [s.ip for s in speakers] == ["192.168.1.11", "192.168.1.12"]

    @pytest.mark.asyncio
    async def test_unknown_room(self, harness):
        with pytest.raises(NotFoundError, match="No speakers found with the room name 'Attic'"):
            await harness.build().get_speakers_by_room("Attic")


class TestPlaylists:
    """Tests for playlist enumeration and lookup"""

    @pytest.mark.asyncio
    async def test_playlists_browsed_through_controller(self, harness):
        harness.soap_results["SQ:"] = didl_containers(["Jazz", "jazz", "Rock"])
        network = harness.build()

        playlists = await network.get_playlists()

        assert [p.name for p in playlists] == ["Jazz", "jazz", "Rock"]
        assert playlists[0].id == "SQ:0"
        assert "SOAP 192.168.1.10 ContentDirectory.Browse SQ:" in harness.requests

    @pytest.mark.asyncio
    async def test_playlists_memoized(self, harness):
        harness.soap_results["SQ:"] = didl_containers(["Jazz"])
        network = harness.build()

        await network.get_playlists()
        await network.get_playlists()

        assert len([r for r in harness.requests if r.startswith("SOAP")]) == 1

    @pytest.mark.asyncio
    async def test_playlists_from_replaced_snapshot_not_memoized(self, harness):
        harness.soap_results["SQ:"] = didl_containers(["Old"])
        network = harness.build()
        old_speaker = (await network.get_speakers())["192.168.1.10"]
        browse = old_speaker.soap

        async def browse_then_reset(service, action, params):
            result = await browse(service, action, params)
            network.reset()
            return result

        old_speaker.soap = browse_then_reset

        stale = await network.get_playlists()
        harness.soap_results["SQ:"] = didl_containers(["New"])
        fresh = await network.get_playlists()

        assert [p.name for p in stale] == ["Old"]
        assert [p.name for p in fresh] == ["New"]
        assert harness.broadcaster.calls == 2

    @pytest.mark.asyncio
    async def test_playlist_by_name(self, harness):
        harness.soap_results["SQ:"] = didl_containers(["Jazz", "jazz", "Rock"])
        network = harness.build()

        assert (await network.get_playlist_by_name("Jazz")).id == "SQ:0"
        assert (await network.get_playlist_by_name("ROCK")).name == "Rock"
        with pytest.raises(NotFoundError):
            await network.get_playlist_by_name("Blues")


class TestRadio:
    """Tests for radio favourites"""

    @pytest.mark.asyncio
    async def test_stations_and_shows(self, harness):
        harness.soap_results["FV/2"] = didl_items(["Jazz FM", "Classic Rock"])
        harness.soap_results["FV/1"] = didl_containers(["Morning Show"])
        radio = await harness.build().get_radio()

        stations = await radio.get_favourite_stations()
        shows = await radio.get_favourite_shows()

        assert isinstance(radio, Radio)
        assert [s.title for s in stations] == ["Jazz FM", "Classic Rock"]
        assert stations[0].uri == "x-sonosapi-stream:s0?sid=254"
        assert [s.title for s in shows] == ["Morning Show"]

    @pytest.mark.asyncio
    async def test_station_by_name(self, harness):
        harness.soap_results["FV/2"] = didl_items(["jazz fm", "Jazz FM"])
        radio = await harness.build().get_radio()

        assert (await radio.get_favourite_station("Jazz FM")).uri == "x-sonosapi-stream:s1?sid=254"
        assert (await radio.get_favourite_station("JAZZ FM")).uri == "x-sonosapi-stream:s0?sid=254"
        with pytest.raises(NotFoundError, match="radio station"):
            await radio.get_favourite_station("Talk")

    @pytest.mark.asyncio
    async def test_show_not_found(self, harness):
        radio = await harness.build().get_radio()

        with pytest.raises(NotFoundError, match="radio show"):
            await radio.get_favourite_show("Evening News")


class TestDiscoveryCache:
    """Tests for the cached discovery step"""

    @pytest.mark.asyncio
    async def test_cache_skips_broadcast_but_not_topology(self, harness):
        cache = InMemoryCache()

        await harness.build(cache=cache).get_speakers()
        second = harness.build(cache=cache)
        speakers = await second.get_speakers()

        assert harness.broadcaster.calls == 1
        assert cache.values["ip-addresses"] == ["192.168.1.10", "192.168.1.11", "192.168.1.12"]
        assert len([r for r in harness.requests if r.startswith("GET")]) == 2
        assert speakers["192.168.1.10"].is_coordinator() is True
        assert second.get_status()["discovery_method"] == "cache"

    @pytest.mark.asyncio
    async def test_empty_discovery_not_cached(self, harness):
        harness.broadcaster.replies = []
        cache = InMemoryCache()

        with pytest.raises(NoDevicesFoundError):
            await harness.build(cache=cache).get_speakers()

        assert "ip-addresses" not in cache.values

    @pytest.mark.asyncio
    async def test_discover_addresses_uses_cache(self, harness):
        cache = InMemoryCache()
        network = harness.build(cache=cache)

        first = await network.discover_addresses()
        second = await network.discover_addresses()

        assert first == second == ["192.168.1.10", "192.168.1.11", "192.168.1.12"]
        assert harness.broadcaster.calls == 1
        assert harness.requests == []

    @pytest.mark.asyncio
    async def test_refresh_invalidates_cache(self, harness):
        cache = InMemoryCache()
        network = harness.build(cache=cache)
        await network.get_speakers()

        speakers = await network.refresh()

        assert cache.invalidated == ["ip-addresses"]
        assert harness.broadcaster.calls == 2
        assert len(speakers) == 3
