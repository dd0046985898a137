"""Sound preference, key-value store and token blacklist tests."""

import pytest
import redis

from artisans.core.errors import TransientNetworkError
from artisans.services import kv_store as kv_module
from artisans.services.kv_store import MemoryStore, RedisStore, TokenBlacklist, build_store
from artisans.services.priority import SoundCue
from artisans.services.sounds import (
    SOUND_FILES,
    SOUNDS_ENABLED_KEY,
    VOLUMES,
    SoundSettings,
    play_notification_sound,
)


class RecordingPlayer:
    def __init__(self):
        self.calls = []

    def play(self, cue, source, volume):
        self.calls.append((cue, source, volume))


def test_sounds_enabled_by_default():
    assert SoundSettings(MemoryStore()).enabled is True


def test_sound_preference_persists_in_store():
    store = MemoryStore()
    SoundSettings(store).set_enabled(False)

    assert store.get(SOUNDS_ENABLED_KEY) == "false"
    assert SoundSettings(store).enabled is False

    SoundSettings(store).set_enabled(True)
    assert SoundSettings(store).enabled is True


def test_preferences_are_scoped_by_key():
    store = MemoryStore()
    SoundSettings(store, key="sounds:1").set_enabled(False)
    assert SoundSettings(store, key="sounds:2").enabled is True


def test_play_uses_cue_file_and_volume():
    player = RecordingPlayer()
    cue = play_notification_sound("high", SoundSettings(MemoryStore()), player)

    assert cue is SoundCue.HIGH
    assert player.calls == [(SoundCue.HIGH, SOUND_FILES[SoundCue.HIGH], VOLUMES[SoundCue.HIGH])]


@pytest.mark.parametrize("priority", ["low", "info", "unheard-of"])
def test_silent_priorities_do_not_play(priority):
    player = RecordingPlayer()
    assert play_notification_sound(priority, SoundSettings(MemoryStore()), player) is SoundCue.NONE
    assert player.calls == []


def test_memory_store_setex_expires(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(kv_module.time, "monotonic", lambda: now[0])

    store = MemoryStore()
    store.setex("k", 60, "v")
    assert store.get("k") == "v"

    now[0] += 60
    assert store.get("k") is None


def test_memory_store_delete():
    store = MemoryStore()
    store.set("k", "v")
    store.delete("k")
    store.delete("missing")
    assert store.get("k") is None


def test_build_store_defaults_to_memory():
    assert isinstance(build_store("memory"), MemoryStore)
    assert isinstance(build_store("carrier-pigeon"), MemoryStore)


def test_token_blacklist():
    blacklist = TokenBlacklist(MemoryStore())
    assert not blacklist.contains("abc")

    blacklist.add("abc", 1800)
    assert blacklist.contains("abc")
    assert not blacklist.contains("abd")


class FakeRedis:
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def setex(self, key, expires_in, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class DownRedis:
    def get(self, key):
        raise redis.exceptions.ConnectionError("Connection refused")


def test_redis_store_delegates_to_client():
    store = RedisStore(client=FakeRedis())
    SoundSettings(store).set_enabled(False)
    assert SoundSettings(store).enabled is False


def test_redis_outage_is_transient():
    store = RedisStore(client=DownRedis())
    with pytest.raises(TransientNetworkError) as exc_info:
        SoundSettings(store).enabled
    assert exc_info.value.status_code == 503
    assert exc_info.value.to_dict()["retryable"] is True


def test_playback_stays_silent_when_preference_store_is_down():
    player = RecordingPlayer()
    settings = SoundSettings(RedisStore(client=DownRedis()))

    assert play_notification_sound("urgent", settings, player) is SoundCue.NONE
    assert player.calls == []


def test_memory_store_prunes_expired_entries_on_write(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(kv_module.time, "monotonic", lambda: now[0])

    store = MemoryStore()
    blacklist = TokenBlacklist(store)
    for i in range(5):
        blacklist.add(f"token-{i}", 60)

    now[0] += 61
    blacklist.add("fresh", 60)
    store.set("notification_sounds_enabled:1", "false")

    assert sorted(store._data) == ["blacklist:fresh", "notification_sounds_enabled:1"]
