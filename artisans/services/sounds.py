"""
Notification sound cues.

The enabled flag is a persisted user preference read through a key-value
store, and it is passed explicitly to whoever plays sounds.
"""
import logging
from typing import Protocol

from ..core.errors import TransientNetworkError
from .kv_store import KeyValueStore
from .priority import SoundCue, sound_for

logger = logging.getLogger(__name__)

SOUNDS_ENABLED_KEY = "notification_sounds_enabled"

SOUND_FILES = {
    SoundCue.URGENT: "/sounds/notification-urgent.mp3",
    SoundCue.HIGH: "/sounds/notification-high.mp3",
    SoundCue.NORMAL: "/sounds/notification-normal.mp3",
}

VOLUMES = {
    SoundCue.URGENT: 0.7,
    SoundCue.HIGH: 0.5,
    SoundCue.NORMAL: 0.3,
}


class SoundSettings:
    """Persisted `sounds enabled` preference. Enabled unless explicitly turned off."""

    def __init__(self, store: KeyValueStore, key: str = SOUNDS_ENABLED_KEY):
        self.store = store
        self.key = key

    @property
    def enabled(self) -> bool:
        return self.store.get(self.key) != "false"

    def set_enabled(self, enabled: bool) -> None:
        self.store.set(self.key, "true" if enabled else "false")


class SoundPlayer(Protocol):

    def play(self, cue: SoundCue, source: str, volume: float) -> None: ...


class LoggingSoundPlayer:
    """Server-side player: there is no audio device, so the cue is logged."""

    def play(self, cue: SoundCue, source: str, volume: float) -> None:
        logger.info("Playing %s (%s at volume %.1f)", cue.value, source, volume)


def sounds_enabled(settings: SoundSettings) -> bool:
    """Read the preference for playback. An unreachable store means no sound."""
    try:
        return settings.enabled
    except TransientNetworkError as e:
        logger.warning("Sound preference unavailable, staying silent: %s", e.message)
        return False


def play_notification_sound(priority, settings: SoundSettings, player: SoundPlayer) -> SoundCue:
    """
    Play the cue for `priority` and return what was (or would have been) played.

    Returns SoundCue.NONE when sounds are disabled (or the preference cannot
    be read) or the priority is silent.
    A failing player is logged and never propagates.
    """
    if not sounds_enabled(settings):
        return SoundCue.NONE

    cue = sound_for(priority)
    if cue is SoundCue.NONE:
        return cue

    try:
        player.play(cue, SOUND_FILES[cue], VOLUMES[cue])
    except Exception as e:
        logger.error("Failed to play sound %s: %s", cue.value, e)
    return cue
