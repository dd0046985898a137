"""
In-process notification store for one signed-in identity.

Holds the notification list the dropdown renders, applies read mutations
synchronously in the order they arrive, and decides when to play a sound.
Responses from the notification source may complete out of order: every
fetch is tagged with a request id, and anything older than the newest
applied fetch (or older than the last cancel) is dropped.
"""
import itertools
import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..schemas.notifications import NotificationRead
from .priority import (
    NotificationPriority,
    SortOrder,
    SoundCue,
    priority_rank,
    sort_notifications,
)
from .sounds import SoundPlayer, SoundSettings, play_notification_sound

logger = logging.getLogger(__name__)

PROJECT_INVITATIONS_URL = "/project-invitations"


class Emphasis(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    NONE = "none"


class NotificationCenter:

    def __init__(self, sound_settings: SoundSettings, player: SoundPlayer):
        self.sound_settings = sound_settings
        self.player = player
        self._items: Dict[int, NotificationRead] = {}
        self._request_ids = itertools.count(1)
        self._last_request_id = 0
        self._applied_fetch_id = 0
        self._cancelled_before = 0
        # notification id -> request id of a mark-as-read no fetch has caught up with
        self._local_reads: Dict[int, int] = {}

    # Views

    @property
    def notifications(self) -> List[NotificationRead]:
        return self.sorted(SortOrder.NEWEST)

    def sorted(self, order=SortOrder.NEWEST) -> List[NotificationRead]:
        return sort_notifications(self._items.values(), order)

    def get(self, notification_id: int) -> Optional[NotificationRead]:
        return self._items.get(notification_id)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items.values() if not n.read)

    def has_urgent_unread(self) -> bool:
        return self._has_unread(NotificationPriority.URGENT)

    def has_high_unread(self) -> bool:
        return self._has_unread(NotificationPriority.HIGH)

    def _has_unread(self, priority: NotificationPriority) -> bool:
        return any(n.priority == priority.value and not n.read for n in self._items.values())

    def emphasis(self) -> Emphasis:
        if self.has_urgent_unread():
            return Emphasis.URGENT
        if self.has_high_unread():
            return Emphasis.HIGH
        return Emphasis.NONE

    @staticmethod
    def route_for(notification: NotificationRead) -> Optional[str]:
        if notification.type == "project_team":
            return PROJECT_INVITATIONS_URL
        return notification.action_url

    # Mutations

    def replace(self, notifications: Iterable[NotificationRead]) -> None:
        self._items = {n.id: n for n in notifications}

    def mark_as_read(self, notification_id: int) -> Optional[int]:
        """
        Mark one notification read.

        Returns the request id to settle with `apply_read_confirmation`, or
        None when the id is unknown or already read.
        """
        notification = self._items.get(notification_id)
        if notification is None or notification.read:
            return None
        request_id = self.begin_request()
        self._local_reads[notification_id] = request_id
        self._items[notification_id] = notification.model_copy(update={"read": True})
        return request_id

    def mark_all_as_read(self) -> int:
        request_id = self.begin_request()
        for notification_id, notification in list(self._items.items()):
            if not notification.read:
                self._local_reads[notification_id] = request_id
                self._items[notification_id] = notification.model_copy(update={"read": True})
        return request_id

    def remove(self, notification_id: int) -> None:
        self._items.pop(notification_id, None)
        self._local_reads.pop(notification_id, None)

    def receive(self, notification: NotificationRead) -> SoundCue:
        """Upsert a pushed notification and play its cue."""
        self._items[notification.id] = notification
        return play_notification_sound(notification.priority, self.sound_settings, self.player)

    def receive_batch(self, notifications: Iterable[NotificationRead]) -> SoundCue:
        """Upsert a batch and play a single cue for its most pressing urgent or high member."""
        notifications = list(notifications)
        for notification in notifications:
            self._items[notification.id] = notification

        pressing = [
            n for n in notifications
            if n.priority in (NotificationPriority.URGENT.value, NotificationPriority.HIGH.value)
        ]
        if not pressing:
            return SoundCue.NONE
        loudest = min(pressing, key=lambda n: priority_rank(n.priority))
        return play_notification_sound(loudest.priority, self.sound_settings, self.player)

    # Request bookkeeping

    def begin_request(self) -> int:
        self._last_request_id = next(self._request_ids)
        return self._last_request_id

    def cancel(self) -> None:
        """Drop every response to a request issued so far."""
        self._cancelled_before = self._last_request_id + 1

    def is_stale(self, request_id: int) -> bool:
        return request_id < self._cancelled_before or request_id < self._applied_fetch_id

    def apply_fetch(self, request_id: int, notifications: Iterable[NotificationRead]) -> bool:
        """
        Replace the list with a fetch result unless the response is stale.

        A fetch cannot reflect reads issued after it began, so those reads
        are re-applied to its result. Reads older than the fetch are settled:
        from here on the server's copy wins.
        """
        if self.is_stale(request_id):
            logger.debug("Ignoring stale notification fetch %s", request_id)
            return False

        pending = {
            notification_id: read_id
            for notification_id, read_id in self._local_reads.items()
            if read_id > request_id
        }
        items = {}
        for notification in notifications:
            if not notification.read and notification.id in pending:
                notification = notification.model_copy(update={"read": True})
            items[notification.id] = notification
        self._items = items
        self._local_reads = pending
        self._applied_fetch_id = request_id
        return True

    def apply_read_confirmation(self, request_id: int, notification: NotificationRead) -> bool:
        """
        Apply the server's echo of a mark-as-read. Returns False if a newer
        fetch superseded the echo.

        The local read stays recorded until a fetch issued after it lands,
        since an older fetch may still be in flight.
        """
        if self.is_stale(request_id):
            return False
        if notification.id in self._items:
            self._items[notification.id] = notification
        return True
