from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from ..core.database import get_session
from ..core.security import get_current_user
from ..models.users import User
from ..schemas.notifications import (
    MarkReadRequest,
    NotificationRead,
    NotificationSummary,
    SoundPreference,
    UnreadCount,
)
from ..services import notification_service
from ..services.kv_store import KeyValueStore, get_kv_store
from ..services.notification_center import NotificationCenter
from ..services.priority import SortOrder, SoundCue, sound_for
from ..services.sounds import SOUNDS_ENABLED_KEY, LoggingSoundPlayer, SoundSettings, sounds_enabled


router = APIRouter()


def get_sound_settings(
    current_user: User = Depends(get_current_user),
    store: KeyValueStore = Depends(get_kv_store),
) -> SoundSettings:
    return SoundSettings(store, key=f"{SOUNDS_ENABLED_KEY}:{current_user.id}")


@router.get("", response_model=List[NotificationRead])
async def list_notifications(
    order: SortOrder = Query(SortOrder.NEWEST),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return notification_service.list_notifications(session, current_user.id, order)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return UnreadCount(count=notification_service.unread_count(session, current_user.id))


@router.get("/summary", response_model=NotificationSummary)
async def summary(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    sound_settings: SoundSettings = Depends(get_sound_settings),
):
    """
    Badge state for the dropdown trigger: unread count, escalation emphasis,
    and the cue the most pressing unread notification would play.
    """
    center = NotificationCenter(sound_settings, LoggingSoundPlayer())
    center.replace(
        NotificationRead.model_validate(n)
        for n in notification_service.list_notifications(session, current_user.id)
    )

    unread = [n for n in center.sorted(SortOrder.PRIORITY) if not n.read]
    cue = SoundCue.NONE
    if unread and sounds_enabled(sound_settings):
        cue = sound_for(unread[0].priority)

    return NotificationSummary(
        unread_count=center.unread_count,
        has_urgent_unread=center.has_urgent_unread(),
        has_high_unread=center.has_high_unread(),
        emphasis=center.emphasis().value,
        sound=cue,
    )


@router.post("/mark-all-read")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    updated = notification_service.mark_all_as_read(session, current_user.id)
    return {"updated": updated}


@router.post("/mark-read")
async def mark_many_read(
    body: MarkReadRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    updated = notification_service.mark_many_as_read(session, current_user.id, body.ids)
    return {"updated": updated}


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    # Unknown or foreign ids are a no-op, not an error
    notification = notification_service.mark_as_read(session, current_user.id, notification_id)
    return {"updated": notification is not None}


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    notification_service.delete_notification(session, current_user.id, notification_id)


@router.get("/sound-preference", response_model=SoundPreference)
async def get_sound_preference(sound_settings: SoundSettings = Depends(get_sound_settings)):
    return SoundPreference(enabled=sound_settings.enabled)


@router.put("/sound-preference", response_model=SoundPreference)
async def set_sound_preference(
    preference: SoundPreference,
    sound_settings: SoundSettings = Depends(get_sound_settings),
):
    sound_settings.set_enabled(preference.enabled)
    return SoundPreference(enabled=sound_settings.enabled)
