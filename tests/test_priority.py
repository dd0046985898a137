"""Priority ranking, ordering and sound cue tests."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta

import pytest

from artisans.core.errors import ValidationError
from artisans.services.priority import (
    EMOJIS,
    FALLBACK_EMOJI,
    UNRANKED,
    NotificationPriority,
    SortOrder,
    SoundCue,
    extract_context,
    priority_rank,
    resolve_emoji,
    resolve_priority,
    sort_notifications,
    sound_for,
)

T0 = datetime(2024, 5, 1, 9, 0, 0)


@dataclass
class Item:
    id: int
    priority: str
    created_at: datetime
    read: bool = False


def test_priorities_are_totally_ordered():
    ordered = sorted(NotificationPriority, reverse=True)
    assert ordered[0] is NotificationPriority.INFO
    assert NotificationPriority.URGENT < NotificationPriority.HIGH < NotificationPriority.NORMAL
    assert NotificationPriority.NORMAL < NotificationPriority.LOW < NotificationPriority.INFO
    assert [p.rank for p in NotificationPriority] == [1, 2, 3, 4, 5]


def test_unknown_priority_ranks_after_every_known_one():
    assert priority_rank("critical") == UNRANKED
    assert priority_rank(None) == UNRANKED
    assert all(p.rank < UNRANKED for p in NotificationPriority)


def test_priority_sort_is_rank_ordered_with_newest_first_on_ties():
    rng = random.Random(7)
    values = ["urgent", "high", "normal", "low", "info", "someday"]
    items = [
        Item(i, rng.choice(values), T0 + timedelta(minutes=rng.randint(0, 30)))
        for i in range(60)
    ]

    result = sort_notifications(items, SortOrder.PRIORITY)

    for current, following in zip(result, result[1:]):
        assert priority_rank(current.priority) <= priority_rank(following.priority)
        if priority_rank(current.priority) == priority_rank(following.priority):
            assert current.created_at >= following.created_at


def test_low_then_urgent_scenario():
    items = [
        Item(1, "low", T0),
        Item(2, "urgent", T0 + timedelta(minutes=5)),
    ]
    assert [n.id for n in sort_notifications(items, "priority")] == [2, 1]
    assert [n.id for n in sort_notifications(items, "newest")] == [2, 1]


def test_orders_disagree_when_low_is_newer():
    items = [
        Item(1, "low", T0 + timedelta(minutes=5)),
        Item(2, "urgent", T0),
    ]
    assert [n.id for n in sort_notifications(items, SortOrder.PRIORITY)] == [2, 1]
    assert [n.id for n in sort_notifications(items, SortOrder.NEWEST)] == [1, 2]


def test_sort_keeps_input_order_for_full_ties():
    items = [Item(i, "normal", T0) for i in range(5)]
    assert [n.id for n in sort_notifications(items, SortOrder.PRIORITY)] == [0, 1, 2, 3, 4]


def test_sort_handles_mixed_timezone_awareness():
    from datetime import timezone

    items = [
        Item(1, "normal", T0),
        Item(2, "normal", (T0 + timedelta(hours=1)).replace(tzinfo=timezone.utc)),
    ]
    assert [n.id for n in sort_notifications(items, SortOrder.NEWEST)] == [2, 1]


def test_sort_rejects_unknown_order():
    with pytest.raises(ValidationError) as exc_info:
        sort_notifications([], "oldest")
    assert exc_info.value.field == "order"


@pytest.mark.parametrize(
    "priority,cue",
    [
        ("urgent", SoundCue.URGENT),
        ("high", SoundCue.HIGH),
        ("normal", SoundCue.NORMAL),
        ("low", SoundCue.NONE),
        ("info", SoundCue.NONE),
        ("mystery", SoundCue.NONE),
    ],
)
def test_sound_for(priority, cue):
    assert sound_for(priority) is cue


def test_urgent_context_wins_regardless_of_type():
    assert extract_context("order", "URGENT: concrete delivery blocked") == "urgent"


def test_context_without_rule_falls_back_to_default():
    # "shipped" matches but project_team has no rule for it
    assert extract_context("project_team", "Your welcome pack was shipped") == "default"


def test_context_drives_priority_and_emoji():
    context = extract_context("payment", "Invoice #12 is overdue")
    assert context == "overdue"
    assert resolve_priority("payment", context) is NotificationPriority.URGENT
    assert resolve_emoji("payment", context, "urgent") == EMOJIS["payment"]["urgent"]


def test_unknown_type_uses_global_fallbacks():
    assert resolve_priority("weather", "default") is NotificationPriority.NORMAL
    assert resolve_emoji("weather", "default", "normal") == FALLBACK_EMOJI
