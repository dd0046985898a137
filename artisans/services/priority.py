"""
Notification priority ranking, ordering and sound cue selection.

Also carries the contextual classifier used when the server creates a
notification: the message text is matched against weighted context patterns,
and per-type rule tables turn the detected context into a priority and an
emoji.
"""
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Protocol

from ..core.errors import ValidationError


class NotificationPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, NotificationPriority):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, value) -> Optional["NotificationPriority"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_RANKS = {priority: index for index, priority in enumerate(NotificationPriority, start=1)}

# Anything that is not a known priority sorts after all of them
UNRANKED = len(_RANKS) + 1


def priority_rank(value) -> int:
    priority = NotificationPriority.parse(value)
    return priority.rank if priority is not None else UNRANKED


class SortOrder(str, Enum):
    NEWEST = "newest"
    PRIORITY = "priority"


class SoundCue(str, Enum):
    URGENT = "urgent-cue"
    HIGH = "high-cue"
    NORMAL = "normal-cue"
    NONE = "none"


_CUES = {
    NotificationPriority.URGENT: SoundCue.URGENT,
    NotificationPriority.HIGH: SoundCue.HIGH,
    NotificationPriority.NORMAL: SoundCue.NORMAL,
}


def sound_for(priority) -> SoundCue:
    """Low, info and unknown priorities are silent."""
    parsed = NotificationPriority.parse(priority)
    return _CUES.get(parsed, SoundCue.NONE)


class Prioritized(Protocol):
    priority: str
    created_at: datetime


def _timestamp(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_notifications(notifications: Iterable[Prioritized], order=SortOrder.NEWEST) -> List:
    """
    Return a new list ordered for display.

    `newest` orders by creation time, most recent first. `priority` orders by
    rank (urgent first), breaking ties by creation time, most recent first.
    Both keys are total, and `sorted` keeps equal items in input order.
    """
    try:
        order = SortOrder(order)
    except ValueError:
        raise ValidationError(f"Unknown sort order '{order}'", field="order")

    if order is SortOrder.NEWEST:
        return sorted(notifications, key=lambda n: -_timestamp(n.created_at))
    return sorted(
        notifications,
        key=lambda n: (priority_rank(n.priority), -_timestamp(n.created_at)),
    )


# Contextual classification

CONTEXT_PATTERNS = [
    # (context, pattern, weight)
    ("created", r"new\s+project|project\s+created|started\s+a\s+project", 10),
    ("updated", r"updated|modified|changed|revised|edited", 8),
    ("completed", r"completed|finished|done|concluded|accomplished", 10),
    ("milestone", r"milestone|achievement|checkpoint|phase\s+complete", 10),
    ("delay", r"delay|postponed|late|behind\s+schedule|setback", 10),
    ("issue", r"issue|problem|error|fault|defect|concern", 10),
    ("risk", r"risk|hazard|danger|warning|threat|vulnerability", 10),
    ("joined", r"joined|added\s+to\s+team|new\s+member|team\s+joined", 10),
    ("left", r"left|departed|exited|resigned|quit", 10),
    ("added", r"\badded\b|\bincluded\b|assigned", 9),
    ("removed", r"removed|excluded|deleted|taken\s+off", 10),
    ("placed", r"placed|ordered|requested|purchased", 10),
    ("shipped", r"shipped|dispatched|sent|on\s+the\s+way", 10),
    ("delivered", r"delivered|received|arrived|reached", 10),
    ("cancelled", r"cancelled|canceled|terminated|revoked|nullified", 10),
    ("payment_failed", r"payment\s+failed|transaction\s+declined|charge\s+declined", 10),
    ("due", r"\bdue\b|\bowing\b|to\s+be\s+paid", 10),
    ("overdue", r"overdue|past\s+due|late\s+payment|missed\s+payment", 10),
    ("refunded", r"refunded|money\s+back|reimbursed|returned\s+funds", 10),
    ("urgent", r"urgent|immediate|critical|asap|emergency", 11),
    ("approved", r"approved|accepted|confirmed|verified|validated", 9),
    ("rejected", r"rejected|declined|denied|refused|disapproved", 10),
    ("expired", r"expired|lapsed|ran\s+out|no\s+longer\s+valid", 9),
    ("security", r"security|breach|vulnerability|unauthorized|hacked|compromised", 11),
    ("maintenance", r"maintenance|upgrade|update|downtime|server|system", 8),
    ("connected", r"connected|linked|associated|joined", 7),
    ("budget_exceeded", r"budget\s+exceeded|over\s+budget|cost\s+overrun", 10),
    ("budget_update", r"budget\s+update|cost\s+adjustment|financial\s+update", 8),
    ("new", r"\bnew\b|\brecent\b|\bjust\b|\blatest\b", 6),
]

_COMPILED_PATTERNS = [
    (context, re.compile(pattern, re.IGNORECASE), weight)
    for context, pattern, weight in CONTEXT_PATTERNS
]

P = NotificationPriority

PRIORITY_RULES = {
    "project": {
        "default": P.NORMAL, "created": P.NORMAL, "updated": P.NORMAL,
        "issue": P.HIGH, "delay": P.HIGH, "risk": P.HIGH, "completed": P.NORMAL,
        "milestone": P.NORMAL, "budget_exceeded": P.URGENT,
    },
    "project_team": {
        "default": P.NORMAL, "joined": P.NORMAL, "left": P.NORMAL, "removed": P.HIGH,
    },
    "order": {
        "default": P.NORMAL, "placed": P.NORMAL, "shipped": P.NORMAL,
        "delivered": P.NORMAL, "cancelled": P.HIGH, "payment_failed": P.URGENT,
        "delayed": P.HIGH,
    },
    "message": {"default": P.NORMAL, "from_client": P.HIGH, "from_admin": P.HIGH},
    "service_request": {
        "default": P.NORMAL, "new": P.NORMAL, "urgent": P.URGENT, "updated": P.NORMAL,
        "approved": P.HIGH, "rejected": P.HIGH, "connected": P.NORMAL,
    },
    "payment": {
        "default": P.NORMAL, "due": P.HIGH, "overdue": P.URGENT, "completed": P.NORMAL,
        "failed": P.URGENT, "refunded": P.HIGH,
    },
    "bid": {
        "default": P.NORMAL, "new": P.HIGH, "accepted": P.HIGH, "rejected": P.NORMAL,
        "countered": P.HIGH, "expired": P.LOW,
    },
    "invitation": {
        "default": P.NORMAL, "sent": P.NORMAL, "accepted": P.NORMAL,
        "declined": P.NORMAL, "expired": P.LOW,
    },
    "project_update": {
        "default": P.NORMAL, "milestone": P.NORMAL, "delay": P.HIGH, "issue": P.HIGH,
        "budget_update": P.HIGH,
    },
    "schedule_change": {
        "default": P.NORMAL, "minor": P.LOW, "major": P.HIGH, "urgent": P.URGENT,
    },
    "material_request": {
        "default": P.NORMAL, "new": P.NORMAL, "approved": P.NORMAL,
        "rejected": P.HIGH, "urgent": P.URGENT,
    },
    "system": {
        "default": P.NORMAL, "maintenance": P.NORMAL, "update": P.LOW,
        "security": P.URGENT, "downtime": P.HIGH,
    },
    "inventory": {
        "default": P.NORMAL, "low": P.HIGH, "critical": P.URGENT,
        "out_of_stock": P.URGENT, "restock": P.NORMAL,
    },
}

EMOJIS = {
    "project": {
        "default": "🏗️", "urgent": "🚨", "high": "🏗️", "normal": "🏗️", "low": "📝",
        "info": "ℹ️", "created": "🆕", "completed": "✅", "updated": "🔄",
    },
    "project_team": {
        "default": "👥", "urgent": "🚨", "joined": "👋", "left": "👋",
        "added": "➕", "removed": "➖",
    },
    "order": {
        "default": "📦", "urgent": "🚨", "placed": "🛒", "shipped": "🚚",
        "delivered": "📬", "cancelled": "❌", "payment_failed": "💳",
    },
    "message": {"default": "💬", "urgent": "‼️", "high": "❗", "normal": "💬", "unread": "📨"},
    "service_request": {
        "default": "🔧", "urgent": "🆘", "high": "🚩", "approved": "✅",
        "rejected": "❌", "updated": "🔄",
    },
    "payment": {
        "default": "💰", "urgent": "⚠️", "completed": "✅", "failed": "❌", "refunded": "↩️",
    },
    "bid": {
        "default": "📝", "new": "🆕", "accepted": "✅", "rejected": "❌", "withdrawn": "🔙",
    },
    "invitation": {
        "default": "📩", "sent": "📤", "accepted": "✅", "declined": "❌", "expired": "⏱️",
    },
    "project_update": {
        "default": "🔄", "urgent": "🚨", "milestone": "🏁", "delay": "⏱️", "issue": "⚠️",
    },
    "schedule_change": {"default": "📅", "urgent": "⚠️", "delayed": "⏰", "advanced": "⏩"},
    "material_request": {
        "default": "🧱", "approved": "✅", "rejected": "❌", "urgent": "🚨", "delayed": "⏱️",
    },
    "system": {
        "default": "🖥️", "urgent": "🚨", "maintenance": "🔧", "update": "🔄", "security": "🔒",
    },
    "inventory": {
        "default": "📦", "urgent": "⚠️", "low": "⚠️", "critical": "🚨",
        "restock": "🔄", "out_of_stock": "❌",
    },
}

FALLBACK_EMOJI = "📢"


def extract_context(notification_type: str, message: str) -> str:
    """Pick the strongest matching context, or `default` if the type has no rule for it."""
    best_context, best_weight = "default", 0
    for context, pattern, weight in _COMPILED_PATTERNS:
        if weight > best_weight and pattern.search(message):
            best_context, best_weight = context, weight

    if best_context == "urgent":
        return "urgent"
    if best_context in PRIORITY_RULES.get(notification_type, {}):
        return best_context
    return "default"


def resolve_priority(notification_type: str, context: str) -> NotificationPriority:
    rules = PRIORITY_RULES.get(notification_type, {})
    return rules.get(context) or rules.get("default") or NotificationPriority.NORMAL


def resolve_emoji(notification_type: str, context: str, priority) -> str:
    emojis = EMOJIS.get(notification_type, {})
    priority = NotificationPriority.parse(priority)
    return (
        emojis.get(context)
        or (priority is not None and emojis.get(priority.value))
        or emojis.get("default")
        or FALLBACK_EMOJI
    )
