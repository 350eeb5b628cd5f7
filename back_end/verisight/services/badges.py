from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from verisight.core.config import settings
from verisight.db.models.user import User


@dataclass(frozen=True)
class Badge:
    name: str
    description: str
    earned: Callable[[User], bool]


def _joined_early(user: User) -> bool:
    if user.created_at is None:
        return False
    joined = user.created_at
    if joined.tzinfo is None:
        joined = joined.replace(tzinfo=timezone.utc)
    launch = datetime.combine(settings.LAUNCH_DATE, datetime.min.time(), tzinfo=timezone.utc)
    return joined < launch + timedelta(days=settings.EARLY_ADOPTER_DAYS)


BADGES: tuple[Badge, ...] = (
    Badge("Truth Seeker", "Verified 100+ pieces of content", lambda u: u.total_analyses >= 100),
    Badge("Community Helper", "Cast 50+ community votes", lambda u: u.community_votes >= 50),
    Badge("Early Adopter", "Joined in the first month", _joined_early),
    Badge(
        "Fact Checker",
        "95%+ accuracy rate",
        lambda u: u.total_analyses >= 10 and u.accuracy_rate >= 95.0,
    ),
)


def evaluate_badges(user: User) -> list[str]:
    # 한번 받은 배지는 유지
    current = list(user.badges or [])
    for badge in BADGES:
        if badge.name not in current and badge.earned(user):
            current.append(badge.name)
    return current


def refresh_badges(user: User) -> bool:
    """Update ``user.badges`` in place. Returns True when a new badge was added."""
    updated = evaluate_badges(user)
    if updated != list(user.badges or []):
        user.badges = updated
        return True
    return False
