"""
models.py
Lightweight domain helpers (duration units, dataclasses).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

log = logging.getLogger(__name__)

# Plan duration units in days (used for expiry auto-calculation)
DURATION_UNIT_DAYS = {
    "day": 1,
    "week": 7,
    "month": 30,
    "year": 365,
}

# Plans offered in the owner console
PLAN_CHOICES = ["1 Month", "3 Months", "6 Months", "1 Year", "2 Weeks", "30 Days"]

BADGE_NA = "N/A"
BADGE_ACTIVE = "ACTIVE"
BADGE_EXPIRED = "EXPIRED"


@dataclass(frozen=True)
class MembershipPeriod:
    start: date
    duration_spec: str
    days: int  # nominal plan length
    expiry: date


def _blank_to_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _cached_remaining(value: Any, member_id: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        log.warning("Ignoring boolean cached remaining for member %s", member_id)
        return None
    if isinstance(value, float) and not value.is_integer():
        log.warning("Ignoring non-integer cached remaining %r for member %s", value, member_id)
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        log.warning("Ignoring non-integer cached remaining %r for member %s", value, member_id)
        return None


@dataclass(frozen=True)
class MemberRecord:
    """
    A stored member as the core sees it. Every field except the id may be absent (None):
    - first_name / last_name: card shows "N/A" / ""
    - status: card shows "ACTIVE"
    - duration / register_date: remaining days become None ("N/A")
    - price: card shows "N/A"
    - profile_image_url: placeholder photo
    - remaining: no cached figure
    """

    member_id: str
    first_name: str | None = None
    last_name: str | None = None
    status: str | None = None
    duration: str | None = None
    price: str | None = None
    profile_image_url: str | None = None
    register_date: str | None = None
    remaining: int | None = None

    @classmethod
    def from_mapping(cls, member_id: str, data: Mapping[str, Any]) -> "MemberRecord":
        """Build from a store row or dict; accepts camelCase and snake_case keys."""
        row = dict(data)

        def pick(camel: str, snake: str) -> Any:
            if row.get(camel) is not None:
                return row[camel]
            return row.get(snake)

        return cls(
            member_id=str(member_id),
            first_name=_blank_to_none(pick("firstName", "first_name")),
            last_name=_blank_to_none(pick("lastName", "last_name")),
            status=_blank_to_none(pick("status", "status")),
            duration=_blank_to_none(pick("duration", "duration")),
            price=_blank_to_none(pick("price", "price")),
            profile_image_url=_blank_to_none(pick("profileImageUrl", "profile_image_url")),
            register_date=_blank_to_none(pick("registerDate", "register_date")),
            remaining=_cached_remaining(pick("remaining", "remaining"), str(member_id)),
        )


@dataclass(frozen=True)
class CardView:
    member_id: str
    full_name: str
    status: str
    plan: str
    price: str
    photo_url: str
    register_date: str  # formatted Ethiopian label
    remaining_days: int | None  # freshly computed
    cached_remaining: int | None
    primary_remaining: int | None  # what the scanned view shows first
    badge: str
    footer_text: str
    scanned: bool

    @property
    def is_active(self) -> bool:
        # Unknown remaining still renders with the active styling
        return self.badge != BADGE_EXPIRED
