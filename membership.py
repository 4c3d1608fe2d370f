"""
membership.py
Membership expiry / remaining-days calculation and the member card view.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Protocol

from errors import (
    CalendarError,
    DateOutOfRange,
    MemberNotFound,
    MissingInput,
    UnrecognizedDurationFormat,
)
from ethiopian import ceil_days, ethiopian_to_gregorian, format_ethiopian_date
from models import (
    BADGE_ACTIVE,
    BADGE_EXPIRED,
    BADGE_NA,
    DURATION_UNIT_DAYS,
    CardView,
    MemberRecord,
    MembershipPeriod,
)

log = logging.getLogger(__name__)

DEFAULT_PHOTO_URL = "https://via.placeholder.com/120x120?text=Photo"

_DURATION_RE = re.compile(r"(?<![\d.])(\d+)\s*(day|week|month|year)s?\b", re.IGNORECASE)
_BARE_INT_RE = re.compile(r"^\s*(\d+)\s*$")


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock pinned to one instant (tests, previews)."""

    def __init__(self, instant: datetime | date):
        if not isinstance(instant, datetime):
            instant = datetime(instant.year, instant.month, instant.day)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def _today(clock: Clock) -> date:
    now = clock.now()
    return now.date() if isinstance(now, datetime) else now


def parse_duration_to_days(duration: str | int | None) -> int:
    """
    "1 Month" -> 30, "2 Weeks" -> 14, "30 Days" -> 30, "1 Year" -> 365.
    A bare integer ("3" or 3) is a month count.
    """
    if duration is None or (isinstance(duration, str) and not duration.strip()):
        raise MissingInput("Missing plan duration")
    if isinstance(duration, int) and not isinstance(duration, bool):
        return duration * DURATION_UNIT_DAYS["month"]

    text = str(duration)
    bare = _BARE_INT_RE.match(text)
    if bare:
        return int(bare.group(1)) * DURATION_UNIT_DAYS["month"]

    match = _DURATION_RE.search(text)
    if not match:
        raise UnrecognizedDurationFormat(f"Unrecognized duration format: {duration!r}")
    count, unit = match.groups()
    return int(count) * DURATION_UNIT_DAYS[unit.lower()]


def membership_period(register_date: str | None, duration: str | int | None) -> MembershipPeriod:
    """Expiry = register date (Ethiopian, converted) + plan length in calendar days."""
    start = ethiopian_to_gregorian(register_date)
    days = parse_duration_to_days(duration)
    try:
        expiry = start + timedelta(days=days)
    except OverflowError:
        raise DateOutOfRange(f"Plan of {days} days from {start.isoformat()} runs past the calendar") from None
    return MembershipPeriod(
        start=start,
        duration_spec=str(duration),
        days=days,
        expiry=expiry,
    )


def remaining_days(register_date: str | None, duration: str | int | None, clock: Clock) -> int | None:
    """
    Days left on the membership as of today, clamped to 0..plan length.
    None when the register date or duration is missing or unparseable.
    """
    try:
        period = membership_period(register_date, duration)
    except CalendarError as exc:
        log.warning("Cannot compute remaining days (register_date=%r, duration=%r): %s", register_date, duration, exc)
        return None

    remaining = ceil_days(period.expiry - _today(clock))
    if remaining < 0:
        return 0
    if remaining > period.days:
        return period.days
    return remaining


def badge_for(remaining: int | None) -> str:
    if remaining is None:
        return BADGE_NA
    return BADGE_ACTIVE if remaining > 0 else BADGE_EXPIRED


def footer_text(remaining: int | None) -> str:
    if remaining is None:
        return "N/A"
    if remaining > 0:
        return f"{remaining} DAYS LEFT"
    return "EXPIRED"


def build_card_view(
    record: MemberRecord,
    clock: Clock,
    scanned: bool = False,
    placeholder_photo_url: str = DEFAULT_PHOTO_URL,
) -> CardView:
    fresh = remaining_days(record.register_date, record.duration, clock)
    # The stored figure wins on the scanned view; the fresh one stays visible beside it.
    primary = record.remaining if record.remaining is not None else fresh
    full_name = f"{record.first_name or 'N/A'} {record.last_name or ''}".strip()

    return CardView(
        member_id=record.member_id,
        full_name=full_name,
        status=record.status or "ACTIVE",
        plan=record.duration or "N/A",
        price=record.price or "N/A",
        photo_url=record.profile_image_url or placeholder_photo_url,
        register_date=format_ethiopian_date(record.register_date),
        remaining_days=fresh,
        cached_remaining=record.remaining,
        primary_remaining=primary,
        badge=badge_for(fresh),
        footer_text=footer_text(fresh),
        scanned=scanned,
    )


def load_card_view(
    store,
    member_id: str,
    clock: Clock,
    scanned: bool = False,
    placeholder_photo_url: str = DEFAULT_PHOTO_URL,
) -> CardView:
    """Look the member up in ``store`` (anything with ``fetch_member``) and build the card."""
    record = store.fetch_member(member_id)
    if record is None:
        raise MemberNotFound(member_id)
    return build_card_view(record, clock, scanned=scanned, placeholder_photo_url=placeholder_photo_url)
