"""
utils.py
Scan/QR links, printable card, roster tables, exports, validation, sample data.
"""

from __future__ import annotations

import html
from datetime import timedelta
from urllib.parse import quote, urlencode

import pandas as pd

from db import GymStore
from errors import CalendarError
from ethiopian import (
    FIRST_YEAR,
    LAST_YEAR,
    MAX_GREGORIAN,
    format_ethiopian_date,
    gregorian_to_ethiopian,
    parse_ethiopian_date,
)
from membership import Clock, badge_for, membership_period, parse_duration_to_days, remaining_days
from models import CardView, MemberRecord

ROSTER_COLUMNS = [
    "id",
    "name",
    "status",
    "plan",
    "price",
    "register_date",
    "expiry",
    "remaining",
    "cached_remaining",
    "badge",
    "scan_link",
]


def scan_url(base_url: str, member_id: str, scanned: bool = False) -> str:
    params = {"member": member_id}
    if scanned:
        params["scanned"] = "1"
    return f"{base_url.rstrip('/')}/?{urlencode(params)}"


def qr_image_url(service_url: str, data: str, size: str = "160x160") -> str:
    """URL of the external QR image service rendering ``data``."""
    return f"{service_url}?size={size}&data={quote(data, safe='')}"


_CARD_CSS = """
.gym-card { width: 3.375in; height: 2.125in; box-sizing: border-box; border: 2px solid #000;
  border-radius: 10px; padding: 10px; font-family: Arial, Helvetica, sans-serif; background: #fff;
  display: flex; flex-direction: column; justify-content: space-between; }
.card-header { text-align: center; border-bottom: 1px solid #000; padding-bottom: 4px; }
.card-header h1 { font-size: 14px; margin: 0; letter-spacing: 1px; }
.card-body { display: grid; grid-template-columns: 60px 1fr 86px; gap: 6px; align-items: center; flex: 1; }
.member-photo { width: 60px; height: 60px; border-radius: 50%; object-fit: cover; border: 1px solid #000; }
.member-info { font-size: 10px; line-height: 1.3; }
.member-info .name { font-size: 12px; font-weight: bold; margin-bottom: 4px; }
.qr-box img { width: 80px; height: 80px; display: block; border: 1px solid #000; padding: 2px; }
.card-footer { text-align: center; font-size: 11px; font-weight: bold; padding: 4px; border-top: 1px solid #000; }
.card-footer.active { background: #c8f7c5; }
.card-footer.expired { background: #f7c5c5; }
@page { size: 3.375in 2.125in; margin: 0; }
@media print { body { margin: 0; } }
"""


def card_html(view: CardView, gym_name: str, qr_url: str) -> str:
    """Standalone HTML page holding the card at PVC card size (3.375in x 2.125in), ready to print."""
    e = html.escape
    footer_class = "active" if view.is_active else "expired"
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{e(gym_name)} - {e(view.full_name)}</title>
<style>{_CARD_CSS}</style>
</head>
<body>
<div class="gym-card">
  <div class="card-header"><h1>{e(gym_name)}</h1></div>
  <div class="card-body">
    <img class="member-photo" src="{e(view.photo_url)}" alt="Member Photo">
    <div class="member-info">
      <div class="name">{e(view.full_name)}</div>
      <div>Status <strong>{e(view.status)}</strong></div>
      <div>Plan <strong>{e(view.plan)}</strong></div>
      <div>Price <strong>{e(view.price)}</strong></div>
      <div>Registered <strong>{e(view.register_date)}</strong></div>
    </div>
    <div class="qr-box"><img src="{e(qr_url)}" alt="QR Code"></div>
  </div>
  <div class="card-footer {footer_class}">{e(view.footer_text)}</div>
</div>
</body>
</html>
"""


def roster_rows(members: list[MemberRecord], clock: Clock, base_url: str) -> list[dict]:
    rows = []
    for m in members:
        remaining = remaining_days(m.register_date, m.duration, clock)
        try:
            expiry = gregorian_to_ethiopian(membership_period(m.register_date, m.duration).expiry)
        except CalendarError:
            expiry = None
        rows.append(
            {
                "id": m.member_id,
                "name": f"{m.first_name or ''} {m.last_name or ''}".strip() or "N/A",
                "status": m.status or "ACTIVE",
                "plan": m.duration or "N/A",
                "price": m.price or "N/A",
                "register_date": format_ethiopian_date(m.register_date),
                "expiry": format_ethiopian_date(expiry),
                "remaining": remaining,
                "cached_remaining": m.remaining,
                "badge": badge_for(remaining),
                "scan_link": scan_url(base_url, m.member_id),
            }
        )
    return rows


def roster_dataframe(members: list[MemberRecord], clock: Clock, base_url: str) -> pd.DataFrame:
    rows = roster_rows(members, clock, base_url)
    if not rows:
        return pd.DataFrame(columns=ROSTER_COLUMNS)
    # Int64 keeps "unknown" remaining as <NA> instead of turning the column into floats
    df = pd.DataFrame(rows, columns=ROSTER_COLUMNS)
    df["remaining"] = df["remaining"].astype("Int64")
    df["cached_remaining"] = df["cached_remaining"].astype("Int64")
    return df


def members_to_csv_bytes(members: list[MemberRecord], clock: Clock, base_url: str) -> bytes:
    df = roster_dataframe(members, clock, base_url)
    return df.to_csv(index=False).encode("utf-8")


def refresh_cached_remaining(store: GymStore, clock: Clock) -> int:
    """Write freshly computed remaining days into every member's cached column. Returns rows touched."""
    members = store.list_members()
    for m in members:
        store.set_cached_remaining(m.member_id, remaining_days(m.register_date, m.duration, clock))
    return len(members)


def validate_member_inputs(first_name: str, duration: str, price, register_date: str) -> list[str]:
    errors: list[str] = []
    if not first_name.strip():
        errors.append("First name is required.")
    duration_ok = date_ok = True
    try:
        parse_duration_to_days(duration)
    except CalendarError:
        duration_ok = False
        errors.append("Plan must look like '1 Month', '2 Weeks', '30 Days', '1 Year' or a month count.")
    if str(price).strip():
        try:
            float(price)
        except ValueError:
            errors.append("Price must be numeric.")
    try:
        parse_ethiopian_date(register_date)
    except CalendarError:
        date_ok = False
        errors.append("Register date must be a valid Ethiopian date (YYYY-MM-DD, month 1-13).")
    if duration_ok and date_ok:
        # register date and expiry must both land on the supported calendar
        try:
            in_range = membership_period(register_date, duration).expiry <= MAX_GREGORIAN
        except CalendarError:
            in_range = False
        if not in_range:
            errors.append(f"Register date and plan must fall within Ethiopian years {FIRST_YEAR}-{LAST_YEAR}.")
    return errors


def insert_sample_data(store: GymStore, clock: Clock) -> list[str]:
    """
    Insert 3 members (safe to run multiple times: adds new rows each time).
    Register dates are Ethiopian and relative to the clock's today.
    """
    today = clock.now().date()

    def eth(days_ago: int) -> str:
        return gregorian_to_ethiopian(today - timedelta(days=days_ago))

    members = [
        # active, expires in ~5 days
        MemberRecord("", "Abebe", "Kebede", "ACTIVE", "1 Month", "1500", None, eth(25), None),
        # active, longer plan
        MemberRecord("", "Selam", "Tesfaye", "ACTIVE", "3 Months", "4000", None, eth(10), None),
        # expired
        MemberRecord("", "Dawit", "Haile", "ACTIVE", "2 Weeks", "800", None, eth(60), None),
    ]
    return [store.add_member(m) for m in members]
