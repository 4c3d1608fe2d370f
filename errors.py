"""
errors.py
Error kinds raised by the calendar converter, the duration calculator and the store.
"""

from __future__ import annotations


class CalendarError(ValueError):
    """Base for every date/duration parsing failure (folded into "N/A" by the calculator)."""


class InvalidFormat(CalendarError):
    pass


class MissingInput(CalendarError):
    pass


class DateOutOfRange(CalendarError):
    pass


class UnrecognizedDurationFormat(CalendarError):
    pass


class MemberNotFound(LookupError):
    def __init__(self, member_id: str):
        super().__init__(f"No member found with id {member_id!r}")
        self.member_id = member_id
