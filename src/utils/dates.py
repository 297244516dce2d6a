"""Calendar helpers for offer deadlines and lease start dates.

All civil-date reasoning happens in the configured local time zone
(``LOCAL_TIMEZONE``), while timestamps handed to external services are
timezone-aware UTC datetimes.
"""

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from src.utils.config import ServiceConfig

END_OF_DAY = time(23, 59, 59)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def local_zone() -> ZoneInfo:
    return ZoneInfo(ServiceConfig.LOCAL_TIMEZONE)


def to_local(moment: datetime) -> datetime:
    """Convert to local time. Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(local_zone())


def local_today(now: Optional[datetime] = None) -> date:
    return to_local(now or utc_now()).date()


def add_business_days(start: date, days: int) -> date:
    """Add business days to a date, skipping Saturdays and Sundays."""
    current = start
    added = 0
    while added < days:
        current += timedelta(days=1)
        if current.weekday() < 5:
            added += 1
    return current


def subtract_months(day: date, months: int) -> date:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def offer_expires_at(now: Optional[datetime] = None, business_days: Optional[int] = None) -> datetime:
    """
    Deadline for answering an offer.

    ``business_days`` after the local date of ``now``, at 23:59:59 local time,
    returned in UTC.
    """
    if business_days is None:
        business_days = ServiceConfig.OFFER_RESPONSE_BUSINESS_DAYS

    deadline_day = add_business_days(local_today(now), business_days)
    local_deadline = datetime.combine(deadline_day, END_OF_DAY, tzinfo=local_zone())
    return local_deadline.astimezone(timezone.utc)


def lease_start_date(vacant_from: Optional[datetime], now: Optional[datetime] = None) -> date:
    """First day of a new lease: the later of today and the vacancy date, in local dates."""
    today = local_today(now)
    if vacant_from is None:
        return today
    return max(today, to_local(vacant_from).date())
