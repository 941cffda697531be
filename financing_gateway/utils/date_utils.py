"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import List


def add_months(from_date: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the last day of short months"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def monthly_dates(start: date, count: int) -> List[date]:
    """Generate ``count`` monthly due dates beginning at ``start``"""
    return [add_months(start, i) for i in range(count)]


def expiry_after(issued_at: datetime, days: int) -> datetime:
    """Return the instant ``days`` whole days after issuance"""
    return issued_at + timedelta(days=days)
