from datetime import date, datetime, timezone
from typing import List

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def monthly_due_dates(start_date: date, end_date: date) -> List[date]:
    """Due dates on the lease's start day for every month that begins before end_date."""
    dates = []
    n = 0
    while True:
        due = start_date + relativedelta(months=n)
        if due >= end_date:
            return dates
        dates.append(due)
        n += 1
