"""
lifespan_projection/dates.py - Calendar Arithmetic

Age, projection and countdown calculations over calendar dates.

Counting rule shared by every counter here: the result is the number of
unit steps k >= 0 for which the cursor, advanced one unit at a time from
``start``, is strictly before ``end``. A birthday or target that is not
before "now" therefore counts as zero.

Year steps normalise Feb 29 forward: Feb 29 plus one year is Mar 1 when the
target year has no leap day, and a cursor that has rolled to Mar 1 stays on
Mar 1 for every later step.

Author: Lifespan Projection Project
License: MIT
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Union
import logging

from dateutil.relativedelta import relativedelta

from .config import DAYS_PER_YEAR, HOURS_PER_DAY
from .tables import ExpectancyLookupError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class ProjectionRangeError(ExpectancyLookupError):
    """Projected date falls outside the supported calendar (years 1-9999)."""


def as_datetime(value: DateLike) -> datetime:
    """Promote a date to midnight; datetimes pass through unchanged."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def add_years(value: DateLike, years: int) -> DateLike:
    """Add calendar years, rolling Feb 29 to Mar 1 in years without one."""
    shifted = value + relativedelta(years=years)
    if value.month == 2 and value.day == 29 and shifted.day != 29:
        shifted += timedelta(days=1)
    return shifted


def anniversary(start: DateLike, steps: int) -> DateLike:
    """Cursor after ``steps`` single-year steps from start."""
    if steps <= 0:
        return start
    return add_years(add_years(start, 1), steps - 1)


def count_day_steps(start: DateLike, end: DateLike) -> int:
    """Number of whole or partial days from start up to (not including) end."""
    delta = as_datetime(end) - as_datetime(start)
    if delta <= timedelta(0):
        return 0
    partial = 1 if (delta.seconds or delta.microseconds) else 0
    return delta.days + partial


def count_year_steps(start: DateLike, end: DateLike) -> int:
    """Number of calendar anniversaries of start (start itself included) before end."""
    start_dt = as_datetime(start)
    end_dt = as_datetime(end)
    if start_dt >= end_dt:
        return 0
    # anniversary(start, k) lands in year start.year + k, so k is bounded above
    steps = end_dt.year - start_dt.year
    while steps > 0 and anniversary(start_dt, steps) >= end_dt:
        steps -= 1
    return steps + 1


def calculate_age_in_days(birth: DateLike, now: DateLike) -> int:
    """Elapsed days between birth and now (0 for a future birth date)."""
    return count_day_steps(birth, now)


def calculate_age_in_years(birth: DateLike, now: DateLike) -> int:
    """Elapsed calendar years between birth and now (0 for a future birth date)."""
    return count_year_steps(birth, now)


def split_expectancy(expectancy: float):
    """
    Split fractional years into (whole years, remainder days).

    The remainder uses a fixed 365-day year and is rounded to whole days.
    """
    whole_years = int(math.floor(expectancy))
    remainder_days = int(round(DAYS_PER_YEAR * (expectancy - whole_years)))
    return whole_years, remainder_days


def calculate_projected_death_date(expectancy: float, birth: date, age_in_years: int) -> date:
    """
    Project the death date for someone aged ``age_in_years``.

    birth + age_in_years years, then + whole expectancy years, then the
    remainder days. The order matters across Feb 29.

    Raises:
        ProjectionRangeError: the result falls past year 9999
    """
    whole_years, remainder_days = split_expectancy(expectancy)
    try:
        advanced = add_years(birth, age_in_years)
        projected = add_years(advanced, whole_years) + timedelta(days=remainder_days)
    except (ValueError, OverflowError):
        raise ProjectionRangeError(
            f"Projected date beyond supported calendar: {birth} + {age_in_years}y "
            f"+ {expectancy:.2f}y is past year 9999"
        ) from None
    logger.debug(
        f"Projected {birth} + {age_in_years}y + {whole_years}y + {remainder_days}d = {projected}"
    )
    return projected


def count_days_remaining(target: DateLike, now: DateLike) -> int:
    """Days from now until target; 0 when target is not after now."""
    return count_day_steps(now, target)


def years_since_birth(birth: DateLike, now: DateLike) -> float:
    """Absolute elapsed time in 365-day years (used for display only)."""
    hours = abs(as_datetime(now) - as_datetime(birth)).total_seconds() / 3600.0
    return hours / HOURS_PER_DAY / DAYS_PER_YEAR
