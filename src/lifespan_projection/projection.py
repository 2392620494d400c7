"""
lifespan_projection/projection.py - Lifespan Projection Engine

Runs the full pipeline for one person:
1. Age in days and whole years as of "now"
2. Additional life expectancy for that age and sex
3. Projected death date (current age + expectancy, years before days)
4. Days remaining until the projected date

The table is an explicit constructor argument; nothing is read from
module-level state.

Author: Lifespan Projection Project
License: MIT
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import logging

from .config import PersonProfile, Sex
from .dates import (
    as_datetime,
    calculate_age_in_days,
    calculate_age_in_years,
    calculate_projected_death_date,
    count_days_remaining,
    years_since_birth,
)
from .tables import LifeExpectancyTable, load_life_expectancy_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Projection:
    """Complete projection results for a single person."""
    age_in_days: int
    age_in_years: int
    additional_expectancy_years: float
    projected_death_date: date
    days_remaining: int
    years_since_birth: float = 0.0

    @property
    def projected_lifespan_years(self) -> float:
        return self.age_in_years + self.additional_expectancy_years


class LifespanCalculator:
    """
    Projection calculator bound to one life expectancy table.

    Attributes:
        table: Immutable table used for every lookup
    """

    def __init__(self, table: LifeExpectancyTable):
        self.table = table
        logger.info(f"LifespanCalculator initialized: data year {table.data_year}")

    @property
    def data_year(self) -> int:
        return self.table.data_year

    def project(self, profile: PersonProfile, now: datetime) -> Projection:
        """
        Project lifespan and remaining days for a person.

        Args:
            profile: Validated birth date and sex
            now: Reference instant ("today")

        Returns:
            Projection for this run

        Raises:
            AgeOutOfRangeError: person is older than the table covers
        """
        now = as_datetime(now)
        birth = profile.birth_date

        age_in_days = calculate_age_in_days(birth, now)
        age_in_years = calculate_age_in_years(birth, now)
        expectancy = self.table.expectancy(age_in_years, profile.sex)
        projected = calculate_projected_death_date(expectancy, birth, age_in_years)
        remaining = count_days_remaining(projected, now)

        logger.info(
            f"{profile.sex.label} born {birth}: age {age_in_years}y/{age_in_days}d, "
            f"expectancy {expectancy:.2f}y, projected {projected}, {remaining} days remaining"
        )
        return Projection(
            age_in_days=age_in_days,
            age_in_years=age_in_years,
            additional_expectancy_years=expectancy,
            projected_death_date=projected,
            days_remaining=remaining,
            years_since_birth=years_since_birth(birth, now),
        )

    def days_remaining_for_age(self, age: int, sex: Sex, now: datetime) -> int:
        """
        Days remaining for someone of a given age, without a birth date.

        The expectancy is projected forward from today's date.
        """
        now = as_datetime(now)
        expectancy = self.table.expectancy(age, sex)
        projected = calculate_projected_death_date(expectancy, now.date(), 0)
        return count_days_remaining(projected, now)


def create_calculator(data_year: Optional[int] = None) -> LifespanCalculator:
    """
    Factory function to create a calculator for an embedded data year.

    Args:
        data_year: Table publication year (None for the latest)

    Returns:
        Configured LifespanCalculator instance
    """
    return LifespanCalculator(load_life_expectancy_table(data_year))
