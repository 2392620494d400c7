"""
Lifespan Projection

Projects a person's remaining lifespan from their birth date, sex and an
embedded life expectancy table, and renders a plain-text report.

Pipeline:
- Table lookup: (sex, whole age) -> additional life expectancy in years
- Calendar arithmetic: age in days/years, projected death date, days remaining
- Reporting: narrative summary + Event / Date / Age table, optional Excel export

Author: Lifespan Projection Project
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Lifespan Projection Project"

from .config import (
    Sex,
    PersonProfile,
    ProjectionInputs,
    ProfileError,
    build_inputs,
)

from .tables import (
    LifeExpectancyTable,
    TableMetadata,
    TableUnavailableError,
    ExpectancyLookupError,
    AgeOutOfRangeError,
    parse_life_expectancy_table,
    load_life_expectancy_table,
    available_data_years,
    latest_data_year,
)

from .dates import (
    ProjectionRangeError,
    calculate_age_in_days,
    calculate_age_in_years,
    calculate_projected_death_date,
    count_days_remaining,
)

from .projection import (
    LifespanCalculator,
    Projection,
    create_calculator,
)

from .reporting import (
    format_days,
    format_verbose_date,
    format_iso_date,
    render_report,
    export_report_workbook,
)

__all__ = [
    # Inputs
    "Sex",
    "PersonProfile",
    "ProjectionInputs",
    "ProfileError",
    "build_inputs",

    # Tables
    "LifeExpectancyTable",
    "TableMetadata",
    "TableUnavailableError",
    "ExpectancyLookupError",
    "AgeOutOfRangeError",
    "ProjectionRangeError",
    "parse_life_expectancy_table",
    "load_life_expectancy_table",
    "available_data_years",
    "latest_data_year",

    # Calendar arithmetic
    "calculate_age_in_days",
    "calculate_age_in_years",
    "calculate_projected_death_date",
    "count_days_remaining",

    # Engine
    "LifespanCalculator",
    "Projection",
    "create_calculator",

    # Reporting
    "format_days",
    "format_verbose_date",
    "format_iso_date",
    "render_report",
    "export_report_workbook",
]
