"""
lifespan_projection/reporting.py - Projection Report Rendering

Produces the human-readable outputs of a projection:
1. Day counts with thousands separators
2. Verbose ("Monday, January 2 of 2006") and ISO dates
3. Narrative summary paragraph + Event / Date / Age table
4. Optional Excel export of the event table

Author: Lifespan Projection Project
License: MIT
"""

import pandas as pd
from datetime import date, datetime
from pathlib import Path
from typing import List, Union
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils.dataframe import dataframe_to_rows

from .config import PersonProfile
from .dates import as_datetime
from .projection import Projection
from .tables import TableMetadata

logger = logging.getLogger(__name__)

TABLE_RULE = "-" * 42


# =============================================================================
# FORMATTERS
# =============================================================================

def format_days(days: int) -> str:
    """Day count with comma thousands separators (12345 -> '12,345')."""
    return f"{days:,}"


def format_verbose_date(value: Union[date, datetime]) -> str:
    """'Saturday, January 1 of 2000' style date."""
    return f"{value:%A, %B} {value.day} of {value.year}"


def format_iso_date(value: Union[date, datetime]) -> str:
    """'2000-01-01' style date."""
    return f"{value:%Y-%m-%d}"


# =============================================================================
# TEXT REPORT
# =============================================================================

def render_summary(profile: PersonProfile, projection: Projection, table: TableMetadata) -> str:
    """Narrative paragraph (single line, no trailing newline)."""
    return (
        f"Given that you have lived {format_days(projection.age_in_days)} days, a "
        f"lifespan of {projection.years_since_birth:.2f} years since your birth on "
        f"{format_verbose_date(profile.birth_date)}, "
        f"and based on the {table.data_year} {table.source} average life expectancy table "
        f"for {profile.sex.label}s, you have {format_days(projection.days_remaining)} days remaining "
        f"until reaching your projected lifespan of {projection.projected_lifespan_years:.2f} "
        f"years on {format_verbose_date(projection.projected_death_date)}."
    )


def render_event_table(profile: PersonProfile, projection: Projection,
                       now: datetime) -> List[str]:
    """Event / Date / Age table as a list of lines."""
    now = as_datetime(now)
    return [
        "Event  Date         Age",
        TABLE_RULE,
        f"Birth: {format_iso_date(profile.birth_date)}  0.00 "
        f"({format_days(projection.age_in_days)} days ago)",
        f"Today: {format_iso_date(now)} {projection.years_since_birth:<5.2f}",
        f"Death: {format_iso_date(projection.projected_death_date)} "
        f"{projection.projected_lifespan_years:<5.2f} "
        f"({format_days(projection.days_remaining)} days left)",
    ]


def render_report(profile: PersonProfile, projection: Projection,
                  table: TableMetadata, now: datetime) -> str:
    """
    Full report: summary paragraph, blank line, event table.

    Returns:
        Report text ending with a newline
    """
    lines = [render_summary(profile, projection, table), ""]
    lines.extend(render_event_table(profile, projection, now))
    return "\n".join(lines) + "\n"


# =============================================================================
# EXCEL EXPORT
# =============================================================================

def event_frame(profile: PersonProfile, projection: Projection,
                now: datetime) -> pd.DataFrame:
    """Event / Date / Age rows as a DataFrame (dates as datetime.date)."""
    now = as_datetime(now)
    return pd.DataFrame(
        [
            ("Birth", profile.birth_date, 0.0, projection.age_in_days, None),
            ("Today", now.date(), round(projection.years_since_birth, 2), None, None),
            ("Death", projection.projected_death_date,
             round(projection.projected_lifespan_years, 2), None, projection.days_remaining),
        ],
        columns=["Event", "Date", "Age", "Days Ago", "Days Left"],
        dtype=object,
    )


def export_report_workbook(output_path: Union[str, Path], profile: PersonProfile,
                           projection: Projection, table: TableMetadata,
                           now: datetime) -> Path:
    """
    Write the projection to an Excel workbook.

    Sheet "Projection" holds the summary line and the event table.

    Args:
        output_path: Path of the .xlsx file to write
        profile: Person the projection was computed for
        projection: Projection results
        table: Metadata of the table used (data year and source label)
        now: Reference instant of the run

    Returns:
        Path to saved file
    """
    output_path = Path(output_path)
    frame = event_frame(profile, projection, now)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Projection"

    sheet["A1"] = render_summary(profile, projection, table)
    sheet["A1"].font = Font(bold=True, size=11)

    header_font = Font(bold=True, size=11, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")

    for offset, row in enumerate(dataframe_to_rows(frame, index=False, header=True)):
        row_idx = 3 + offset
        for col_idx, value in enumerate(row, start=1):
            cell = sheet.cell(row=row_idx, column=col_idx, value=value)
            if offset == 0:
                cell.font = header_font
                cell.fill = header_fill
            elif isinstance(value, date):
                cell.number_format = "YYYY-MM-DD"
            elif isinstance(value, (int, float)) and col_idx >= 4:
                cell.number_format = "#,##0"

    for column, width in zip("ABCDE", (10, 14, 10, 12, 12)):
        sheet.column_dimensions[column].width = width

    workbook.save(output_path)
    logger.info(f"Saved projection workbook to: {output_path}")
    return output_path
