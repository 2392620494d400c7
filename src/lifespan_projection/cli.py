"""
lifespan_projection/cli.py - Command Line Runner

Usage:
    lifespan-projection -birth 1985-07-14 -sex f
    lifespan-projection -birth 1985-07-14 -sex f -data-year 2023
    lifespan-projection -age 40 -sex m

Any validation or lookup failure prints the usage and option defaults to
stderr and exits with status 2 before anything is written to stdout.

Author: Lifespan Projection Project
License: MIT
"""

import argparse
import re
import sys
import logging
from datetime import date, datetime
from typing import List, Optional

from . import __version__
from .config import ProfileError, build_inputs
from .projection import LifespanCalculator
from .reporting import export_report_workbook, render_report
from .tables import (
    ExpectancyLookupError,
    TableUnavailableError,
    available_data_years,
    latest_data_year,
    load_life_expectancy_table,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\Z")


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format (four-digit year, zero-padded month and day)."""
    if not DATE_PATTERN.match(date_str):
        raise ProfileError(f"Failed to parse date {date_str!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(date_str, '%Y-%m-%d').date()
    except ValueError:
        raise ProfileError(f"Failed to parse date {date_str!r} (expected YYYY-MM-DD)") from None


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    years = available_data_years()
    parser = argparse.ArgumentParser(
        prog='lifespan-projection',
        description='Project remaining lifespan from a life expectancy table',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Full report (latest table)
  lifespan-projection -birth 1985-07-14 -sex f

  # Full report from an older table, written to Excel as well
  lifespan-projection -birth 1985-07-14 -sex f -data-year 2022 --xlsx projection.xlsx

  # Days remaining only
  lifespan-projection -age 40 -sex m

Embedded data years: {', '.join(str(y) for y in years)}
"""
    )

    subject = parser.add_mutually_exclusive_group(required=True)
    subject.add_argument('-birth', '--birth', metavar='YYYY-MM-DD',
                         help='Birth date (YYYY-MM-DD)')
    subject.add_argument('-age', '--age', type=int, metavar='YEARS',
                         help='Age in whole years; prints only the days remaining')
    parser.add_argument('-sex', '--sex', required=True, metavar='m|f',
                        help="Sex (one of 'f' or 'm')")
    parser.add_argument('-data-year', '--data-year', type=int, default=None, metavar='YEAR',
                        help=f'Data year (default: {years[-1] if years else "latest"})')
    parser.add_argument('--as-of', metavar='YYYY-MM-DD', default=None,
                        help='Compute as of this date instead of now')
    parser.add_argument('--xlsx', metavar='PATH', default=None,
                        help='Also write the event table to an Excel workbook')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Log progress to stderr (-vv for debug)')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    return parser


def run(args: argparse.Namespace, now: Optional[datetime] = None) -> str:
    """
    Run one projection from parsed arguments.

    Returns:
        Text to print on stdout

    Raises:
        ProfileError, TableUnavailableError, ExpectancyLookupError
    """
    inputs = build_inputs(
        sex=args.sex,
        birth_date=parse_date(args.birth) if args.birth is not None else None,
        age=args.age,
        data_year=args.data_year,
        as_of=parse_date(args.as_of) if args.as_of is not None else None,
    )

    if inputs.as_of is not None:
        now = datetime.combine(inputs.as_of, datetime.min.time())
    elif now is None:
        now = datetime.now()

    data_year = inputs.data_year if inputs.data_year is not None else latest_data_year()
    table = load_life_expectancy_table(data_year)
    calculator = LifespanCalculator(table)

    if inputs.compact:
        days = calculator.days_remaining_for_age(inputs.age, inputs.sex, now)
        return f"{days}\n"

    profile = inputs.to_profile()
    projection = calculator.project(profile, now)
    report = render_report(profile, projection, table.metadata, now)

    if args.xlsx:
        export_report_workbook(args.xlsx, profile, projection, table.metadata, now)

    return report


def main(argv: Optional[List[str]] = None, now: Optional[datetime] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        output = run(args, now=now)
    except (ProfileError, TableUnavailableError, ExpectancyLookupError) as e:
        logger.debug("Projection failed", exc_info=True)
        parser.print_help(sys.stderr)
        parser.exit(2, f"\n{parser.prog}: error: {e}\n")

    sys.stdout.write(output)


if __name__ == '__main__':
    main()
