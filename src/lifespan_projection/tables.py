"""
lifespan_projection/tables.py - Embedded Life Expectancy Tables

The "Source of Truth" for additional life expectancy by age and sex.
Tables ship inside the package, one file per data year:

    data/<year>.txt    age <TAB> male <TAB> female    ('#' starts a comment)

A ``# source: <label>`` comment names where the numbers come from; the
label is carried in TableMetadata and printed in the report. The shipped
tables are labelled "illustrative" (modelled values, not a published table).

FEATURES:
- Strict parsing: missing fields, unparseable numbers, negative values,
  duplicate ages and gaps in ages 0-119 all reject the table
- Immutable LifeExpectancyTable value, constructed once and passed explicitly
- Exact integer-age lookup; ages outside the table raise instead of reading zero

Author: Lifespan Projection Project
License: MIT
"""

import io
import re
import numpy as np
import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from .config import DEFAULT_DATA_SOURCE, MAX_TABLE_AGE, MIN_TABLE_AGE, Sex

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

COLUMNS = ["age", "male", "female"]

SOURCE_PATTERN = re.compile(r"^#\s*source:\s*(?P<source>\S.*?)\s*$", re.MULTILINE)


# =============================================================================
# ERRORS
# =============================================================================

class TableUnavailableError(ValueError):
    """Requested data year is not embedded, or its table is malformed."""


class ExpectancyLookupError(ValueError):
    """A lookup could not be answered from the table."""


class AgeOutOfRangeError(ExpectancyLookupError):
    """Age falls outside the ages covered by the table."""

    def __init__(self, age: int, min_age: int, max_age: int):
        self.age = age
        self.min_age = min_age
        self.max_age = max_age
        super().__init__(
            f"Age {age} is outside the life expectancy table (ages {min_age}-{max_age})"
        )


# =============================================================================
# TABLE VALUE
# =============================================================================

@dataclass(frozen=True)
class TableMetadata:
    """Descriptive data about an embedded table."""
    data_year: int
    source: str = DEFAULT_DATA_SOURCE
    filename: Optional[str] = None


@dataclass(frozen=True, eq=False)
class LifeExpectancyTable:
    """
    Additional life expectancy (years) by sex and integer age.

    Arrays are indexed by age, so ``male[24]`` is the expectancy of a male
    aged 24. Both arrays are read-only.
    """
    male: np.ndarray
    female: np.ndarray
    metadata: TableMetadata

    def __post_init__(self):
        for values in (self.male, self.female):
            values.setflags(write=False)

    @property
    def data_year(self) -> int:
        return self.metadata.data_year

    @property
    def max_age(self) -> int:
        return len(self.male) - 1

    def column(self, sex: Sex) -> np.ndarray:
        return self.male if sex is Sex.MALE else self.female

    def expectancy(self, age: int, sex: Sex) -> float:
        """
        Get additional life expectancy for an exact integer age.

        Raises:
            AgeOutOfRangeError: age < 0 or above the last tabulated age
        """
        if age < MIN_TABLE_AGE or age > self.max_age:
            raise AgeOutOfRangeError(age, MIN_TABLE_AGE, self.max_age)
        return float(self.column(sex)[age])


# =============================================================================
# PARSING
# =============================================================================

def parse_life_expectancy_table(source: Union[str, Path, io.TextIOBase],
                                data_year: int) -> LifeExpectancyTable:
    """
    Parse delimited ``age male female`` rows into a LifeExpectancyTable.

    Args:
        source: Table text, a path to a table file, or an open text stream
        data_year: Data year recorded in the table metadata

    Returns:
        Validated LifeExpectancyTable covering ages 0-119

    Raises:
        TableUnavailableError: if any row is missing a field or holds a
            value that is not a number, or the ages do not cover 0-119 once
    """
    filename = None
    if isinstance(source, Path):
        filename = source.name
        source = source.read_text(encoding="utf-8")
    if not isinstance(source, str):
        source = source.read()

    match = SOURCE_PATTERN.search(source)
    label = match.group("source") if match else DEFAULT_DATA_SOURCE
    source = io.StringIO(source)

    try:
        raw = pd.read_csv(source, sep=r"\s+", header=None, comment="#", dtype=str)
    except pd.errors.EmptyDataError:
        raise TableUnavailableError(f"Life expectancy table for {data_year} is empty") from None
    except pd.errors.ParserError as e:
        raise TableUnavailableError(
            f"Life expectancy table for {data_year} is malformed: {e}"
        ) from e

    if raw.shape[1] != len(COLUMNS):
        raise TableUnavailableError(
            f"Life expectancy table for {data_year} has {raw.shape[1]} columns, "
            f"expected {len(COLUMNS)} (age, male, female)"
        )
    raw.columns = COLUMNS

    missing = raw[raw.isna().any(axis=1)]
    if not missing.empty:
        row = missing.index[0] + 1
        raise TableUnavailableError(
            f"Life expectancy table for {data_year}: row {row} is missing a field"
        )

    try:
        ages = pd.to_numeric(raw["age"], errors="raise")
        male = pd.to_numeric(raw["male"], errors="raise").astype(np.float64)
        female = pd.to_numeric(raw["female"], errors="raise").astype(np.float64)
    except ValueError as e:
        raise TableUnavailableError(
            f"Life expectancy table for {data_year}: failed to parse value ({e})"
        ) from e

    if not (np.isfinite(ages).all() and np.isfinite(male).all() and np.isfinite(female).all()):
        raise TableUnavailableError(f"Life expectancy table for {data_year}: values must be finite numbers")

    if not (ages == np.floor(ages)).all():
        raise TableUnavailableError(f"Life expectancy table for {data_year}: ages must be integers")
    ages = ages.astype(int)

    if (male < 0).any() or (female < 0).any():
        raise TableUnavailableError(
            f"Life expectancy table for {data_year}: expectancy values must be non-negative"
        )

    duplicated = ages[ages.duplicated()]
    if not duplicated.empty:
        raise TableUnavailableError(
            f"Life expectancy table for {data_year}: duplicate age {duplicated.iloc[0]}"
        )

    expected = set(range(MIN_TABLE_AGE, MAX_TABLE_AGE + 1))
    present = set(ages.tolist())
    gaps = sorted(expected - present)
    extra = sorted(present - expected)
    if gaps or extra:
        raise TableUnavailableError(
            f"Life expectancy table for {data_year} must cover ages "
            f"{MIN_TABLE_AGE}-{MAX_TABLE_AGE} exactly "
            f"(missing: {gaps[:5]}, unexpected: {extra[:5]})"
        )

    order = np.argsort(ages.to_numpy())
    male_by_age = male.to_numpy()[order]
    female_by_age = female.to_numpy()[order]

    for sex, values in ((Sex.MALE, male_by_age), (Sex.FEMALE, female_by_age)):
        if (np.diff(values) > 0).any():
            first = int(np.argmax(np.diff(values) > 0)) + 1
            logger.warning(
                f"{data_year} {sex.label} expectancy increases at age {first}; "
                f"table is not monotonic"
            )

    return LifeExpectancyTable(
        male=male_by_age,
        female=female_by_age,
        metadata=TableMetadata(data_year=data_year, source=label, filename=filename),
    )


# =============================================================================
# EMBEDDED DATA
# =============================================================================

def _embedded_files(data_dir: Path = DATA_DIR) -> Dict[int, Path]:
    files = {}
    for path in data_dir.glob("*.txt"):
        if path.stem.isdigit():
            files[int(path.stem)] = path
    return files


def available_data_years(data_dir: Path = DATA_DIR) -> List[int]:
    """List embedded data years, oldest first."""
    return sorted(_embedded_files(data_dir))


def latest_data_year(data_dir: Path = DATA_DIR) -> int:
    """Most recent embedded data year."""
    years = available_data_years(data_dir)
    if not years:
        raise TableUnavailableError(f"No life expectancy tables found in {data_dir}")
    return years[-1]


def load_life_expectancy_table(data_year: Optional[int] = None,
                               data_dir: Path = DATA_DIR) -> LifeExpectancyTable:
    """
    Load the embedded table for a data year.

    Args:
        data_year: Publication year; None selects the latest embedded table
        data_dir: Directory holding ``<year>.txt`` files

    Raises:
        TableUnavailableError: year not embedded, or table malformed
    """
    if data_year is None:
        data_year = latest_data_year(data_dir)

    files = _embedded_files(data_dir)
    path = files.get(data_year)
    if path is None:
        raise TableUnavailableError(
            f"No life expectancy table for data year {data_year} "
            f"(available: {', '.join(str(y) for y in sorted(files))})"
        )

    table = parse_life_expectancy_table(path, data_year)
    logger.info(
        f"Loaded {data_year} life expectancy table from {table.metadata.filename} "
        f"({table.metadata.source}): ages 0-{table.max_age}"
    )
    return table
