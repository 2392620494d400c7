"""
lifespan_projection/config.py - Input Models and Projection Constants

Validated configuration for a single projection run:
- Sex: enumerated m/f selector used to pick a table column
- PersonProfile: birth date + sex, frozen once validated
- ProjectionInputs: everything the CLI collects, checked before any lookup

Author: Lifespan Projection Project
License: MIT
"""

from datetime import date
from enum import Enum
from typing import Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DAYS_PER_YEAR = 365.0  # ignoring leap years
HOURS_PER_DAY = 24.0   # ignoring leap seconds

MIN_TABLE_AGE = 0
MAX_TABLE_AGE = 119

DEFAULT_DATA_SOURCE = "illustrative"  # label used when a table has no "# source:" line


# =============================================================================
# ERRORS
# =============================================================================

class ProfileError(ValueError):
    """Missing, malformed or out-of-vocabulary command-line input."""


class Sex(Enum):
    """Sex codes as accepted on the command line."""
    MALE = "m"
    FEMALE = "f"

    @property
    def label(self) -> str:
        return "male" if self is Sex.MALE else "female"

    @classmethod
    def parse(cls, value: str) -> "Sex":
        """Accept exactly 'm' or 'f'."""
        try:
            return cls(value)
        except ValueError:
            raise ProfileError(f"Failed to parse sex: {value!r} (expected 'm' or 'f')") from None


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class PersonProfile(BaseModel):
    """Immutable person record the projection is computed for."""
    model_config = ConfigDict(frozen=True)

    birth_date: date
    sex: Sex


class ProjectionInputs(BaseModel):
    """
    Command-line inputs for one invocation.

    Exactly one of ``birth_date`` (report variant) or ``age`` (compact
    variant) must be given. ``data_year`` is None until resolved against the
    embedded tables.
    """
    model_config = ConfigDict(frozen=True)

    sex: Sex
    birth_date: Optional[date] = None
    age: Optional[int] = Field(default=None, ge=0)
    data_year: Optional[int] = None
    as_of: Optional[date] = None

    @field_validator("sex", mode="before")
    @classmethod
    def parse_sex_code(cls, value):
        if isinstance(value, Sex):
            return value
        return Sex.parse(value)

    @model_validator(mode="after")
    def check_variant(self) -> "ProjectionInputs":
        if (self.birth_date is None) == (self.age is None):
            raise ValueError("exactly one of birth date or age is required")
        return self

    @property
    def compact(self) -> bool:
        """True when only the days-remaining integer should be printed."""
        return self.age is not None

    def to_profile(self) -> PersonProfile:
        if self.birth_date is None:
            raise ProfileError("A birth date is required to build a profile")
        return PersonProfile(birth_date=self.birth_date, sex=self.sex)


def build_inputs(**values) -> ProjectionInputs:
    """Validate raw values, converting pydantic errors to ProfileError."""
    try:
        inputs = ProjectionInputs(**values)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ProfileError(f"Invalid input: {messages}") from e
    logger.debug(f"Validated inputs: {inputs}")
    return inputs
