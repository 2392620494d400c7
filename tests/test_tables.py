"""
tests/test_tables.py - Life Expectancy Table Tests

Covers:
- Embedded tables: every data year loads with ages 0-119 for both sexes
- Strict parsing: malformed tables are rejected, never half-loaded
- Lookup: exact integer ages, explicit failure outside the table

Author: Lifespan Projection Project
License: MIT
"""

import io
import logging
import numpy as np
import pytest

from lifespan_projection.config import Sex
from lifespan_projection.tables import (
    AgeOutOfRangeError,
    ExpectancyLookupError,
    LifeExpectancyTable,
    TableUnavailableError,
    available_data_years,
    latest_data_year,
    load_life_expectancy_table,
    parse_life_expectancy_table,
)


def make_rows(ages=range(120), sep="\t"):
    rows = []
    for age in ages:
        male = max(76.0 - 0.66 * age, 0.5)
        female = max(81.0 - 0.70 * age, 0.6)
        rows.append(f"{age}{sep}{male:.2f}{sep}{female:.2f}")
    return rows


def make_text(ages=range(120), sep="\t"):
    return "\n".join(make_rows(ages, sep)) + "\n"


class TestEmbeddedTables:
    """Every shipped table is complete and internally consistent."""

    def test_available_years(self):
        years = available_data_years()
        assert years == sorted(years)
        assert {2022, 2023, 2024}.issubset(years)

    def test_latest_year_is_default(self):
        assert latest_data_year() == 2024
        table = load_life_expectancy_table()
        assert table.data_year == 2024

    @pytest.mark.parametrize("year", [2022, 2023, 2024])
    def test_full_age_coverage(self, year):
        table = load_life_expectancy_table(year)

        assert table.max_age == 119
        assert len(table.male) == 120
        assert len(table.female) == 120
        assert np.all(table.male > 0)
        assert np.all(table.female > 0)

    @pytest.mark.parametrize("year", [2022, 2023, 2024])
    def test_values_do_not_increase_with_age(self, year):
        table = load_life_expectancy_table(year)

        assert np.all(np.diff(table.male) <= 0)
        assert np.all(np.diff(table.female) <= 0)

    def test_known_values(self):
        table = load_life_expectancy_table(2024)

        assert table.expectancy(24, Sex.MALE) == pytest.approx(52.32)
        assert table.expectancy(24, Sex.FEMALE) == pytest.approx(57.22)
        assert table.expectancy(0, Sex.MALE) == pytest.approx(74.74)
        assert table.expectancy(119, Sex.FEMALE) == pytest.approx(0.72)

    def test_years_differ(self):
        older = load_life_expectancy_table(2022)
        newer = load_life_expectancy_table(2024)

        assert older.expectancy(65, Sex.MALE) != newer.expectancy(65, Sex.MALE)

    @pytest.mark.parametrize("year", [2022, 2023, 2024])
    def test_labelled_illustrative(self, year):
        table = load_life_expectancy_table(year)

        assert table.metadata.source == "illustrative"
        assert table.metadata.filename == f"{year}.txt"

    def test_load_logs_file_and_source(self, caplog):
        with caplog.at_level(logging.INFO, logger="lifespan_projection.tables"):
            load_life_expectancy_table(2023)

        assert "from 2023.txt (illustrative)" in caplog.text

    def test_unknown_year(self):
        with pytest.raises(TableUnavailableError, match="1999"):
            load_life_expectancy_table(1999)

    def test_unknown_year_lists_available(self):
        with pytest.raises(TableUnavailableError, match="2024"):
            load_life_expectancy_table(2099)


class TestParsing:
    """Parsing of delimited age/male/female rows."""

    def test_tab_and_space_delimited_agree(self):
        tabbed = parse_life_expectancy_table(make_text(sep="\t"), 2000)
        spaced = parse_life_expectancy_table(make_text(sep="   "), 2000)

        np.testing.assert_array_equal(tabbed.male, spaced.male)
        np.testing.assert_array_equal(tabbed.female, spaced.female)

    def test_comments_and_blank_lines_ignored(self):
        text = "# header comment\n# age male female\n\n" + make_text()
        table = parse_life_expectancy_table(text, 2000)

        assert table.expectancy(0, Sex.MALE) == pytest.approx(76.0)

    def test_rows_out_of_order(self):
        rows = make_rows()
        text = "\n".join(reversed(rows)) + "\n"
        table = parse_life_expectancy_table(text, 2000)

        assert table.expectancy(0, Sex.FEMALE) == pytest.approx(81.0)
        assert table.expectancy(10, Sex.MALE) == pytest.approx(69.4)

    def test_parse_from_path(self, tmp_path):
        path = tmp_path / "2010.txt"
        path.write_text(make_text())

        table = parse_life_expectancy_table(path, 2010)

        assert table.metadata.filename == "2010.txt"
        assert table.data_year == 2010

    def test_source_line_read_into_metadata(self):
        text = "# source: SSA period life table\n" + make_text()
        table = parse_life_expectancy_table(text, 2000)

        assert table.metadata.source == "SSA period life table"

    def test_missing_source_line_defaults_to_illustrative(self):
        table = parse_life_expectancy_table(make_text(), 2000)

        assert table.metadata.source == "illustrative"
        assert table.metadata.filename is None

    def test_parse_from_stream(self):
        table = parse_life_expectancy_table(io.StringIO("# source: test\n" + make_text()), 2000)

        assert table.metadata.source == "test"
        assert table.expectancy(0, Sex.MALE) == pytest.approx(76.0)

    def test_load_from_custom_directory(self, tmp_path):
        (tmp_path / "2030.txt").write_text(make_text())
        (tmp_path / "notes.txt").write_text("not a table")

        assert available_data_years(tmp_path) == [2030]
        table = load_life_expectancy_table(None, data_dir=tmp_path)
        assert table.data_year == 2030

    def test_missing_field(self):
        rows = make_rows()
        rows[5] = "5\t70.00"
        with pytest.raises(TableUnavailableError, match="missing a field"):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_unparseable_number(self):
        rows = make_rows()
        rows[7] = "7\tseventy\t75.00"
        with pytest.raises(TableUnavailableError, match="failed to parse"):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_unparseable_age(self):
        rows = make_rows()
        rows[3] = "three\t70.00\t75.00"
        with pytest.raises(TableUnavailableError):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_fractional_age(self):
        rows = make_rows()
        rows[3] = "3.5\t70.00\t75.00"
        with pytest.raises(TableUnavailableError, match="integers"):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_extra_field(self):
        rows = make_rows()
        rows[0] = "0\t76.00\t81.00\t99.00"
        with pytest.raises(TableUnavailableError):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_gap_in_ages(self):
        text = make_text(ages=[a for a in range(120) if a != 50])
        with pytest.raises(TableUnavailableError, match="50"):
            parse_life_expectancy_table(text, 2000)

    def test_short_table(self):
        with pytest.raises(TableUnavailableError, match="0-119"):
            parse_life_expectancy_table(make_text(ages=range(100)), 2000)

    def test_duplicate_age(self):
        rows = make_rows() + ["10\t60.00\t65.00"]
        with pytest.raises(TableUnavailableError, match="duplicate"):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_negative_value(self):
        rows = make_rows()
        rows[119] = "119\t-0.50\t0.60"
        with pytest.raises(TableUnavailableError, match="non-negative"):
            parse_life_expectancy_table("\n".join(rows), 2000)

    def test_empty_table(self):
        with pytest.raises(TableUnavailableError, match="empty"):
            parse_life_expectancy_table("# nothing here\n", 2000)

    def test_increasing_values_warn_but_load(self, caplog):
        rows = make_rows()
        rows[30] = "30\t75.00\t60.00"

        with caplog.at_level(logging.WARNING, logger="lifespan_projection.tables"):
            table = parse_life_expectancy_table("\n".join(rows), 2000)

        assert table.expectancy(30, Sex.MALE) == pytest.approx(75.0)
        assert "not monotonic" in caplog.text


class TestLookup:
    """Exact-age lookup and out-of-range behavior."""

    @pytest.fixture
    def table(self) -> LifeExpectancyTable:
        return load_life_expectancy_table(2024)

    def test_lookup_is_deterministic(self, table):
        again = load_life_expectancy_table(2024)

        for age in (0, 24, 65, 119):
            for sex in Sex:
                assert table.expectancy(age, sex) == again.expectancy(age, sex)

    def test_sex_selects_column(self, table):
        assert table.expectancy(40, Sex.MALE) == pytest.approx(37.47)
        assert table.expectancy(40, Sex.FEMALE) == pytest.approx(41.91)

    def test_age_above_table_fails_explicitly(self, table):
        with pytest.raises(AgeOutOfRangeError) as info:
            table.expectancy(120, Sex.MALE)

        assert info.value.age == 120
        assert info.value.max_age == 119
        assert isinstance(info.value, ExpectancyLookupError)

    def test_negative_age_fails(self, table):
        with pytest.raises(AgeOutOfRangeError):
            table.expectancy(-1, Sex.FEMALE)

    def test_table_is_read_only(self, table):
        with pytest.raises(ValueError):
            table.male[0] = 0.0

