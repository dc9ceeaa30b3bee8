"""Tests for naming policy."""
from datetime import datetime, timezone

import pytest

from provisioner.errors import ConfigurationError, ValidationError
from provisioner.services.naming import day_folder_name, sanitize_name, year_month_path


def _at(*args):
    return lambda: datetime(*args, tzinfo=timezone.utc)


class TestDayFolderName:
    def test_format(self):
        assert day_folder_name(_at(2026, 3, 7, 10, 0)) == "07-03-2026"

    def test_crosses_midnight_in_madrid(self):
        # 23:30 UTC in winter is 00:30 next day in Madrid (UTC+1)
        assert day_folder_name(_at(2026, 2, 2, 23, 30)) == "03-02-2026"

    def test_summer_offset(self):
        # Madrid is UTC+2 in summer
        assert day_folder_name(_at(2026, 7, 14, 21, 59)) == "14-07-2026"
        assert day_folder_name(_at(2026, 7, 14, 22, 0)) == "15-07-2026"

    def test_same_instant_same_name_regardless_of_input_zone(self):
        from datetime import timedelta

        tokyo = timezone(timedelta(hours=9))
        instant = datetime(2026, 2, 2, 23, 30, tzinfo=timezone.utc)
        assert day_folder_name(lambda: instant) == day_folder_name(
            lambda: instant.astimezone(tokyo)
        )

    def test_naive_datetime_read_as_utc(self):
        assert day_folder_name(lambda: datetime(2026, 2, 2, 23, 30)) == "03-02-2026"

    def test_other_timezone(self):
        assert day_folder_name(_at(2026, 2, 2, 23, 30), "UTC") == "02-02-2026"

    def test_unknown_timezone(self):
        with pytest.raises(ConfigurationError):
            day_folder_name(_at(2026, 1, 1), "Mars/Olympus_Mons")

    def test_default_clock(self):
        name = day_folder_name()
        day, month, year = name.split("-")
        assert len(day) == 2 and len(month) == 2 and len(year) == 4


class TestSanitizeName:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Prototipo Verano 2025.xlsx", "Prototipo_Verano_2025"),
            ("  a/b:c  ", "a_b_c"),
            ("Informe Q1 (2025).xlsx", "Informe_Q1_2025"),
            ("archive.tar.gz", "archive_tar"),
            ("already_clean-name", "already_clean-name"),
            ("", ""),
        ],
    )
    def test_examples(self, raw, expected):
        assert sanitize_name(raw) == expected

    @pytest.mark.parametrize("raw", ["Prototipo Verano 2025.xlsx", "  a/b:c  ", "x!!y"])
    def test_idempotent(self, raw):
        once = sanitize_name(raw)
        assert sanitize_name(once) == once

    def test_only_allowed_characters(self):
        result = sanitize_name("Ünïcødé & <chars> #1.pdf")
        assert all(ch.isascii() and (ch.isalnum() or ch in "-_") for ch in result)


class TestYearMonthPath:
    def test_pads_month(self):
        assert year_month_path(2025, 3) == ("2025", "03")
        assert year_month_path("2025", "11") == ("2025", "11")

    def test_invalid_month(self):
        with pytest.raises(ValidationError) as exc_info:
            year_month_path(2025, 13)
        assert exc_info.value.fields == ("month",)

    def test_invalid_both(self):
        with pytest.raises(ValidationError) as exc_info:
            year_month_path("abc", None)
        assert exc_info.value.fields == ("year", "month")
