"""Unit tests for utility functions."""

import pytest

from bucketsync.utils import humanize


class TestHumanize:
    """Tests for humanize function."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0 B"),
            (9, "9 B"),
            (10, "10 B"),
            (1023, "1023 B"),
            (1024, "1.0 KiB"),
            (1536, "1.5 KiB"),
            (10 * 1024, "10 KiB"),
            (5 * 1024 * 1024, "5.0 MiB"),
            (100 * 1024 * 1024, "100 MiB"),
            (3 * 1024**3, "3.0 GiB"),
            (2 * 1024**6, "2.0 EiB"),
        ],
    )
    def test_known_values(self, value, expected):
        """Test formatting of representative sizes."""
        assert humanize(value) == expected

    def test_rounds_half_up(self):
        """Test rounding to one decimal."""
        assert humanize(int(1.25 * 1024)) == "1.3 KiB"
