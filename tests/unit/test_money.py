"""Tests for bm_common.money: integer minor-unit arithmetic."""

from src.bm_common.money import calculate_bps, to_display


class TestToDisplay:
    def test_thousands_separator(self) -> None:
        assert to_display(1_050_000) == "UGX 10,500.00"

    def test_minor_units(self) -> None:
        assert to_display(5) == "UGX 0.05"

    def test_negative(self) -> None:
        assert to_display(-1200) == "-UGX 12.00"

    def test_currency(self) -> None:
        assert to_display(100, "KES") == "KES 1.00"


class TestCalculateBps:
    def test_zero_rate(self) -> None:
        assert calculate_bps(10_000, 0) == 0

    def test_exact(self) -> None:
        assert calculate_bps(10_000, 1800) == 1800

    def test_rounds_up(self) -> None:
        # 333 * 1800 / 10000 = 59.94
        assert calculate_bps(333, 1800) == 60
