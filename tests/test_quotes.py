"""Tests for the price table and quote calculator."""

from dataclasses import replace
from decimal import Decimal

import pytest

from confswap.assets import PRICE_TABLE, AssetId, get_asset_info, get_contract_address
from confswap.config import Settings
from confswap.quotes import MAX_AMOUNT_DIGITS, from_base_units, parse_amount, quote, to_base_units


class TestPriceTable:
    """Tests for asset lookup."""

    def test_parse_is_case_insensitive(self):
        assert AssetId.parse("dgold") == AssetId.DGOLD
        assert AssetId.parse(" Usdt ") == AssetId.USDT
        assert AssetId.parse(AssetId.SILVER) == AssetId.SILVER

    def test_parse_unknown_asset(self):
        with pytest.raises(ValueError, match="Unknown asset"):
            AssetId.parse("BTC")

    def test_display_symbols(self):
        assert get_asset_info("SILVER").symbol == "DSILVER"
        assert get_asset_info("PLATINUM").symbol == "DPLAT"

    def test_contract_address_not_configured(self):
        settings = Settings(dgold_token_address="", _env_file=None)

        assert get_contract_address("DGOLD", settings) is None
        assert get_contract_address("SILVER", settings) == "0x1111111111111111111111111111111111111111"


class TestQuote:
    """Tests for quote()."""

    def test_dgold_to_usdt(self):
        """2 DGOLD at 2000 against USDT at 1."""
        result = quote("2", "DGOLD", "USDT")

        assert result is not None
        assert result.rate == Decimal("2000")
        assert str(result.output_amount) == "4000.000000"

    def test_reverse_pair(self):
        result = quote("4000", AssetId.USDT, AssetId.DGOLD)

        assert str(result.output_amount) == "2.000000"

    def test_same_asset_is_allowed(self):
        result = quote("1.5", "DGOLD", "DGOLD")

        assert result.rate == Decimal("1")
        assert result.output_amount == Decimal("1.500000")

    @pytest.mark.parametrize("amount", [None, "", "   ", "abc", "1.2.3", "-1", "NaN", "Infinity"])
    def test_no_quote_for_unusable_amount(self, amount):
        assert quote(amount, "DGOLD", "USDT") is None

    def test_zero_amount_quotes_zero(self):
        result = quote("0", "DGOLD", "USDT")

        assert result.output_amount == Decimal("0")

    def test_large_amount_keeps_full_precision(self):
        result = quote("100000000000000000000000", "DGOLD", "USDT")

        assert str(result.output_amount) == "2" + "0" * 26 + ".000000"

    def test_largest_accepted_amount(self):
        amount = "9" * MAX_AMOUNT_DIGITS

        result = quote(amount + ".5", "DGOLD", "USDT")

        assert result.output_amount == Decimal(int(amount) * 2000 + 1000)

    @pytest.mark.parametrize("amount", ["1e999999", "1" + "0" * MAX_AMOUNT_DIGITS])
    def test_out_of_range_amount_has_no_quote(self, amount):
        assert quote(amount, "DGOLD", "USDT") is None

    def test_tiny_amount_quotes_zero(self):
        result = quote("1e-999999", "DGOLD", "USDT")

        assert result.output_amount == Decimal("0")

    def test_negative_zero_quotes_zero(self):
        result = quote("-0", "DGOLD", "USDT")

        assert str(result.amount) == "0"
        assert str(result.output_amount) == "0.000000"

    def test_rounds_half_away_from_zero(self):
        """0.00004 DSILVER is worth exactly 0.0000005 DGOLD."""
        result = quote("0.00004", "SILVER", "DGOLD")

        assert str(result.output_amount) == "0.000001"

    def test_rounds_down_below_half(self):
        result = quote("0.00003", "SILVER", "DGOLD")

        assert str(result.output_amount) == "0.000000"

    def test_deterministic_across_calls(self):
        first = quote("3", "PLATINUM", "USDT")
        quote("7", "DGOLD", "SILVER")
        second = quote("3", "PLATINUM", "USDT")

        assert first == second

    def test_uses_given_price_table(self):
        table = dict(PRICE_TABLE)
        table[AssetId.DGOLD] = replace(table[AssetId.DGOLD], price=Decimal("2500"))

        result = quote("2", "DGOLD", "USDT", table)

        assert str(result.output_amount) == "5000.000000"
        assert str(quote("2", "DGOLD", "USDT").output_amount) == "4000.000000"

    def test_unknown_asset(self):
        with pytest.raises(ValueError):
            quote("1", "DGOLD", "DOGE")


class TestAmountScaling:
    """Tests for base-unit scaling."""

    @pytest.mark.parametrize("asset", list(AssetId))
    @pytest.mark.parametrize("amount", ["1", "0.000001", "123.456789", "18446744073709.551615"])
    def test_round_trip(self, asset, amount):
        decimals = PRICE_TABLE[asset].decimals
        value = Decimal(amount)

        assert from_base_units(to_base_units(value, decimals), decimals) == value

    def test_truncates_extra_digits(self):
        assert to_base_units(Decimal("1.2345679"), 6) == 1234567

    def test_long_fraction_truncates(self):
        assert to_base_units(Decimal("0." + "9" * 60), 6) == 999999

    def test_below_smallest_unit(self):
        assert to_base_units(Decimal("0.0000009"), 6) == 0

    def test_from_base_units(self):
        assert from_base_units(2_000_000, 6) == Decimal("2")

    def test_parse_amount(self):
        assert parse_amount(" 2.50 ") == Decimal("2.50")
        assert parse_amount(Decimal("1")) == Decimal("1")
        assert parse_amount("-0.1") is None
        assert not parse_amount("-0").is_signed()
