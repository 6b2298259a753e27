import pytest

from expense_tracker.models import ExchangeRateResponse, RateTable
from expense_tracker.services.rates.conversion import CurrencyConverter

from conftest import FULL_RATES, make_expense, make_table


def test_identity_conversion_needs_no_rates():
    empty = CurrencyConverter()
    assert empty.convert(42.5, "EUR", "EUR") == 42.5
    assert empty.convert(42.5, "eur", "EUR") == 42.5


def test_usd_to_eur_example():
    conv = CurrencyConverter(RateTable(rates={"USD": 1.0, "EUR": 0.9}))
    assert conv.convert(100, "USD", "EUR") == pytest.approx(90.0)
    assert conv.convert(90, "EUR", "USD") == pytest.approx(100.0)


def test_round_trip_is_close(converter):
    there = converter.convert(250.0, "GBP", "JPY")
    back = converter.convert(there, "JPY", "GBP")
    assert back == pytest.approx(250.0)


def test_cross_rate_uses_ratio(converter):
    # 1 EUR = 0.8 / 0.9 GBP
    assert converter.convert(9, "EUR", "GBP") == pytest.approx(8.0)


def test_missing_code_returns_none():
    conv = CurrencyConverter(RateTable(rates={"USD": 1.0, "EUR": 0.9}))
    assert conv.convert(10, "USD", "JPY") is None
    assert conv.convert(10, "JPY", "USD") is None


def test_converted_amount_falls_back_when_rates_not_ready():
    conv = CurrencyConverter()
    assert not conv.rates_ready()
    expense = make_expense(120, currency="EUR")
    assert conv.converted_amount(expense, "USD") == 120


def test_converted_amount_same_currency_is_unchanged(converter):
    assert converter.converted_amount(make_expense(33.3, currency="SEK"), "SEK") == 33.3


def test_converted_amount_treats_unknown_rate_as_one():
    conv = CurrencyConverter(RateTable(rates={"USD": 1.0, "EUR": 0.5}))
    # GBP is not in the table: lenient lookup counts it as 1.0
    assert conv.converted_amount(make_expense(10, currency="GBP"), "EUR") == pytest.approx(5.0)


def test_converted_amount_never_raises(converter):
    for code in FULL_RATES:
        value = converter.converted_amount(make_expense(1, currency=code), "USD")
        assert value > 0


def test_convert_amount_uses_same_fallback():
    conv = CurrencyConverter(RateTable(rates={"USD": 1.0, "EUR": 0.9}))
    assert conv.convert_amount(100, "USD", "EUR") == pytest.approx(90.0)
    assert conv.convert_amount(100, "USD", "JPY") == 100
    assert CurrencyConverter().convert_amount(100, "USD", "EUR") == 100


def test_explain_reports_rate(converter):
    result = converter.explain(10, "usd", "eur")
    assert result.from_currency == "USD"
    assert result.rate == pytest.approx(0.9)
    assert result.converted == pytest.approx(9.0)


def test_rate_table_from_response_sets_base():
    rates = {k: v for k, v in FULL_RATES.items() if k != "USD"}
    table = RateTable.from_response(ExchangeRateResponse(base="usd", rates=rates))
    assert table.base == "USD"
    assert table.rates["USD"] == 1.0
    assert not table.is_empty


def test_rate_table_rejects_partial_payload():
    with pytest.raises(ValueError):
        RateTable.from_response(ExchangeRateResponse(base="USD", rates={"EUR": 0.9}))


def test_rate_table_rejects_non_positive_rate():
    rates = dict(FULL_RATES, EUR=0.0)
    with pytest.raises(ValueError):
        RateTable.from_response(ExchangeRateResponse(base="USD", rates=rates))


def test_rate_for_is_lenient():
    table = make_table({"USD": 1.0, "EUR": 0.0})
    assert table.rate_for("EUR") == 1.0
    assert table.rate_for("XYZ") == 1.0
    assert table.get("XYZ") is None
