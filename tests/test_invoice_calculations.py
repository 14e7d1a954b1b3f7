import pytest

from paperchai.invoice_calculations import (
    calculate_grand_total,
    calculate_item_total,
    calculate_item_with_tax,
    calculate_subtotal,
    calculate_total_tax,
    format_currency,
    generate_invoice_number,
    validate_invoice_data,
)

ITEMS = [
    {"title": "Design", "quantity": 2, "unit_price": 500, "tax_rate": 18, "total": 1180},
    {"title": "Hosting", "quantity": 1, "unit_price": 200, "total": 200},
]


def test_item_totals():
    assert calculate_item_total(3, 250) == 750
    assert calculate_item_with_tax(2, 500, 18) == pytest.approx(1180)
    assert calculate_item_with_tax(2, 500) == 1000


def test_invoice_totals():
    assert calculate_subtotal(ITEMS) == 1200
    assert calculate_total_tax(ITEMS) == pytest.approx(180)
    assert calculate_grand_total(ITEMS) == 1380


def test_format_currency_inr_uses_indian_grouping():
    assert format_currency(100000) == "₹1,00,000.00"
    assert format_currency(12345678.5, "INR") == "₹1,23,45,678.50"
    assert format_currency(999) == "₹999.00"


def test_format_currency_other_currencies_share_indian_grouping():
    assert format_currency(100000, "USD") == "$1,00,000.00"
    assert format_currency(1234567.891, "USD") == "$12,34,567.89"
    assert format_currency(-42, "eur") == "-€42.00"
    assert format_currency(10, "CHF") == "CHF 10.00"


def test_generate_invoice_number():
    assert generate_invoice_number(7) == "INV-0007"
    assert generate_invoice_number(12345, prefix="PC") == "PC-12345"


def test_validate_invoice_data_ok():
    valid, errors = validate_invoice_data({"client_id": 1, "items": ITEMS})
    assert valid
    assert errors == []


def test_validate_invoice_data_collects_all_errors():
    valid, errors = validate_invoice_data(
        {"items": [{"title": "", "quantity": 0, "unit_price": -5}]}
    )
    assert not valid
    assert errors == [
        "Client is required",
        "Item 1: Title is required",
        "Item 1: Quantity must be greater than 0",
        "Item 1: Unit price must be greater than 0",
    ]


def test_validate_invoice_data_requires_items():
    valid, errors = validate_invoice_data({"client_name": "Acme", "items": []})
    assert not valid
    assert errors == ["At least one item is required"]
