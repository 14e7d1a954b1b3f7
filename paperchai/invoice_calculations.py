"""
Invoice Calculation Utilities
Line item totals, tax, currency formatting and invoice validation
"""

from typing import Any

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "CA$",
    "SGD": "SGD ",
    "AED": "AED ",
}


def calculate_item_total(quantity: float, unit_price: float) -> float:
    return quantity * unit_price


def calculate_item_with_tax(quantity: float, unit_price: float, tax_rate: float = 0) -> float:
    subtotal = calculate_item_total(quantity, unit_price)
    return subtotal + (subtotal * tax_rate / 100)


def calculate_subtotal(items: list[dict]) -> float:
    return sum(item["quantity"] * item["unit_price"] for item in items)


def calculate_total_tax(items: list[dict]) -> float:
    total = 0.0
    for item in items:
        item_subtotal = item["quantity"] * item["unit_price"]
        total += item_subtotal * (item.get("tax_rate") or 0) / 100
    return total


def calculate_grand_total(items: list[dict]) -> float:
    """Sum of the stored per-item totals"""
    return sum(item["total"] for item in items)


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: float, currency: str = "INR") -> str:
    """Format an amount with its currency symbol and two decimals.

    Every currency uses Indian digit grouping, so USD 100000 is $1,00,000.00.
    """
    currency = (currency or "INR").upper()
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")

    grouped = _group_indian(whole)
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{sign}{symbol}{grouped}.{fraction}"


def generate_invoice_number(count: int, prefix: str = "INV") -> str:
    return f"{prefix}-{count:04d}"


def validate_invoice_data(data: dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate draft invoice data before saving

    Returns:
        (valid, errors) where errors lists every problem found
    """
    errors = []

    if not data.get("client_id") and not data.get("client_name"):
        errors.append("Client is required")

    items = data.get("items") or []
    if not items:
        errors.append("At least one item is required")

    for index, item in enumerate(items, start=1):
        if not item.get("title"):
            errors.append(f"Item {index}: Title is required")
        if (item.get("quantity") or 0) <= 0:
            errors.append(f"Item {index}: Quantity must be greater than 0")
        if (item.get("unit_price") or 0) <= 0:
            errors.append(f"Item {index}: Unit price must be greater than 0")

    return len(errors) == 0, errors
