"""
Quote and invoice pricing.

Totals are derived from line items with Decimal arithmetic and are never
rounded before they are stored; rounding happens only in ``format_amount``.
"""
import random
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence, Union

from app.core.config import settings
from app.core.exceptions import ValidationError

Number = Union[Decimal, int, float, str]

HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass(frozen=True)
class QuoteTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return {
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
        }


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a user-supplied number without picking up binary float noise."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def line_amount(quantity: Number, unit_price: Number) -> Decimal:
    return to_decimal(quantity) * to_decimal(unit_price)


def compute_totals(items: Sequence[Any], tax_rate_percent: Number) -> QuoteTotals:
    """
    Derive subtotal, tax and total from line items.

    ``items`` may be empty (a form being edited); submission-time checks live in
    ``validate_items``. Each item needs ``quantity`` and ``unit_price``.
    """
    subtotal = sum((line_amount(it.quantity, it.unit_price) for it in items), ZERO)
    tax_amount = subtotal * to_decimal(tax_rate_percent) / HUNDRED
    return QuoteTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total_amount=subtotal + tax_amount,
    )


def validate_items(items: Sequence[Any]) -> None:
    """
    Check line items before a quote or invoice is saved.

    Every row is checked and all field errors are reported together.

    Raises:
        ValidationError: no items, or one or more rows have invalid fields
    """
    if not items:
        raise ValidationError("At least one item required")

    errors: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        if not (getattr(item, "description", "") or "").strip():
            errors.append({"field": f"items.{index}.description", "message": "Description is required"})
        if to_decimal(item.quantity) <= ZERO:
            errors.append({"field": f"items.{index}.quantity", "message": "Quantity must be greater than 0"})
        if to_decimal(item.unit_price) < ZERO:
            errors.append({"field": f"items.{index}.unit_price", "message": "Unit price must be 0 or greater"})

    if errors:
        raise ValidationError(f"{len(errors)} item field(s) are invalid", errors=errors)


def validate_tax_rate(tax_rate_percent: Number) -> Decimal:
    rate = to_decimal(tax_rate_percent)
    if rate < ZERO:
        raise ValidationError(
            "Tax rate must be 0 or greater",
            errors=[{"field": "tax_rate", "message": "Tax rate must be 0 or greater"}],
        )
    return rate


CURRENCY_SYMBOLS = {"TRY": "₺", "USD": "$", "EUR": "€", "GBP": "£"}


def symbol_for(currency: Optional[str] = None) -> str:
    """Symbol for an ISO currency code (DEFAULT_CURRENCY when omitted); unknown codes print as the code"""
    code = (currency or settings.DEFAULT_CURRENCY).upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_amount(value: Number, currency_symbol: Optional[str] = None) -> str:
    """Display form: two decimals, thousands separators."""
    symbol = symbol_for() if currency_symbol is None else currency_symbol
    rounded = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{rounded:,.2f}"


def format_totals(totals: QuoteTotals, currency: Optional[str] = None) -> Dict[str, str]:
    symbol = symbol_for(currency)
    return {name: format_amount(value, currency_symbol=symbol) for name, value in totals.as_dict().items()}


def generate_quote_number(today: Optional[date] = None) -> str:
    """
    Default quote number: ``QT-<year><4 random digits>``.

    Not unique; the quotes table has a unique constraint on the number.
    """
    today = today or date.today()
    return f"QT-{today.year}{random.randint(1000, 9999)}"


def generate_invoice_number(today: Optional[date] = None) -> str:
    """Default invoice number: ``INV-<yyyymmdd>-<4 random digits>``."""
    today = today or date.today()
    return f"INV-{today.strftime('%Y%m%d')}-{random.randint(1000, 9999)}"
