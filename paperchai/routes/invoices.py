"""
Invoice Routes - draft invoice calculations
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth import get_current_user
from ..invoice_calculations import (
    calculate_grand_total,
    calculate_item_with_tax,
    calculate_subtotal,
    calculate_total_tax,
    format_currency,
    validate_invoice_data,
)
from ..models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


class InvoiceItemInput(BaseModel):
    title: str = ""
    description: Optional[str] = None
    quantity: float = 0
    unit_price: float = 0
    tax_rate: float = 0


class InvoiceCalculateRequest(BaseModel):
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    currency: str = "INR"
    items: list[InvoiceItemInput] = []


class InvoiceItemTotal(BaseModel):
    title: str
    quantity: float
    unit_price: float
    tax_rate: float
    total: float


class InvoiceCalculateResponse(BaseModel):
    valid: bool
    errors: list[str]
    items: list[InvoiceItemTotal]
    subtotal: float
    tax_total: float
    total: float
    formatted_total: str


@router.post("/calculate", response_model=InvoiceCalculateResponse)
async def calculate_invoice(
    data: InvoiceCalculateRequest,
    current_user: User = Depends(get_current_user),
):
    """Compute line totals, tax and grand total for a draft invoice"""
    raw = data.model_dump()
    valid, errors = validate_invoice_data(raw)

    for item in raw["items"]:
        item["total"] = calculate_item_with_tax(item["quantity"], item["unit_price"], item["tax_rate"])

    items = [
        InvoiceItemTotal(
            title=item["title"],
            quantity=item["quantity"],
            unit_price=item["unit_price"],
            tax_rate=item["tax_rate"],
            total=round(item["total"], 2),
        )
        for item in raw["items"]
    ]
    subtotal = calculate_subtotal(raw["items"])
    tax_total = calculate_total_tax(raw["items"])
    total = calculate_grand_total(raw["items"])

    if not valid:
        logger.info(f"Draft invoice for user {current_user.id} has {len(errors)} validation errors")

    return InvoiceCalculateResponse(
        valid=valid,
        errors=errors,
        items=items,
        subtotal=round(subtotal, 2),
        tax_total=round(tax_total, 2),
        total=round(total, 2),
        formatted_total=format_currency(total, data.currency),
    )
