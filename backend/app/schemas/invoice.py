from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from app.models.invoice import InvoiceStatus


class InvoiceItemIn(BaseModel):
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")


class InvoiceBase(BaseModel):
    customer_id: str = Field(..., min_length=1)
    invoice_date: date
    due_date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT
    tax_rate: Optional[Decimal] = Field(None, ge=0, description="Tax rate in percent")
    notes: Optional[str] = None
    items: List[InvoiceItemIn] = Field(default_factory=list)


class InvoiceCreate(InvoiceBase):
    invoice_number: Optional[str] = Field(None, description="Generated when omitted")


class InvoiceUpdate(InvoiceBase):
    invoice_number: str = Field(..., min_length=1)


class InvoiceItemResponse(BaseModel):
    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    amount: Decimal

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: str
    user_id: str
    customer_id: str
    quote_id: Optional[str] = None
    invoice_number: str
    invoice_date: date
    due_date: date
    status: InvoiceStatus
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    notes: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[InvoiceItemResponse] = []

    class Config:
        from_attributes = True
