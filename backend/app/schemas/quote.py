from pydantic import BaseModel, Field
from typing import Dict, Optional, List
from datetime import date, datetime
from decimal import Decimal
from app.models.quote import QuoteStatus


class QuoteItemIn(BaseModel):
    product_id: Optional[str] = None
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")


class QuoteBase(BaseModel):
    customer_id: str = Field(..., min_length=1)
    issue_date: date
    expiry_date: date
    status: QuoteStatus = QuoteStatus.DRAFT
    tax_rate: Optional[Decimal] = Field(None, ge=0, description="Tax rate in percent")
    notes: Optional[str] = None
    items: List[QuoteItemIn] = Field(default_factory=list)


class QuoteCreate(QuoteBase):
    quote_number: Optional[str] = Field(None, description="Generated when omitted")


class QuoteUpdate(QuoteBase):
    """Full replacement of a quote header and all of its items"""
    quote_number: str = Field(..., min_length=1)


class TotalsRequest(BaseModel):
    tax_rate: Decimal = Field(Decimal("0"), ge=0)
    currency: Optional[str] = Field(None, description="ISO code; DEFAULT_CURRENCY when omitted")
    items: List[QuoteItemIn] = Field(default_factory=list)


class TotalsResponse(BaseModel):
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    currency: str
    formatted: Dict[str, str]


class QuoteItemResponse(BaseModel):
    id: str
    product_id: Optional[str]
    description: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal

    class Config:
        from_attributes = True


class QuoteResponse(BaseModel):
    id: str
    user_id: str
    customer_id: str
    quote_number: str
    issue_date: date
    expiry_date: date
    status: QuoteStatus
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    notes: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[QuoteItemResponse] = []

    class Config:
        from_attributes = True


class QuoteNumberResponse(BaseModel):
    quote_number: str


class QuoteConversionResponse(BaseModel):
    quote_id: str
    invoice_id: str
    invoice_number: str
