from pydantic import BaseModel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from app.models.ticket import TicketStatus, TicketInvoiceStatus


class ExtractedFlight(BaseModel):
    """Flight details as read from the model output, trimmed and defaulted"""
    airline: str = ""
    pnr: str
    flight_date: str
    flight_time: str = "00:00"
    origin: str
    destination: str
    passenger_name: str


class ParseTicketResponse(BaseModel):
    ok: bool = True
    ticket_id: str
    extracted: ExtractedFlight
    check_in_open_at: str


class ErrorEnvelope(BaseModel):
    ok: bool = False
    error: str


class TicketPassengerResponse(BaseModel):
    id: str
    passenger_name: str
    ticket_number: Optional[str]
    passenger_type: Optional[str]

    class Config:
        from_attributes = True


class TicketSegmentResponse(BaseModel):
    id: str
    airline: Optional[str]
    flight_no: Optional[str]
    origin: str
    destination: str
    flight_date: date
    flight_time: Optional[str]
    check_in_open_at: Optional[datetime]

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    id: str
    user_id: str
    customer_id: Optional[str]
    pnr_code: str
    issue_date: date
    base_fare: Decimal
    tax_amount: Decimal
    service_fee: Decimal
    status: TicketStatus
    invoice_status: TicketInvoiceStatus
    passengers: List[TicketPassengerResponse] = []
    segments: List[TicketSegmentResponse] = []

    class Config:
        from_attributes = True
