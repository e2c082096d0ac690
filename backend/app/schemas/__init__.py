from app.schemas.quote import (
    QuoteItemIn,
    QuoteCreate,
    QuoteUpdate,
    QuoteResponse,
    TotalsRequest,
    TotalsResponse,
)
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate, InvoiceResponse
from app.schemas.customer import CustomerCreate, CustomerResponse
from app.schemas.ticket import ExtractedFlight, ParseTicketResponse, ErrorEnvelope, TicketResponse

__all__ = [
    "QuoteItemIn",
    "QuoteCreate",
    "QuoteUpdate",
    "QuoteResponse",
    "TotalsRequest",
    "TotalsResponse",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceResponse",
    "CustomerCreate",
    "CustomerResponse",
    "ExtractedFlight",
    "ParseTicketResponse",
    "ErrorEnvelope",
    "TicketResponse",
]
