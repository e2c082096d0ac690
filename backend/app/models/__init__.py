from app.models.customer import Customer, CustomerType
from app.models.quote import Quote, QuoteItem, QuoteStatus
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.models.ticket import Ticket, TicketPassenger, TicketSegment, TicketStatus, TicketInvoiceStatus

__all__ = [
    "Customer", "CustomerType",
    "Quote", "QuoteItem", "QuoteStatus",
    "Invoice", "InvoiceItem", "InvoiceStatus",
    "Ticket", "TicketPassenger", "TicketSegment", "TicketStatus", "TicketInvoiceStatus",
]
