from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from app.core.database import Base


class TicketStatus(str, enum.Enum):
    SALES = "sales"
    VOID = "void"
    REFUND = "refund"


class TicketInvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    INVOICED = "invoiced"


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, index=True, nullable=False)
    customer_id = Column(String, ForeignKey("customers.id"), nullable=True)
    pnr_code = Column(String, index=True, nullable=False)
    issue_date = Column(Date, nullable=False)
    # Fares are filled in later by the pricing workflow
    base_fare = Column(Numeric, nullable=False, default=0)
    tax_amount = Column(Numeric, nullable=False, default=0)
    service_fee = Column(Numeric, nullable=False, default=0)
    status = Column(SQLEnum(TicketStatus, values_callable=lambda e: [m.value for m in e]), default=TicketStatus.SALES, nullable=False)
    invoice_status = Column(
        SQLEnum(TicketInvoiceStatus, values_callable=lambda e: [m.value for m in e]),
        default=TicketInvoiceStatus.PENDING,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    passengers = relationship("TicketPassenger", back_populates="ticket", cascade="all, delete-orphan")
    segments = relationship("TicketSegment", back_populates="ticket", cascade="all, delete-orphan")


class TicketPassenger(Base):
    __tablename__ = "ticket_passengers"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    ticket_id = Column(String, ForeignKey("tickets.id", ondelete="CASCADE"), index=True, nullable=False)
    passenger_name = Column(String, nullable=False)
    ticket_number = Column(String, nullable=True)
    passenger_type = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    ticket = relationship("Ticket", back_populates="passengers")


class TicketSegment(Base):
    __tablename__ = "ticket_segments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    ticket_id = Column(String, ForeignKey("tickets.id", ondelete="CASCADE"), index=True, nullable=False)
    airline = Column(String, nullable=True)
    flight_no = Column(String, nullable=True)
    origin = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    flight_date = Column(Date, nullable=False)
    flight_time = Column(String, nullable=True)
    check_in_open_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    ticket = relationship("Ticket", back_populates="segments")
