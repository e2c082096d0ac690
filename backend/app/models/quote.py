from sqlalchemy import Column, String, Integer, Numeric, Date, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from app.core.database import Base


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CONVERTED = "converted"


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, index=True, nullable=False)
    customer_id = Column(String, ForeignKey("customers.id"), nullable=False)
    quote_number = Column(String, unique=True, nullable=False)
    issue_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=False)
    status = Column(SQLEnum(QuoteStatus, values_callable=lambda e: [m.value for m in e]), default=QuoteStatus.DRAFT, nullable=False)
    subtotal = Column(Numeric, nullable=False, default=0)
    tax_rate = Column(Numeric, nullable=False, default=0)
    tax_amount = Column(Numeric, nullable=False, default=0)
    total_amount = Column(Numeric, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    customer = relationship("Customer")
    items = relationship(
        "QuoteItem",
        back_populates="quote",
        order_by="QuoteItem.position",
        cascade="all, delete-orphan",
    )


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    quote_id = Column(String, ForeignKey("quotes.id", ondelete="CASCADE"), index=True, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String, nullable=True)
    description = Column(String, nullable=False)
    quantity = Column(Numeric, nullable=False)
    unit_price = Column(Numeric, nullable=False)
    amount = Column(Numeric, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    quote = relationship("Quote", back_populates="items")
