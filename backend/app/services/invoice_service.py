"""
Invoice persistence, priced the same way as quotes.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session
import logging

from app.core.config import settings
from app.core.exceptions import InvoiceNotFoundError, InvoiceNumberConflictError
from app.core.security import CurrentUser
from app.core.structured_logging import log_billing_write
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.schemas.invoice import InvoiceCreate, InvoiceItemIn, InvoiceUpdate
from app.services.pricing import (
    compute_totals,
    generate_invoice_number,
    line_amount,
    to_decimal,
    validate_items,
    validate_tax_rate,
)
from app.services.quote_service import commit_or_raise, ensure_customer
from app.utils.validators import validate_date_range

logger = logging.getLogger(__name__)


class InvoiceService:

    @staticmethod
    def build_items(items: List[InvoiceItemIn], tax_rate) -> List[InvoiceItem]:
        return [
            InvoiceItem(
                position=index,
                description=item.description.strip(),
                quantity=to_decimal(item.quantity),
                unit_price=to_decimal(item.unit_price),
                tax_rate=tax_rate,
                amount=line_amount(item.quantity, item.unit_price),
            )
            for index, item in enumerate(items)
        ]

    @staticmethod
    def _apply(invoice: Invoice, payload, tax_rate) -> None:
        totals = compute_totals(payload.items, tax_rate)
        invoice.customer_id = payload.customer_id
        invoice.invoice_date = payload.invoice_date
        invoice.due_date = payload.due_date
        invoice.status = payload.status
        invoice.subtotal = totals.subtotal
        invoice.tax_amount = totals.tax_amount
        invoice.total_amount = totals.total_amount
        invoice.notes = (payload.notes or "").strip() or None
        invoice.items = InvoiceService.build_items(payload.items, tax_rate)

    @staticmethod
    def create_invoice(db: Session, user: CurrentUser, payload: InvoiceCreate) -> Invoice:
        validate_items(payload.items)
        tax_rate = validate_tax_rate(
            payload.tax_rate if payload.tax_rate is not None else settings.DEFAULT_TAX_RATE
        )
        ensure_customer(db, user, payload.customer_id)

        invoice = Invoice(
            user_id=user.id,
            invoice_number=(payload.invoice_number or "").strip() or generate_invoice_number(),
        )
        InvoiceService._apply(invoice, payload, tax_rate)
        db.add(invoice)
        commit_or_raise(db, "invoice_number", invoice.invoice_number, InvoiceNumberConflictError)
        db.refresh(invoice)

        log_billing_write(
            "invoice", "created", invoice.id,
            user_id=user.id,
            invoice_number=invoice.invoice_number,
            totals={"subtotal": invoice.subtotal, "tax_amount": invoice.tax_amount, "total_amount": invoice.total_amount},
        )
        return invoice

    @staticmethod
    def update_invoice(db: Session, user: CurrentUser, invoice_id: str, payload: InvoiceUpdate) -> Invoice:
        """Replace an invoice's header and its full item set"""
        validate_items(payload.items)
        tax_rate = validate_tax_rate(
            payload.tax_rate if payload.tax_rate is not None else settings.DEFAULT_TAX_RATE
        )
        invoice = InvoiceService.get_invoice(db, user, invoice_id)
        ensure_customer(db, user, payload.customer_id)

        invoice.invoice_number = payload.invoice_number.strip()
        InvoiceService._apply(invoice, payload, tax_rate)
        commit_or_raise(db, "invoice_number", invoice.invoice_number, InvoiceNumberConflictError)
        db.refresh(invoice)

        log_billing_write(
            "invoice", "updated", invoice.id,
            user_id=user.id,
            totals={"subtotal": invoice.subtotal, "tax_amount": invoice.tax_amount, "total_amount": invoice.total_amount},
        )
        return invoice

    @staticmethod
    def get_invoice(db: Session, user: CurrentUser, invoice_id: str) -> Invoice:
        invoice = db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.user_id == user.id).first()
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    @staticmethod
    def list_invoices(
        db: Session,
        user: CurrentUser,
        status: Optional[InvoiceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        validate_date_range(start_date, end_date)

        query = db.query(Invoice).filter(Invoice.user_id == user.id)
        if status is not None:
            query = query.filter(Invoice.status == status)
        if start_date is not None:
            query = query.filter(Invoice.invoice_date >= start_date)
        if end_date is not None:
            query = query.filter(Invoice.invoice_date <= end_date)
        return query.order_by(Invoice.invoice_date.desc(), Invoice.invoice_number).offset(skip).limit(limit).all()
