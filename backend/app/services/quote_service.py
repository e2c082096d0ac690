"""
Quote persistence: header and items are always written together, with totals
recomputed from the submitted items.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.core.config import settings
from app.core.exceptions import (
    CustomerNotFoundError,
    InvoiceNumberConflictError,
    PersistenceError,
    QuoteAlreadyConvertedError,
    QuoteNotFoundError,
    QuoteNumberConflictError,
)
from app.core.security import CurrentUser
from app.core.structured_logging import log_billing_write
from app.models.customer import Customer
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.models.quote import Quote, QuoteItem, QuoteStatus
from app.schemas.quote import QuoteCreate, QuoteItemIn, QuoteUpdate
from app.services.pricing import (
    compute_totals,
    generate_invoice_number,
    generate_quote_number,
    line_amount,
    to_decimal,
    validate_items,
    validate_tax_rate,
)
from app.utils.validators import validate_date_range

logger = logging.getLogger(__name__)


def ensure_customer(db: Session, user: CurrentUser, customer_id: str) -> Customer:
    """Load a customer owned by the caller or raise"""
    customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.user_id == user.id,
    ).first()
    if not customer:
        raise CustomerNotFoundError(customer_id)
    return customer


def commit_or_raise(db: Session, number_field: str, number: str, conflict_error) -> None:
    """
    Commit the session, mapping a unique-number violation to ``conflict_error``.

    Any other database failure rolls back and becomes a PersistenceError.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if number_field in str(e.orig):
            raise conflict_error(number)
        logger.error(f"Integrity error while saving {number}: {e}")
        raise PersistenceError(str(e.orig))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while saving {number}: {e}", exc_info=True)
        raise PersistenceError(str(e))


class QuoteService:
    """Create, replace, list and convert quotes for one caller."""

    @staticmethod
    def build_items(items: List[QuoteItemIn]) -> List[QuoteItem]:
        return [
            QuoteItem(
                position=index,
                product_id=(item.product_id or "").strip() or None,
                description=item.description.strip(),
                quantity=to_decimal(item.quantity),
                unit_price=to_decimal(item.unit_price),
                amount=line_amount(item.quantity, item.unit_price),
            )
            for index, item in enumerate(items)
        ]

    @staticmethod
    def _apply(quote: Quote, payload, tax_rate) -> None:
        totals = compute_totals(payload.items, tax_rate)
        quote.customer_id = payload.customer_id
        quote.issue_date = payload.issue_date
        quote.expiry_date = payload.expiry_date
        quote.status = payload.status
        quote.tax_rate = tax_rate
        quote.subtotal = totals.subtotal
        quote.tax_amount = totals.tax_amount
        quote.total_amount = totals.total_amount
        quote.notes = (payload.notes or "").strip() or None
        # Replace-all: old rows are deleted as orphans in the same flush
        quote.items = QuoteService.build_items(payload.items)

    @staticmethod
    def create_quote(db: Session, user: CurrentUser, payload: QuoteCreate) -> Quote:
        """
        Create a quote with its items.

        Raises:
            ValidationError: no items, invalid rows or negative tax rate
            CustomerNotFoundError: customer is not one of the caller's
            QuoteNumberConflictError: quote number already used
        """
        validate_items(payload.items)
        tax_rate = validate_tax_rate(
            payload.tax_rate if payload.tax_rate is not None else settings.DEFAULT_TAX_RATE
        )
        ensure_customer(db, user, payload.customer_id)

        quote = Quote(
            user_id=user.id,
            quote_number=(payload.quote_number or "").strip() or generate_quote_number(),
        )
        QuoteService._apply(quote, payload, tax_rate)
        db.add(quote)
        commit_or_raise(db, "quote_number", quote.quote_number, QuoteNumberConflictError)
        db.refresh(quote)

        log_billing_write(
            "quote", "created", quote.id,
            user_id=user.id,
            quote_number=quote.quote_number,
            totals={"subtotal": quote.subtotal, "tax_amount": quote.tax_amount, "total_amount": quote.total_amount},
        )
        return quote

    @staticmethod
    def update_quote(db: Session, user: CurrentUser, quote_id: str, payload: QuoteUpdate) -> Quote:
        """Replace a quote's header and its full item set, recomputing totals"""
        validate_items(payload.items)
        tax_rate = validate_tax_rate(
            payload.tax_rate if payload.tax_rate is not None else settings.DEFAULT_TAX_RATE
        )
        quote = QuoteService.get_quote(db, user, quote_id)
        ensure_customer(db, user, payload.customer_id)

        quote.quote_number = payload.quote_number.strip()
        QuoteService._apply(quote, payload, tax_rate)
        commit_or_raise(db, "quote_number", quote.quote_number, QuoteNumberConflictError)
        db.refresh(quote)

        log_billing_write(
            "quote", "updated", quote.id,
            user_id=user.id,
            quote_number=quote.quote_number,
            item_count=len(quote.items),
            totals={"subtotal": quote.subtotal, "tax_amount": quote.tax_amount, "total_amount": quote.total_amount},
        )
        return quote

    @staticmethod
    def get_quote(db: Session, user: CurrentUser, quote_id: str) -> Quote:
        quote = db.query(Quote).filter(Quote.id == quote_id, Quote.user_id == user.id).first()
        if not quote:
            raise QuoteNotFoundError(quote_id)
        return quote

    @staticmethod
    def list_quotes(
        db: Session,
        user: CurrentUser,
        status: Optional[QuoteStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Quote]:
        """List the caller's quotes, newest issue date first; date bounds are inclusive"""
        validate_date_range(start_date, end_date)

        query = db.query(Quote).filter(Quote.user_id == user.id)
        if status is not None:
            query = query.filter(Quote.status == status)
        if start_date is not None:
            query = query.filter(Quote.issue_date >= start_date)
        if end_date is not None:
            query = query.filter(Quote.issue_date <= end_date)
        return query.order_by(Quote.issue_date.desc(), Quote.quote_number).offset(skip).limit(limit).all()

    @staticmethod
    def delete_quote(db: Session, user: CurrentUser, quote_id: str) -> None:
        quote = QuoteService.get_quote(db, user, quote_id)
        db.delete(quote)
        commit_or_raise(db, "quote_number", quote.quote_number, QuoteNumberConflictError)
        log_billing_write("quote", "deleted", quote_id, user_id=user.id)

    @staticmethod
    def convert_to_invoice(db: Session, user: CurrentUser, quote_id: str) -> Invoice:
        """
        Turn a quote into a draft invoice and mark the quote converted.

        The invoice copies the stored totals and items (each item carrying the
        quote's tax rate); invoice date and due date come from the quote's issue
        and expiry dates. Everything is committed in one transaction.
        """
        quote = QuoteService.get_quote(db, user, quote_id)
        if quote.status == QuoteStatus.CONVERTED:
            raise QuoteAlreadyConvertedError(quote_id)

        invoice = Invoice(
            user_id=quote.user_id,
            customer_id=quote.customer_id,
            quote_id=quote.id,
            invoice_number=generate_invoice_number(),
            invoice_date=quote.issue_date,
            due_date=quote.expiry_date,
            status=InvoiceStatus.DRAFT,
            subtotal=quote.subtotal,
            tax_amount=quote.tax_amount,
            total_amount=quote.total_amount,
            notes=quote.notes,
            items=[
                InvoiceItem(
                    position=item.position,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    tax_rate=quote.tax_rate,
                    amount=item.amount,
                )
                for item in quote.items
            ],
        )
        db.add(invoice)
        quote.status = QuoteStatus.CONVERTED
        commit_or_raise(db, "invoice_number", invoice.invoice_number, InvoiceNumberConflictError)
        db.refresh(invoice)

        log_billing_write(
            "quote", "converted", quote.id,
            user_id=user.id,
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
        )
        return invoice
