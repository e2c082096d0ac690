from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.core.config import settings
from app.core.database import get_db
from app.core.security import CurrentUser, get_current_user
from app.models.quote import QuoteStatus
from app.schemas.quote import (
    QuoteConversionResponse,
    QuoteCreate,
    QuoteNumberResponse,
    QuoteResponse,
    QuoteUpdate,
    TotalsRequest,
    TotalsResponse,
)
from app.services.pricing import compute_totals, format_totals, generate_quote_number
from app.services.quote_service import QuoteService
from app.utils.validators import validate_pagination

router = APIRouter()


@router.post("/totals", response_model=TotalsResponse)
async def preview_totals(payload: TotalsRequest, user: CurrentUser = Depends(get_current_user)):
    """Totals for a quote being edited, with display strings; an empty item list gives zeros"""
    totals = compute_totals(payload.items, payload.tax_rate)
    currency = (payload.currency or settings.DEFAULT_CURRENCY).upper()
    return TotalsResponse(
        **totals.as_dict(),
        currency=currency,
        formatted=format_totals(totals, currency),
    )


@router.get("/default-number", response_model=QuoteNumberResponse)
async def default_quote_number(user: CurrentUser = Depends(get_current_user)):
    """Suggested quote number for a new quote (not reserved)"""
    return QuoteNumberResponse(quote_number=generate_quote_number())


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
def create_quote(
    payload: QuoteCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a quote; totals are computed from the submitted items"""
    return QuoteService.create_quote(db, user, payload)


@router.get("", response_model=List[QuoteResponse])
def list_quotes(
    status_filter: Optional[QuoteStatus] = Query(None, alias="status"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List quotes, optionally by status and inclusive issue-date range"""
    is_valid, error_msg = validate_pagination(skip, limit)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_msg)
    return QuoteService.list_quotes(
        db, user,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(
    quote_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return QuoteService.get_quote(db, user, quote_id)


@router.put("/{quote_id}", response_model=QuoteResponse)
def update_quote(
    quote_id: str,
    payload: QuoteUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the quote header and all items"""
    return QuoteService.update_quote(db, user, quote_id, payload)


@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(
    quote_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    QuoteService.delete_quote(db, user, quote_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{quote_id}/convert", response_model=QuoteConversionResponse, status_code=status.HTTP_201_CREATED)
def convert_quote(
    quote_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Convert a quote into a draft invoice"""
    invoice = QuoteService.convert_to_invoice(db, user, quote_id)
    return QuoteConversionResponse(
        quote_id=quote_id,
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
    )
