from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
import json
import logging

from app.core.database import get_db
from app.core.exceptions import BadRequestError, CRMError, TicketNotFoundError
from app.core.security import CurrentUser, get_current_user, resolve_user
from app.models.ticket import Ticket
from app.schemas.ticket import ErrorEnvelope, ParseTicketResponse, TicketResponse
from app.services.llm_client import get_llm_client
from app.services.ticket_extraction import TicketExtractionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def get_user_resolver():
    """Dependency providing the Authorization-header resolver"""
    return resolve_user


def get_llm_factory():
    """Dependency providing the text-generation client factory"""
    return get_llm_client


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@router.options("/parse")
async def parse_ticket_options():
    """Handle CORS preflight for the parse endpoint"""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/parse",
    response_model=ParseTicketResponse,
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
async def parse_ticket(
    request: Request,
    db: Session = Depends(get_db),
    user_resolver=Depends(get_user_resolver),
    llm_factory=Depends(get_llm_factory),
):
    """
    Extract flight details from pasted airline email text and record the ticket.

    Body: ``{"emailText": "..."}``. Every failure is returned as
    ``{"ok": false, "error": "..."}``: 400 for missing input, 500 otherwise.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = {}
    email_text = body.get("emailText") if isinstance(body, dict) else None

    pipeline = TicketExtractionPipeline(db, resolve_user=user_resolver, client_factory=llm_factory)
    try:
        result = await run_in_threadpool(pipeline.run, email_text, request.headers.get("authorization"))
    except BadRequestError as e:
        return error_response(400, e.message)
    except CRMError as e:
        return error_response(500, e.message)
    except Exception as e:
        logger.error(f"Ticket extraction failed unexpectedly: {e}", exc_info=True)
        return error_response(500, str(e))

    return JSONResponse(status_code=200, content=result.to_response(), headers=CORS_HEADERS)


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a ticket with its passengers and segments"""
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id, Ticket.user_id == user.id).first()
    if not ticket:
        raise TicketNotFoundError(ticket_id)
    return ticket
