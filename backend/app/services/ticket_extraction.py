"""
Ticket extraction pipeline.

Pasted airline email text goes to the text-generation model, the JSON it
returns is unwrapped and validated, the check-in-opens instant is derived, and
a ticket with one passenger and one segment is written in a single transaction.
Every stage is terminal on failure; nothing is retried.
"""
import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Settings, settings as default_settings
from app.core.environment import missing_ticket_settings
from app.core.exceptions import (
    ConfigurationError,
    CRMError,
    IncompleteExtractionError,
    InvalidDateTimeError,
    ParseError,
    PersistenceError,
)
from app.core.security import CurrentUser
from app.core.structured_logging import log_pipeline_failure, log_pipeline_stage
from app.models.ticket import Ticket, TicketInvoiceStatus, TicketPassenger, TicketSegment, TicketStatus
from app.schemas.ticket import ExtractedFlight
from app.utils.validators import validate_email_text

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = (
    "Extract the flight details from the text below as JSON with the keys: "
    "airline, pnr, flight_date (YYYY-MM-DD), flight_time (HH:MM), origin, "
    "destination, passenger_name. Return only JSON.\n\n"
)

REQUIRED_FIELDS = ("pnr", "flight_date", "origin", "destination", "passenger_name")
DEFAULT_FLIGHT_TIME = "00:00"
CHECK_IN_WINDOW = timedelta(hours=24)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


@dataclass
class ExtractionResult:
    ticket_id: str
    extracted: ExtractedFlight
    check_in_open_at: datetime

    def to_response(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "ticket_id": self.ticket_id,
            "extracted": self.extracted.model_dump(),
            "check_in_open_at": format_utc(self.check_in_open_at),
        }


def build_prompt(email_text: str) -> str:
    return EXTRACTION_PROMPT + email_text


def strip_code_fence(text: str) -> str:
    """Return the body of a ``` or ```json fenced block, or the trimmed text"""
    stripped = text.strip()
    match = _FENCE_RE.search(stripped)
    if match and match.group(1):
        return match.group(1).strip()
    return stripped


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_model_output(text: str) -> ExtractedFlight:
    """
    Turn the model's output into a validated ExtractedFlight.

    Raises:
        ParseError: the (unfenced) output is not a JSON object
        IncompleteExtractionError: a required field is missing or blank
    """
    raw = strip_code_fence(text)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Model response is not valid JSON: {e.msg}")
    if not isinstance(parsed, dict):
        raise ParseError("Model response is not a JSON object")

    fields = {key: _as_text(parsed.get(key)) for key in ("airline", "flight_time") + REQUIRED_FIELDS}
    missing = [key for key in REQUIRED_FIELDS if not fields[key]]
    if missing:
        raise IncompleteExtractionError(missing)

    fields["flight_time"] = fields["flight_time"] or DEFAULT_FLIGHT_TIME
    return ExtractedFlight(**fields)


def flight_departure(flight_date: str, flight_time: str) -> datetime:
    """
    Combine date and time into a UTC instant.

    A time that is not ``HH:MM`` is treated as midnight.

    Raises:
        InvalidDateTimeError: the combination is not a real date/time
    """
    safe_time = flight_time if flight_time and _TIME_RE.match(flight_time) else DEFAULT_FLIGHT_TIME
    try:
        departure = datetime.strptime(f"{flight_date}T{safe_time}", "%Y-%m-%dT%H:%M")
    except ValueError:
        raise InvalidDateTimeError(flight_date, flight_time)
    return departure.replace(tzinfo=timezone.utc)


def compute_check_in_open_at(flight_date: str, flight_time: str) -> datetime:
    """Check-in opens exactly 24 hours before departure"""
    return flight_departure(flight_date, flight_time) - CHECK_IN_WINDOW


def format_utc(instant: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix"""
    return instant.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def persist_ticket(
    db: Session,
    user: CurrentUser,
    flight: ExtractedFlight,
    check_in_open_at: datetime,
) -> Ticket:
    """
    Write ticket, passenger and segment as one unit.

    Raises:
        PersistenceError: any write failed; nothing is left behind
    """
    departure_date = (check_in_open_at + CHECK_IN_WINDOW).date()
    try:
        ticket = Ticket(
            user_id=user.id,
            customer_id=None,
            pnr_code=flight.pnr,
            issue_date=departure_date,
            base_fare=0,
            tax_amount=0,
            service_fee=0,
            status=TicketStatus.SALES,
            invoice_status=TicketInvoiceStatus.PENDING,
        )
        db.add(ticket)
        db.flush()

        db.add(TicketPassenger(
            ticket_id=ticket.id,
            passenger_name=flight.passenger_name,
            ticket_number=None,
            passenger_type=None,
        ))
        db.add(TicketSegment(
            ticket_id=ticket.id,
            airline=flight.airline or None,
            flight_no=None,
            origin=flight.origin,
            destination=flight.destination,
            flight_date=departure_date,
            flight_time=flight.flight_time,
            check_in_open_at=check_in_open_at,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Ticket write rolled back: {e}", exc_info=True)
        raise PersistenceError(str(e))

    db.refresh(ticket)
    return ticket


class TicketExtractionPipeline:
    """
    One pass of the extraction flow for one request.

    ``resolve_user`` turns the Authorization header into a CurrentUser;
    ``client_factory`` builds the text-generation client. Both are injected so
    the pipeline never reads ambient state.
    """

    def __init__(
        self,
        db: Session,
        resolve_user: Callable[[Optional[str]], CurrentUser],
        client_factory: Callable[[], Any],
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.resolve_user = resolve_user
        self.client_factory = client_factory
        self.settings = settings or default_settings

    def run(self, email_text: Any, authorization: Optional[str]) -> ExtractionResult:
        stage = "input"
        user: Optional[CurrentUser] = None
        started = time.perf_counter()
        try:
            email_text = validate_email_text(email_text)

            stage = "configuration"
            missing = missing_ticket_settings(self.settings)
            if missing:
                raise ConfigurationError(missing[0])

            stage = "authentication"
            user = self.resolve_user(authorization)

            stage = "model"
            model_started = time.perf_counter()
            output = self.client_factory().generate(build_prompt(email_text))
            log_pipeline_stage(
                stage, user_id=user.id,
                duration_ms=(time.perf_counter() - model_started) * 1000,
                output_chars=len(output),
            )

            stage = "parse"
            flight = parse_model_output(output)

            stage = "check_in"
            check_in_open_at = compute_check_in_open_at(flight.flight_date, flight.flight_time)

            stage = "persist"
            ticket = persist_ticket(self.db, user, flight, check_in_open_at)
        except CRMError as e:
            log_pipeline_failure(stage, type(e).__name__, e.message, user_id=user.id if user else None)
            raise

        log_pipeline_stage(
            "completed", user_id=user.id,
            duration_ms=(time.perf_counter() - started) * 1000,
            ticket_id=ticket.id,
            pnr=flight.pnr,
        )
        return ExtractionResult(ticket_id=ticket.id, extracted=flight, check_in_open_at=check_in_open_at)
