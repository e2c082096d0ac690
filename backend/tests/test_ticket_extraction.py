"""Tests for the ticket extraction pipeline stages and its transactional write."""
import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.core.config import Settings
from app.core.exceptions import (
    BadRequestError,
    ConfigurationError,
    IncompleteExtractionError,
    InvalidDateTimeError,
    ParseError,
    PersistenceError,
    UnauthorizedError,
    UpstreamError,
)
from app.models.ticket import Ticket, TicketInvoiceStatus, TicketPassenger, TicketSegment, TicketStatus
from app.services.ticket_extraction import (
    EXTRACTION_PROMPT,
    TicketExtractionPipeline,
    compute_check_in_open_at,
    format_utc,
    parse_model_output,
    strip_code_fence,
)

from conftest import FLIGHT_JSON, USER, FakeLLM


def pipeline_settings(**overrides):
    values = dict(
        DATABASE_URL="sqlite://",
        AUTH_URL="http://auth.test",
        AUTH_ANON_KEY="anon",
        LLM_PROVIDER="gemini",
        GEMINI_API_KEY="key",
    )
    values.update(overrides)
    return Settings(**values)


def make_pipeline(db_session, llm=None, resolver=None, settings=None):
    llm = llm or FakeLLM()
    resolver = resolver or (lambda authorization: USER)
    return TicketExtractionPipeline(
        db_session,
        resolve_user=resolver,
        client_factory=lambda: llm,
        settings=settings or pipeline_settings(),
    )


def count_rows(db_session):
    return (
        db_session.query(Ticket).count(),
        db_session.query(TicketPassenger).count(),
        db_session.query(TicketSegment).count(),
    )


class TestUnwrapping:

    def test_json_fence_removed(self):
        assert strip_code_fence('```json\n{"pnr": "X"}\n```') == '{"pnr": "X"}'

    def test_bare_fence_removed(self):
        assert strip_code_fence('```\n{"pnr": "X"}\n```') == '{"pnr": "X"}'

    def test_unfenced_text_trimmed(self):
        assert strip_code_fence('  {"pnr": "X"}\n') == '{"pnr": "X"}'

    def test_fenced_and_bare_parse_identically(self):
        bare = json.dumps(FLIGHT_JSON)
        fenced = f"```json\n{bare}\n```"
        assert parse_model_output(fenced) == parse_model_output(bare)

    def test_uppercase_fence_label(self):
        fenced = f"```JSON\n{json.dumps(FLIGHT_JSON)}\n```"
        assert parse_model_output(fenced).pnr == "ABC123"


class TestFieldValidation:

    def test_fields_are_trimmed(self):
        raw = dict(FLIGHT_JSON, pnr="  ABC123 ", origin=" IST")
        flight = parse_model_output(json.dumps(raw))
        assert flight.pnr == "ABC123"
        assert flight.origin == "IST"

    def test_missing_pnr(self):
        raw = {k: v for k, v in FLIGHT_JSON.items() if k != "pnr"}
        with pytest.raises(IncompleteExtractionError) as exc:
            parse_model_output(json.dumps(raw))
        assert exc.value.missing_fields == ["pnr"]

    def test_blank_passenger_name(self):
        raw = dict(FLIGHT_JSON, passenger_name="   ")
        with pytest.raises(IncompleteExtractionError) as exc:
            parse_model_output(json.dumps(raw))
        assert "passenger_name" in exc.value.message

    def test_optional_fields_default(self):
        raw = {k: v for k, v in FLIGHT_JSON.items() if k not in ("airline", "flight_time")}
        flight = parse_model_output(json.dumps(raw))
        assert flight.airline == ""
        assert flight.flight_time == "00:00"

    def test_null_values_treated_as_missing(self):
        raw = dict(FLIGHT_JSON, destination=None, airline=None)
        with pytest.raises(IncompleteExtractionError) as exc:
            parse_model_output(json.dumps(raw))
        assert exc.value.missing_fields == ["destination"]

    def test_numbers_coerced_to_strings(self):
        raw = dict(FLIGHT_JSON, pnr=123456)
        assert parse_model_output(json.dumps(raw)).pnr == "123456"

    def test_malformed_json(self):
        with pytest.raises(ParseError):
            parse_model_output("Sure! Here are the details: pnr ABC123")

    def test_json_array_rejected(self):
        with pytest.raises(ParseError):
            parse_model_output(json.dumps([FLIGHT_JSON]))


class TestCheckInTime:

    def test_24_hours_before_departure(self):
        check_in = compute_check_in_open_at("2025-03-10", "14:30")
        assert check_in == datetime(2025, 3, 9, 14, 30, tzinfo=timezone.utc)

    def test_iso_format(self):
        assert format_utc(compute_check_in_open_at("2025-03-10", "14:30")) == "2025-03-09T14:30:00.000Z"

    def test_month_boundary(self):
        check_in = compute_check_in_open_at("2025-03-01", "10:00")
        assert check_in == datetime(2025, 2, 28, 10, 0, tzinfo=timezone.utc)

    def test_malformed_time_means_midnight(self):
        assert compute_check_in_open_at("2025-03-10", "2pm") == datetime(2025, 3, 9, 0, 0, tzinfo=timezone.utc)
        assert compute_check_in_open_at("2025-03-10", "") == datetime(2025, 3, 9, 0, 0, tzinfo=timezone.utc)

    def test_not_a_date(self):
        with pytest.raises(InvalidDateTimeError):
            compute_check_in_open_at("not-a-date", "14:30")

    def test_impossible_date(self):
        with pytest.raises(InvalidDateTimeError):
            compute_check_in_open_at("2025-02-30", "10:00")

    def test_out_of_range_time(self):
        with pytest.raises(InvalidDateTimeError):
            compute_check_in_open_at("2025-03-10", "25:00")


class TestPipeline:

    def test_success_writes_ticket_passenger_and_segment(self, db_session):
        llm = FakeLLM()
        result = make_pipeline(db_session, llm=llm).run("Your booking ABC123 ...", "Bearer token")

        assert llm.prompts == [EXTRACTION_PROMPT + "Your booking ABC123 ..."]
        assert result.extracted.pnr == "ABC123"
        assert result.check_in_open_at == datetime(2025, 3, 9, 14, 30, tzinfo=timezone.utc)
        assert count_rows(db_session) == (1, 1, 1)

        ticket = db_session.query(Ticket).one()
        assert ticket.id == result.ticket_id
        assert ticket.user_id == USER.id
        assert ticket.pnr_code == "ABC123"
        assert ticket.status == TicketStatus.SALES
        assert ticket.invoice_status == TicketInvoiceStatus.PENDING
        assert ticket.base_fare == 0
        assert ticket.service_fee == 0
        assert ticket.passengers[0].passenger_name == "Ayse Yilmaz"
        segment = ticket.segments[0]
        assert (segment.origin, segment.destination, segment.airline) == ("IST", "LHR", "Turkish Airlines")
        assert segment.flight_date.isoformat() == "2025-03-10"

    def test_response_shape(self, db_session):
        response = make_pipeline(db_session).run("mail", "Bearer token").to_response()
        assert response["ok"] is True
        assert response["check_in_open_at"] == "2025-03-09T14:30:00.000Z"
        assert response["extracted"]["flight_time"] == "14:30"

    def test_missing_airline_stored_as_null(self, db_session):
        raw = dict(FLIGHT_JSON, airline="")
        make_pipeline(db_session, llm=FakeLLM(output=json.dumps(raw))).run("mail", "Bearer token")
        assert db_session.query(TicketSegment).one().airline is None

    def test_blank_text_rejected_before_auth(self, db_session):
        def resolver(authorization):
            raise AssertionError("resolver must not be called")

        with pytest.raises(BadRequestError):
            make_pipeline(db_session, resolver=resolver).run("   \n", "Bearer token")

    def test_missing_configuration_named(self, db_session):
        with pytest.raises(ConfigurationError) as exc:
            make_pipeline(db_session, settings=pipeline_settings(GEMINI_API_KEY="")).run("mail", "Bearer t")
        assert exc.value.message == "GEMINI_API_KEY is not configured"

    def test_unauthorized_stops_before_model(self, db_session):
        llm = FakeLLM()

        def resolver(authorization):
            raise UnauthorizedError()

        with pytest.raises(UnauthorizedError):
            make_pipeline(db_session, llm=llm, resolver=resolver).run("mail", None)
        assert llm.prompts == []

    def test_upstream_error_propagates(self, db_session):
        llm = FakeLLM(error=UpstreamError("Gemini API error: 503 overloaded", upstream_status=503))
        with pytest.raises(UpstreamError) as exc:
            make_pipeline(db_session, llm=llm).run("mail", "Bearer t")
        assert exc.value.upstream_status == 503
        assert count_rows(db_session) == (0, 0, 0)

    def test_incomplete_output_writes_nothing(self, db_session):
        raw = {k: v for k, v in FLIGHT_JSON.items() if k != "pnr"}
        with pytest.raises(IncompleteExtractionError):
            make_pipeline(db_session, llm=FakeLLM(output=json.dumps(raw))).run("mail", "Bearer t")
        assert count_rows(db_session) == (0, 0, 0)

    def test_invalid_date_writes_nothing(self, db_session):
        raw = dict(FLIGHT_JSON, flight_date="not-a-date")
        with pytest.raises(InvalidDateTimeError):
            make_pipeline(db_session, llm=FakeLLM(output=json.dumps(raw))).run("mail", "Bearer t")
        assert count_rows(db_session) == (0, 0, 0)

    def test_failure_after_ticket_insert_rolls_back_everything(self, db_session):
        def fail_on_segment(session, flush_context, instances):
            if any(isinstance(obj, TicketSegment) for obj in session.new):
                raise OperationalError("INSERT INTO ticket_segments", {}, Exception("disk full"))

        event.listen(db_session, "before_flush", fail_on_segment)
        try:
            with pytest.raises(PersistenceError):
                make_pipeline(db_session).run("mail", "Bearer t")
        finally:
            event.remove(db_session, "before_flush", fail_on_segment)

        assert count_rows(db_session) == (0, 0, 0)
