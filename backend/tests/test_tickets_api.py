"""Tests for the /tickets endpoints."""
import json

from app.core import config
from app.core.exceptions import UnauthorizedError, UpstreamError
from app.models.ticket import Ticket, TicketPassenger, TicketSegment

from conftest import FLIGHT_JSON

PARSE_URL = "/api/v1/tickets/parse"
AUTH = {"Authorization": "Bearer test-token"}


def row_counts(session_factory):
    db = session_factory()
    try:
        return (
            db.query(Ticket).count(),
            db.query(TicketPassenger).count(),
            db.query(TicketSegment).count(),
        )
    finally:
        db.close()


PREFLIGHT = {
    "Origin": "https://crm.example.org",
    "Access-Control-Request-Method": "POST",
    "Access-Control-Request-Headers": "authorization, content-type",
}


def test_browser_preflight_from_unlisted_origin(client):
    response = client.options(PARSE_URL, headers=PREFLIGHT)
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "authorization" in response.headers["access-control-allow-headers"].lower()
    assert "POST" in response.headers["access-control-allow-methods"]


def test_options_without_origin(client):
    response = client.options(PARSE_URL)
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_post_from_unlisted_origin(client):
    response = client.post(
        PARSE_URL,
        json={"emailText": "mail"},
        headers={**AUTH, "Origin": "https://crm.example.org"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_other_routes_keep_configured_origins(client):
    denied = client.options("/api/v1/quotes", headers=PREFLIGHT)
    assert denied.status_code == 400

    allowed = client.options("/api/v1/quotes", headers={**PREFLIGHT, "Origin": "http://localhost:5173"})
    assert allowed.status_code == 200
    assert allowed.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_parse_success(client, fake_llm, session_factory):
    response = client.post(PARSE_URL, json={"emailText": "Booking ref ABC123 ..."}, headers=AUTH)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    body = response.json()
    assert body["ok"] is True
    assert body["check_in_open_at"] == "2025-03-09T14:30:00.000Z"
    assert body["extracted"]["pnr"] == "ABC123"
    assert body["extracted"]["passenger_name"] == "Ayse Yilmaz"
    assert body["ticket_id"]
    assert fake_llm.prompts[0].endswith("Booking ref ABC123 ...")
    assert row_counts(session_factory) == (1, 1, 1)


def test_parsed_ticket_can_be_fetched(client):
    ticket_id = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH).json()["ticket_id"]

    response = client.get(f"/api/v1/tickets/{ticket_id}", headers=AUTH)
    assert response.status_code == 200
    ticket = response.json()
    assert ticket["pnr_code"] == "ABC123"
    assert ticket["status"] == "sales"
    assert ticket["invoice_status"] == "pending"
    assert ticket["passengers"][0]["passenger_name"] == "Ayse Yilmaz"
    segment = ticket["segments"][0]
    assert segment["origin"] == "IST"
    assert segment["destination"] == "LHR"
    assert segment["flight_date"] == "2025-03-10"


def test_unknown_ticket(client):
    response = client.get("/api/v1/tickets/does-not-exist", headers=AUTH)
    assert response.status_code == 404


def test_empty_text_is_bad_request(client, fake_llm):
    response = client.post(PARSE_URL, json={"emailText": ""}, headers=AUTH)
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "emailText is required"}
    assert fake_llm.prompts == []


def test_missing_field_is_bad_request(client):
    response = client.post(PARSE_URL, json={"text": "wrong key"}, headers=AUTH)
    assert response.status_code == 400
    assert response.json()["ok"] is False


def test_invalid_json_body_is_bad_request(client):
    response = client.post(
        PARSE_URL,
        content=b"not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "emailText is required"}


def test_incomplete_extraction_writes_nothing(client, fake_llm, session_factory):
    fake_llm.output = json.dumps({k: v for k, v in FLIGHT_JSON.items() if k != "pnr"})

    response = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH)

    assert response.status_code == 500
    body = response.json()
    assert body["ok"] is False
    assert "pnr" in body["error"]
    assert row_counts(session_factory) == (0, 0, 0)


def test_unparseable_model_output(client, fake_llm, session_factory):
    fake_llm.output = "I could not find any flight."

    response = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH)

    assert response.status_code == 500
    assert response.json()["ok"] is False
    assert row_counts(session_factory) == (0, 0, 0)


def test_upstream_failure(client, fake_llm):
    fake_llm.error = UpstreamError("Gemini API error: 429 quota exceeded", upstream_status=429)

    response = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "Gemini API error: 429 quota exceeded"}


def test_unauthorized_caller(client, fake_llm, auth_state, session_factory):
    auth_state["error"] = UnauthorizedError("Invalid or expired session")

    response = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "Invalid or expired session"}
    assert fake_llm.prompts == []
    assert row_counts(session_factory) == (0, 0, 0)


def test_missing_authorization_header(client, fake_llm):
    response = client.post(PARSE_URL, json={"emailText": "mail"})
    assert response.status_code == 500
    assert response.json()["ok"] is False
    assert fake_llm.prompts == []


def test_missing_model_key_is_named(client, fake_llm, monkeypatch):
    monkeypatch.setattr(config.settings, "GEMINI_API_KEY", "")

    response = client.post(PARSE_URL, json={"emailText": "mail"}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "GEMINI_API_KEY is not configured"}
    assert fake_llm.prompts == []
