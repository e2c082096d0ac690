from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class CRMError(HTTPException):
    """Base for every error the service raises on purpose"""

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code=status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(CRMError):
    """Bad or missing user input; carries per-field errors when there are any"""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message)
        self.errors = errors or []
        if self.errors:
            self.detail = {"message": message, "errors": self.errors}


class BadRequestError(CRMError):
    def __init__(self, message: str):
        super().__init__(status.HTTP_400_BAD_REQUEST, message)


class UnauthorizedError(CRMError):
    def __init__(self, message: str = "Session not found (Authorization header required)"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message)


class ConfigurationError(CRMError):
    def __init__(self, setting_name: str):
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"{setting_name} is not configured"
        )
        self.setting_name = setting_name


class NotFoundError(CRMError):
    def __init__(self, kind: str, object_id: str):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{kind} {object_id} not found")


class QuoteNotFoundError(NotFoundError):
    def __init__(self, quote_id: str):
        super().__init__("Quote", quote_id)


class InvoiceNotFoundError(NotFoundError):
    def __init__(self, invoice_id: str):
        super().__init__("Invoice", invoice_id)


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        super().__init__("Customer", customer_id)


class TicketNotFoundError(NotFoundError):
    def __init__(self, ticket_id: str):
        super().__init__("Ticket", ticket_id)


class QuoteNumberConflictError(CRMError):
    def __init__(self, quote_number: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Quote number {quote_number} is already in use"
        )


class InvoiceNumberConflictError(CRMError):
    def __init__(self, invoice_number: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Invoice number {invoice_number} is already in use"
        )


class QuoteAlreadyConvertedError(CRMError):
    def __init__(self, quote_id: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"Quote {quote_id} has already been converted to an invoice"
        )


class UpstreamError(CRMError):
    """The text-generation service failed or returned nothing usable"""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(status.HTTP_502_BAD_GATEWAY, message)
        self.upstream_status = upstream_status


class ParseError(CRMError):
    def __init__(self, message: str = "Model response is not valid JSON"):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


class IncompleteExtractionError(CRMError):
    def __init__(self, missing_fields: List[str]):
        super().__init__(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            f"Model response is missing required fields: {', '.join(missing_fields)}"
        )
        self.missing_fields = missing_fields


class InvalidDateTimeError(CRMError):
    def __init__(self, flight_date: str, flight_time: str):
        super().__init__(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            f"Invalid flight date/time: {flight_date} {flight_time}"
        )


class PersistenceError(CRMError):
    def __init__(self, message: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Database write failed: {message}")
