from datetime import date
from typing import Optional

from app.core.exceptions import BadRequestError, ValidationError


def validate_email_text(email_text) -> str:
    """Return the pasted email text, rejecting missing or blank input"""
    if email_text is None or not str(email_text).strip():
        raise BadRequestError("emailText is required")
    return str(email_text)


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    """Validate an inclusive date filter; either bound may be open"""
    if start_date and end_date and start_date > end_date:
        raise ValidationError(
            "start_date must be on or before end_date",
            errors=[{"field": "start_date", "message": "start_date must be on or before end_date"}],
        )


def validate_pagination(skip: int, limit: int) -> tuple[bool, Optional[str]]:
    """Validate list paging parameters"""
    if skip < 0:
        return False, "skip must be 0 or greater"
    if limit < 1 or limit > 500:
        return False, "limit must be between 1 and 500"
    return True, None
