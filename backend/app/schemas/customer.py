from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from app.models.customer import CustomerType


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: CustomerType = CustomerType.INDIVIDUAL
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_number: Optional[str] = None
    tax_office: Optional[str] = None
    contact_person: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        # Runs before min_length, so a whitespace-only name is rejected
        return value.strip() if isinstance(value, str) else value


class CustomerResponse(CustomerCreate):
    id: str
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
