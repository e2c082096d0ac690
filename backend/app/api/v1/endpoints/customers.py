from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.database import get_db
from app.core.exceptions import PersistenceError
from app.core.security import CurrentUser, get_current_user
from app.models.customer import Customer
from app.schemas.customer import CustomerCreate, CustomerResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    customer = Customer(user_id=user.id, **payload.model_dump())
    db.add(customer)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not create customer: {e}", exc_info=True)
        raise PersistenceError(str(e))
    db.refresh(customer)
    logger.info(f"Created customer {customer.id} for user {user.id}")
    return customer


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return db.query(Customer).filter(Customer.user_id == user.id).order_by(Customer.name).all()
