from fastapi import APIRouter
from app.api.v1.endpoints import customers, quotes, invoices, tickets

api_router = APIRouter()
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])
