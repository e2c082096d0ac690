from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from app.core.config import settings
from app.core.environment import check_on_startup
from app.api.v1.api import api_router
from app.core.middleware import RouteCORSMiddleware, exception_handler
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_on_startup()
    yield


app = FastAPI(
    title="CRM Billing API",
    description="Customers, quotes, invoices and LLM-assisted airline ticket entry",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Store environment in app state
app.state.ENVIRONMENT = settings.ENVIRONMENT

# Add exception handler middleware
app.middleware("http")(exception_handler)

# CORS middleware; the ticket parse route is callable from any origin
app.add_middleware(
    RouteCORSMiddleware,
    open_paths=[f"{settings.API_V1_PREFIX}/tickets/parse"],
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add validation error handler for better debugging
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger = logging.getLogger(__name__)
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")
    try:
        body = await request.body()
        logger.error(f"Request body: {body.decode('utf-8')[:500]}")  # Log first 500 chars
    except Exception as e:
        logger.error(f"Could not read request body: {e}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    return {"message": "CRM Billing API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
