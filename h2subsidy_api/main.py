"""
H2 Subsidy API - HTTP surface for the subsidy milestone tracker.

Provides REST endpoints for:
- Accounts (POST /signup, POST /login)
- Vendors (GET /vendors, POST /add-vendor)
- Progress (GET/POST /vendors/{vendor_id}/progress)
- Payout flag (POST /vendors/{vendor_id}/payout)
- Demo reset (POST /reset)
- Health checks (GET /health)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Path as PathParam, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__, credentials, progress, vendors
from .auth import verify_api_token
from .config import Settings, get_settings, mask_url
from .database import SubsidyDatabase
from .errors import StoreError, SubsidyError
from .models import (
    AddVendorRequest,
    AddVendorResponse,
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProgressResponse,
    RecordProgressRequest,
    SignupRequest,
    UserInfo,
    VendorResponse,
)
from .schema import INT_MAX

# Configure logging
logging.basicConfig(format="%(message)s", level=logging.INFO)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


# Shared pool (initialized at startup)
_database: SubsidyDatabase | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    global _database

    settings = get_settings()
    database = SubsidyDatabase.from_settings(settings)

    # SchemaError propagates: the server must not serve without its tables
    try:
        await database.ensure_schema()
    except Exception:
        await database.close()
        raise

    _database = database
    logger.info(
        "API started",
        version=__version__,
        host=settings.host,
        port=settings.port,
        database=mask_url(database.database_url),
    )

    yield

    # Cleanup
    _database = None
    await database.close()

    logger.info("API stopped")


def get_database() -> SubsidyDatabase:
    if _database is None:
        raise StoreError("Database not initialized")
    return _database


# Create FastAPI app
app = FastAPI(
    title="H2 Subsidy API",
    description="Milestone tracking and payout flags for green-hydrogen subsidies",
    version=__version__,
    lifespan=lifespan,
)


# Add CORS middleware
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Error Handling
# ============================================================================


@app.exception_handler(SubsidyError)
async def subsidy_error_handler(request: Request, exc: SubsidyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and path params are client errors (400), not 422."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ())]
    if len(loc) <= 1 or first.get("type") == "json_invalid":
        message = "Request body must be a JSON object."
    else:
        message = f"Invalid value for '{loc[-1]}'."
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


# ============================================================================
# Health Check
# ============================================================================


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Check API health and database connectivity.
    """
    database_ok = False
    if _database:
        database_ok = await _database.ping()

    return HealthResponse(
        status="ok" if database_ok else "degraded",
        version=__version__,
        database=database_ok,
    )


# ============================================================================
# Accounts
# ============================================================================


@app.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    db: SubsidyDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Create an account with a bcrypt-hashed password.
    """
    await credentials.signup(
        db,
        name=request.name,
        email=request.email,
        role=request.role,
        password=request.password,
        rounds=settings.bcrypt_rounds,
    )
    return MessageResponse(message="User created successfully!")


@app.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: SubsidyDatabase = Depends(get_database),
) -> LoginResponse:
    """
    Verify credentials and check the account's role against the portal.

    No session token is issued; the client keeps the returned user.
    """
    user = await credentials.login(
        db,
        email=request.email,
        password=request.password,
        role=request.role,
    )
    return LoginResponse(message="Login successful!", user=UserInfo(**user))


# ============================================================================
# Vendors
# ============================================================================


@app.get("/vendors", response_model=list[VendorResponse])
async def get_vendors(db: SubsidyDatabase = Depends(get_database)) -> list[VendorResponse]:
    """List all vendors ordered by name."""
    rows = await vendors.list_vendors(db)
    return [VendorResponse(**row) for row in rows]


@app.post("/add-vendor", response_model=AddVendorResponse, status_code=status.HTTP_201_CREATED)
async def add_vendor(
    request: AddVendorRequest,
    db: SubsidyDatabase = Depends(get_database),
) -> AddVendorResponse:
    """Register a vendor."""
    vendor_id = await vendors.add_vendor(
        db,
        name=request.name,
        wallet_address=request.wallet_address,
        milestone_goal=request.milestone_goal,
        reward_amount=request.reward_amount,
    )
    return AddVendorResponse(message="Vendor added successfully!", vendor_id=vendor_id)


# ============================================================================
# Progress
# ============================================================================


@app.get("/vendors/{vendor_id}/progress", response_model=ProgressResponse)
async def get_progress(
    vendor_id: int = PathParam(..., le=INT_MAX),
    db: SubsidyDatabase = Depends(get_database),
) -> ProgressResponse:
    """Total progress recorded for the vendor (0 when none)."""
    total = await progress.get_total_progress(db, vendor_id)
    return ProgressResponse(total_progress=total)


@app.post("/vendors/{vendor_id}/progress", response_model=MessageResponse)
async def record_progress(
    *,
    vendor_id: int = PathParam(..., le=INT_MAX),
    request: RecordProgressRequest,
    db: SubsidyDatabase = Depends(get_database),
) -> MessageResponse:
    """Append a positive progress increment."""
    await progress.record_progress(db, vendor_id, request.new_progress)
    return MessageResponse(message="Progress updated successfully!")


# ============================================================================
# Payout
# ============================================================================


@app.post("/vendors/{vendor_id}/payout", response_model=MessageResponse)
async def payout(
    vendor_id: int = PathParam(..., le=INT_MAX),
    db: SubsidyDatabase = Depends(get_database),
) -> MessageResponse:
    """
    Flag the vendor as paid.

    Not gated on milestone completion and never moves funds.
    """
    await vendors.mark_paid(db, vendor_id)
    return MessageResponse(message="Payout processed successfully!")


# ============================================================================
# Reset
# ============================================================================


@app.post(
    "/reset",
    response_model=MessageResponse,
    dependencies=[Depends(verify_api_token)],
)
async def reset(db: SubsidyDatabase = Depends(get_database)) -> MessageResponse:
    """Clear users, vendors and progress logs. Demo environments only."""
    await db.reset_all()
    return MessageResponse(message="Simulation reset successfully.")


# ============================================================================
# Browser UI
# ============================================================================

# Mounted last so the API routes above take precedence
if _settings.static_dir and Path(_settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=_settings.static_dir, html=True), name="static")


# ============================================================================
# Entry Point
# ============================================================================


def run() -> None:
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "h2subsidy_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
