# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import auth, users, admin, parking_slots, slot_requests, tickets, health
from app.database import SessionLocal, create_tables
from app.config import settings
from app.services import otp_service
from app.utils.exceptions import ServiceError
from app.utils.responses import error_body
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="ParkEase Parking Management API",
    description="Driver onboarding, slot requests, tickets and billing.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (frontend origin) ───────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors(), exclude={"ctx", "url", "input"})
    message = errors[0]["msg"].replace("Value error, ", "") if errors else "Validation failed"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, errors),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    content = error_body("Internal server error")
    if settings.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,          prefix="/api/auth",          tags=["🔑 Auth"])
app.include_router(users.router,         prefix="/api/user",          tags=["🙋 User"])
app.include_router(admin.router,         prefix="/api/admin",         tags=["🛠️  Admin"])
app.include_router(parking_slots.router, prefix="/api/parking-slots", tags=["🅿️  Parking Slots"])
app.include_router(slot_requests.router, prefix="/api/slot-requests", tags=["📝 Slot Requests"])
app.include_router(tickets.router,       prefix="/api/tickets",       tags=["🎫 Tickets"])
app.include_router(health.router,        prefix="/api",               tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 ParkEase Backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    db = SessionLocal()
    try:
        removed = otp_service.delete_expired(db)
        logger.info(f"🧹 Removed {removed} expired OTP codes")
    finally:
        db.close()

    logger.info(f"💰 Hourly rate: {settings.HOURLY_RATE} {settings.CURRENCY}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 ParkEase Backend shutting down...")
