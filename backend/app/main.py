"""
FastAPI app entrypoint.

Salon booking backend: tenants, staff, services, customers, appointment availability and
booking. Appointment reminders run on an in-process APScheduler job.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.api.routes import appointments, auth, availability, catalog, customers, staff, tenants
from app.config import settings
from app.core.constants import REMINDER_JOB_ID
from app.core.errors import EXTERNAL_ERROR_RULES, AppError, error_payload
from app.scheduler.reminder_job import run_reminder_job

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Scheduler: appointment reminders every reminder_poll_minutes
_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.check_secrets()
    if settings.reminders_enabled:
        _scheduler.add_job(
            run_reminder_job,
            "interval",
            minutes=settings.reminder_poll_minutes,
            id=REMINDER_JOB_ID,
            replace_existing=True,
        )
        _scheduler.start()
        logger.info(
            "Reminder job scheduled every %s min (lead %s min)",
            settings.reminder_poll_minutes,
            settings.reminder_lead_minutes,
        )
    app.state.scheduler = _scheduler
    logger.info("Backend ready (environment=%s)", settings.environment)
    yield
    if _scheduler.running:
        _scheduler.shutdown(wait=False)


app = FastAPI(title="Salon Booking API", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the admin panel / web booking page
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8081",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, body = error_payload(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, body["detail"])
    return JSONResponse(status_code=status_code, content=body)


# Domain errors and the mapped external ones (EXTERNAL_ERROR_RULES) share one handler
app.add_exception_handler(AppError, app_error_handler)
for _exc_type, *_ in EXTERNAL_ERROR_RULES:
    app.add_exception_handler(_exc_type, app_error_handler)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    status_code, body = error_payload(exc)
    return JSONResponse(status_code=status_code, content=body)


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(tenants.router, tags=["tenants"])
app.include_router(staff.router, prefix="/staff", tags=["staff"])
app.include_router(catalog.router, prefix="/services", tags=["services"])
app.include_router(customers.router, prefix="/customers", tags=["customers"])
app.include_router(availability.router, prefix="/availability", tags=["availability"])
app.include_router(appointments.router, prefix="/appointments", tags=["appointments"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Salon Booking API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
