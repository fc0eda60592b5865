"""
Cooperative Finance Review — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from finance_review.config import get_settings
from finance_review.logging import setup_logging
from finance_review.api.middleware import RequestIDMiddleware
from finance_review.api.health import router as health_router
from finance_review.api.monthly_records import router as monthly_records_router
from finance_review.api.change_logs import router as change_logs_router
from finance_review.api.notifications import router as notifications_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Review workflow for cooperative members' monthly finances",
)

app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router)
app.include_router(monthly_records_router)
app.include_router(change_logs_router)
app.include_router(notifications_router)
