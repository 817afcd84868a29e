import logging

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import charityhub.models  # noqa: F401
from charityhub.core.config import settings
from charityhub.core.db import SessionLocal
from charityhub.routers import activity_logs as activity_logs_router
from charityhub.routers import admin_reports as admin_reports_router
from charityhub.routers import admin_users as admin_users_router
from charityhub.routers import auth as auth_router
from charityhub.routers import charities as charities_router
from charityhub.routers import donations as donations_router
from charityhub.routers import reports as reports_router
from charityhub.services.accounts import clear_expired_suspensions
from charityhub.services.evidence import EVIDENCE_URL_PREFIX

app = FastAPI(title="CharityHub API", version="0.1.0")

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone="UTC")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(reports_router.router)
app.include_router(admin_reports_router.router)
app.include_router(activity_logs_router.router)
app.include_router(admin_users_router.router)
app.include_router(donations_router.router)
app.include_router(charities_router.router)

settings.EVIDENCE_DIR.mkdir(parents=True, exist_ok=True)
app.mount(EVIDENCE_URL_PREFIX, StaticFiles(directory=settings.EVIDENCE_DIR), name="evidence")


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}


def _run_suspension_sweep() -> None:
    with SessionLocal() as session:
        cleared = clear_expired_suspensions(session)
        if cleared:
            logger.info("suspension_sweep", extra={"cleared": cleared})


@app.on_event("startup")
def start_scheduled_jobs() -> None:
    if not settings.ENABLE_SCHEDULER:
        return
    if not scheduler.running:
        scheduler.start()
    scheduler.add_job(
        _run_suspension_sweep,
        trigger="interval",
        minutes=settings.SUSPENSION_SWEEP_MINUTES,
        id="suspension_sweep",
        replace_existing=True,
    )


@app.on_event("shutdown")
def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
