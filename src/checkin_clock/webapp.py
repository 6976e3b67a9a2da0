"""FastAPI application exposing the check-in clock to a local front-end."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .controller import Clock, StatusController
from .errors import PersistenceError, ValidationError
from .models import DayView, Event
from .store import SqliteEventStore

logger = logging.getLogger(__name__)


class TogglePayload(BaseModel):
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    settings: Optional[TrackerSettings] = None,
    controller: Optional[StatusController] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    The controller is initialized here so a corrupt log stops start-up instead
    of being served as an empty history.
    """
    resolved_settings = settings or TrackerSettings()
    if controller is None:
        db_path = resolved_settings.resolved_db_path()
        store = SqliteEventStore(db_path, resolved_settings.record_name)
        controller = StatusController(store, clock=clock)
        controller.initialize()

    app = FastAPI(title="Check-in Clock", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.controller = controller
    app.state.settings = resolved_settings

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Persistence failure: %s", exc)
        content: Dict[str, Any] = {"detail": str(exc)}
        if exc.event is not None:
            content["event"] = _event_payload(exc.event)
        return JSONResponse(status_code=503, content=content)

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        ctl: StatusController = request.app.state.controller
        current = ctl.status
        elapsed = ctl.current_elapsed()
        return {
            "online": current.is_online,
            "open_session": _event_payload(current.open_session)
            if current.open_session
            else None,
            "elapsed_seconds": elapsed.total_seconds() if elapsed is not None else None,
            "poll_seconds": resolved_settings.poll_interval.total_seconds(),
        }

    @app.post("/api/toggle")
    def toggle(request: Request, payload: Optional[TogglePayload] = None) -> Dict[str, Any]:
        ctl: StatusController = request.app.state.controller
        event = ctl.toggle(notes=payload.notes if payload else None)
        return {
            "event": _event_payload(event),
            "online": ctl.status.is_online,
        }

    @app.get("/api/day")
    def day(
        request: Request,
        date_value: Optional[str] = Query(
            default=None,
            alias="date",
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        ctl: StatusController = request.app.state.controller
        return _day_payload(ctl.query(_parse_date(date_value)))

    @app.get("/api/month")
    def month(
        request: Request,
        year: Optional[int] = Query(default=None),
        month_value: Optional[int] = Query(
            default=None, alias="month", description="Month number, 1-12."
        ),
    ) -> Dict[str, Any]:
        ctl: StatusController = request.app.state.controller
        target_year, target_month = _resolve_month(year, month_value)
        total = ctl.query_month(target_year, target_month)
        return {
            "year": target_year,
            "month": target_month,
            "total_seconds": total.total_seconds(),
        }

    @app.get("/api/active-days")
    def active_days(
        request: Request,
        year: Optional[int] = Query(default=None),
        month_value: Optional[int] = Query(
            default=None, alias="month", description="Month number, 1-12."
        ),
    ) -> Dict[str, Any]:
        ctl: StatusController = request.app.state.controller
        target_year, target_month = _resolve_month(year, month_value)
        return {
            "year": target_year,
            "month": target_month,
            "days": ctl.active_days(target_year, target_month),
        }

    return app


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc


def _resolve_month(year: Optional[int], month: Optional[int]) -> tuple[int, int]:
    today = date.today()
    return (
        year if year is not None else today.year,
        month if month is not None else today.month,
    )


def _event_payload(event: Event) -> Dict[str, Any]:
    return {
        "id": event.id,
        "kind": event.kind.value,
        "timestamp": event.timestamp.isoformat(),
        "notes": event.notes,
    }


def _seconds(value: Optional[timedelta]) -> Optional[float]:
    return value.total_seconds() if value is not None else None


def _day_payload(view: DayView) -> Dict[str, Any]:
    return {
        "date": view.date.isoformat(),
        "events": [_event_payload(event) for event in view.events],
        "sessions": [
            {
                "check_in": session.check_in.id,
                "check_out": session.check_out.id,
                "duration_seconds": session.duration.total_seconds(),
            }
            for session in view.sessions
        ],
        "total_seconds": _seconds(view.total),
        "open_session": view.open_session.id if view.open_session else None,
    }
