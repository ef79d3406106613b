import logging

from fastapi import FastAPI

from app.api.v1.auth import router as auth_router
from app.api.v1.meeting_bookings import router as bookings_router
from app.api.v1.meeting_events import router as events_router
from app.api.v1.settings import router as settings_router
from app.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "event_id", "status", "subject", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="School Meeting Scheduler", version="1.0.0")

app.include_router(events_router, tags=["meeting-events"])
app.include_router(bookings_router, tags=["meeting-bookings"])
app.include_router(auth_router, tags=["auth"])
app.include_router(settings_router, tags=["settings"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
