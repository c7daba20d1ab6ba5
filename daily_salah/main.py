from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from daily_salah.config import PRAYER_NAMES
from daily_salah.errors import UnknownPrayer
from daily_salah.jobs.ticker import start_background
from daily_salah.session import SessionManager

APP_DIR = Path(__file__).resolve().parent

app = FastAPI(title="My Daily Salah")
templates = Jinja2Templates(directory=APP_DIR / "templates")

sessions = SessionManager()
_ticker = {}


@app.on_event("startup")
def startup() -> None:
    sessions.load_timings()
    if sessions.settings.run_ticker:
        _ticker["thread"], _ticker["stop"] = start_background(sessions)


@app.on_event("shutdown")
def shutdown() -> None:
    stop = _ticker.pop("stop", None)
    if stop is not None:
        stop.set()
        _ticker.pop("thread").join(timeout=2)


@app.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "today.html", sessions.current.status())


@app.get("/api/status", response_class=JSONResponse)
def status() -> JSONResponse:
    data = sessions.current.status()
    return JSONResponse(data, status_code=200 if data["available"] else 503)


@app.post("/prayers/{name}/complete")
def complete_prayer(name: str) -> RedirectResponse:
    if name in PRAYER_NAMES:
        sessions.current.complete(name)
    return RedirectResponse(url="/", status_code=303)


@app.post("/api/prayers/{name}/complete", response_class=JSONResponse)
def api_complete_prayer(name: str) -> JSONResponse:
    session = sessions.current
    try:
        awarded = session.complete(name)
    except UnknownPrayer:
        return JSONResponse({"error": f"Unknown prayer: {name}"}, status_code=404)
    tracker = session.tracker
    return JSONResponse(
        {
            "name": name,
            "awarded": tracker.points_per_prayer if awarded else 0,
            "points": tracker.points,
            "completed": True,
            "rewards": tracker.unlocked_rewards(),
        }
    )


@app.post("/location")
def set_location(latitude: float = Form(...), longitude: float = Form(...)) -> RedirectResponse:
    sessions.load_timings(latitude, longitude)
    return RedirectResponse(url="/", status_code=303)
