from __future__ import annotations

import logging
import os
import secrets
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from habitcore import (
    workspace_root as _workspace_root,
    today_str as _today_str,
    now_local,
    load_workspace_habits,
    load_habits,
    find_habit,
    load_notes,
    get_note,
    notes_by_habit,
    load_settings,
    update_settings,
    reset_settings,
    add_habit,
    edit_habit,
    remove_habit,
    complete_habit_today,
    set_progress,
    toggle_day,
    write_note,
    remove_note,
    apply_notification_settings,
    streak_data,
    completion_rate,
    compare_periods,
    weekly_activity,
    total_stats,
    best_days_analysis,
    habit_performance,
    monthly_heatmap,
    daily_precision,
    generate_insights,
    day_stats,
    month_completion_stats,
    format_date_for_display,
    mood_trend,
    write_export,
    write_completions_csv,
)
from habitcore.dates import parse_date
from habitcore.hooks import run_hooks
from habitcore.models import PERIODS

logging.basicConfig(
    level=os.environ.get("HABITLINE_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


# ── App ───────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Migrate stored habits and restore their reminders before serving."""
    hf = load_workspace_habits(_workspace_root())
    logger.info("Loaded %d habits", len(hf.habits))
    yield


app = FastAPI(title="habitline", version="1.0.0", lifespan=lifespan)


# ── Auth ──────────────────────────────────────────────────────

security = HTTPBasic(auto_error=False)


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("HABITLINE_USERNAME", "")
    expected_password = os.environ.get("HABITLINE_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Request helpers ───────────────────────────────────────────

def _check_period(period: str) -> str:
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail=f"Invalid period: {period}")
    return period


def _check_date(day: str) -> str:
    if parse_date(day) is None:
        raise HTTPException(status_code=400, detail=f"Invalid date: {day}")
    return day


def _require_habit(habit_id: str) -> None:
    if find_habit(load_habits(_workspace_root()), habit_id) is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")


def _week_start_day() -> int:
    return load_settings(_workspace_root()).week_start_day


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(username: str = Depends(get_current_user)) -> HTMLResponse:
    root = _workspace_root()
    today = _today_str(root)
    habits = load_habits(root).habits
    settings = load_settings(root)
    streaks = streak_data(habits, today)
    rate = completion_rate(habits, "week", today, week_start_day=settings.week_start_day)

    rows = []
    for h in habits:
        mark = "&#10003;" if h.is_done_on(today) else "&middot;"
        rows.append(
            f"<tr><td>{_escape(h.icon)}</td><td>{_escape(h.name)}</td>"
            f"<td>{_escape(h.frequency)}</td><td>{h.completed_days}</td><td>{mark}</td></tr>"
        )
    table = "".join(rows) or '<tr><td colspan="5">(no habits yet)</td></tr>'
    greeting = _escape(settings.user_name) if settings.user_name else "there"

    html = f"""<!doctype html>
<html><head><meta charset="utf-8"><title>habitline</title></head>
<body>
<h1>Hi {greeting} {_escape(settings.user_avatar)}</h1>
<p>{_escape(format_date_for_display(today))}</p>
<p>Perfect-day streak: {streaks.current} (best {streaks.best}) &middot; This week: {rate}%</p>
<table>
<tr><th></th><th>Habit</th><th>Frequency</th><th>Days</th><th>Today</th></tr>
{table}
</table>
</body></html>"""
    return HTMLResponse(html)


# ── Habits ────────────────────────────────────────────────────

@app.get("/api/habits")
def api_list_habits(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return {
        "today": _today_str(root),
        "habits": [h.to_dict() for h in load_habits(root).habits],
    }


@app.post("/api/habits")
def api_create_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    habit, errors = add_habit(payload, _workspace_root())
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": habit.to_dict()}


@app.get("/api/habits/{habit_id}")
def api_get_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    habit = find_habit(load_habits(_workspace_root()), habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return habit.to_dict()


@app.put("/api/habits/{habit_id}")
def api_update_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require_habit(habit_id)
    updated, errors = edit_habit(habit_id, payload, _workspace_root())
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "habit": updated.to_dict() if updated else None}


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    removed = remove_habit(habit_id, _workspace_root())
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return {"ok": True, "habit_id": habit_id}


@app.post("/api/habits/{habit_id}/done")
def api_mark_done(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require_habit(habit_id)
    habit = complete_habit_today(habit_id, _workspace_root())
    return {"ok": True, "habit": habit.to_dict() if habit else None}


@app.post("/api/habits/{habit_id}/progress")
def api_record_progress(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require_habit(habit_id)
    day = _check_date(str(payload.get("date", "")))
    value = payload.get("value")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise HTTPException(status_code=400, detail="value must be a number")
    habit = set_progress(habit_id, day, value, _workspace_root())
    if habit is None:
        raise HTTPException(status_code=400, detail=f"Cannot record progress for future date {day}")
    return {"ok": True, "habit": habit.to_dict()}


@app.post("/api/habits/{habit_id}/toggle")
def api_toggle_date(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require_habit(habit_id)
    day = _check_date(str(payload.get("date", "")))
    habit = toggle_day(habit_id, day, _workspace_root())
    if habit is None:
        raise HTTPException(status_code=400, detail=f"Cannot mark future date {day}")
    return {"ok": True, "habit": habit.to_dict()}


# ── Notes ─────────────────────────────────────────────────────

@app.get("/api/notes")
def api_list_notes(habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    notes = load_notes(_workspace_root())
    if habit_id:
        items = notes_by_habit(notes, habit_id)
    else:
        items = sorted(notes.values(), key=lambda n: n.date, reverse=True)
    return {"count": len(items), "notes": [n.to_dict() for n in items]}


@app.get("/api/notes/{habit_id}/{day}")
def api_get_note(habit_id: str, day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    note = get_note(load_notes(_workspace_root()), habit_id, _check_date(day))
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note.to_dict()


@app.put("/api/notes/{habit_id}/{day}")
def api_save_note(habit_id: str, day: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    _require_habit(habit_id)
    note, errors = write_note(habit_id, _check_date(day), payload, _workspace_root())
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "note": note.to_dict() if note else None}


@app.delete("/api/notes/{habit_id}/{day}")
def api_delete_note(habit_id: str, day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    if not remove_note(habit_id, _check_date(day), _workspace_root()):
        raise HTTPException(status_code=404, detail="Note not found")
    return {"ok": True}


# ── Settings ──────────────────────────────────────────────────

@app.get("/api/settings")
def api_get_settings(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return load_settings(_workspace_root()).to_dict()


@app.patch("/api/settings")
def api_update_settings(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    settings, errors = update_settings(payload, root)
    if errors or settings is None:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    if {"globalNotificationsEnabled", "defaultNotificationTime"} & set(payload):
        apply_notification_settings(root)
    return {"ok": True, "settings": settings.to_dict()}


@app.post("/api/settings/reset")
def api_reset_settings(username: str = Depends(get_current_user)) -> dict[str, Any]:
    return {"ok": True, "settings": reset_settings(_workspace_root()).to_dict()}


# ── Analytics ─────────────────────────────────────────────────

@app.get("/api/analytics/summary")
def api_analytics_summary(period: str = "week", habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Everything the analytics screen shows for one period."""
    _check_period(period)
    root = _workspace_root()
    today = _today_str(root)
    habits = load_habits(root).habits
    wsd = _week_start_day()
    return {
        "today": today,
        "period": period,
        "streaks": streak_data(habits, today, habit_id).to_dict(),
        "comparison": compare_periods(habits, period, today, habit_id, week_start_day=wsd).to_dict(),
        "weekly": [d.to_dict() for d in weekly_activity(habits, today, habit_id, week_start_day=wsd)],
        "totals": total_stats(habits).to_dict(),
        "dailyPrecision": daily_precision(habits, period, today, week_start_day=wsd),
    }


@app.get("/api/analytics/streaks")
def api_analytics_streaks(habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return streak_data(load_habits(root).habits, _today_str(root), habit_id).to_dict()


@app.get("/api/analytics/completion")
def api_analytics_completion(period: str = "week", habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    _check_period(period)
    root = _workspace_root()
    rate = completion_rate(
        load_habits(root).habits, period, _today_str(root), habit_id, week_start_day=_week_start_day()
    )
    return {"period": period, "rate": rate}


@app.get("/api/analytics/comparison")
def api_analytics_comparison(period: str = "week", habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    _check_period(period)
    root = _workspace_root()
    return compare_periods(
        load_habits(root).habits, period, _today_str(root), habit_id, week_start_day=_week_start_day()
    ).to_dict()


@app.get("/api/analytics/weekly")
def api_analytics_weekly(habit_id: str | None = None, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    days = weekly_activity(load_habits(root).habits, _today_str(root), habit_id, week_start_day=_week_start_day())
    return {"days": [d.to_dict() for d in days]}


@app.get("/api/analytics/heatmap")
def api_analytics_heatmap(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return {"cells": [c.to_dict() for c in monthly_heatmap(load_habits(root).habits, _today_str(root))]}


@app.get("/api/analytics/performance")
def api_analytics_performance(period: str = "week", username: str = Depends(get_current_user)) -> dict[str, Any]:
    _check_period(period)
    root = _workspace_root()
    rows = habit_performance(load_habits(root).habits, period, _today_str(root), week_start_day=_week_start_day())
    return {"period": period, "habits": [r.to_dict() for r in rows]}


@app.get("/api/analytics/best-days")
def api_analytics_best_days(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return {"days": [d.to_dict() for d in best_days_analysis(load_habits(root).habits, _today_str(root))]}


@app.get("/api/analytics/insights")
def api_analytics_insights(username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    return {"insights": [i.to_dict() for i in generate_insights(load_habits(root).habits, _today_str(root))]}


@app.get("/api/analytics/mood")
def api_analytics_mood(period: str = "week", username: str = Depends(get_current_user)) -> dict[str, Any]:
    _check_period(period)
    root = _workspace_root()
    points = mood_trend(load_notes(root).values(), period, _today_str(root))
    return {"period": period, "points": [p.to_dict() for p in points]}


# ── Calendar ──────────────────────────────────────────────────

@app.get("/api/calendar/day/{day}")
def api_calendar_day(day: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    _check_date(day)
    stats = day_stats(load_habits(_workspace_root()).habits, day)
    return {"date": day, "label": format_date_for_display(day), **stats.to_dict()}


@app.get("/api/calendar/{year}/{month}")
def api_calendar_month(year: int, month: int, username: str = Depends(get_current_user)) -> dict[str, Any]:
    if month < 1 or month > 12:
        raise HTTPException(status_code=400, detail=f"Invalid month: {month}")
    stats = month_completion_stats(load_habits(_workspace_root()).habits, year, month)
    return {"year": year, "month": month, "days": {k: v.to_dict() for k, v in stats.items()}}


# ── Export ────────────────────────────────────────────────────

@app.post("/api/export")
def api_export(payload: dict[str, Any] = Body(default={}), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Write an export document (json, or csv of completions) into the workspace."""
    root = _workspace_root()
    fmt = str(payload.get("format", "json")).lower()
    now = now_local(root)
    if fmt == "json":
        path = write_export(root, now)
    elif fmt == "csv":
        path = write_completions_csv(root, now)
    else:
        raise HTTPException(status_code=400, detail=f"Invalid export format: {fmt}")
    run_hooks("post_export", {"path": str(path), "format": fmt}, root)
    return {"ok": True, "path": str(path), "format": fmt}
