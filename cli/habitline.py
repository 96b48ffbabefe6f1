#!/usr/bin/env python3
"""habitline TUI: interactive terminal habit tracker powered by Textual."""

from __future__ import annotations

import logging
import os
import sys

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Header, Input, Label, Static, TextArea

from habitcore import (
    workspace_root,
    today_str,
    load_workspace_habits,
    load_habits,
    load_notes,
    get_note,
    notes_by_habit,
    load_settings,
    complete_habit_today,
    write_note,
    streak_data,
    compare_periods,
    weekly_activity,
    total_stats,
    habit_performance,
    generate_insights,
    day_stats,
    mood_trend,
    format_date_for_display,
)
from habitcore.analytics import current_streak
from habitcore.models import MOOD_EMOJIS, MOOD_VALUES, PERIODS

logger = logging.getLogger(__name__)

TREND_ARROWS = {"up": "↑", "down": "↓", "same": "→"}


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#habits-table {
    height: 1fr;
}

#day-summary {
    height: auto;
    padding: 0 1;
    color: $text-muted;
}

#note-area {
    height: 8;
    min-height: 4;
}

#mood-input {
    height: 3;
}

.overlay-screen {
    padding: 1 2;
}

#analytics-info {
    height: auto;
    padding: 1 2;
    margin: 0 0 1 0;
    border: tall $primary-background-darken-2;
}

#performance-table, #notes-table {
    height: 1fr;
}
"""


# ── Overlay views ──────────────────────────────────────────────


class AnalyticsScreen(Vertical):
    """Analytics for one period: streaks, comparison, weekly bars, per-habit table."""

    def __init__(self, period: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.period = period

    def compose(self) -> ComposeResult:
        yield Label(f"Analytics ({self.period})", classes="section-title")
        yield Static(id="analytics-info")
        yield DataTable(id="performance-table")

    def on_mount(self) -> None:
        root = workspace_root()
        today = today_str(root)
        habits = load_habits(root).habits
        wsd = load_settings(root).week_start_day

        streaks = streak_data(habits, today)
        comparison = compare_periods(habits, self.period, today, week_start_day=wsd)
        totals = total_stats(habits)
        bars = "  ".join(
            f"{'*' if d.is_today else ''}{d.day} {d.value}%"
            for d in weekly_activity(habits, today, week_start_day=wsd)
        )

        lines = [
            f"Streak: {streaks.current} days (best {streaks.best})",
            f"Completion: {comparison.current}% vs {comparison.previous}% "
            f"{TREND_ARROWS[comparison.trend]}",
            f"Habits: {totals.total_habits}  Completions: {totals.total_completions}  "
            f"Perfect days: {totals.perfect_days}",
            f"This week: {bars}",
        ]
        moods = [p.value for p in mood_trend(load_notes(root).values(), self.period, today) if p.value]
        if moods:
            lines.append(f"Mood entries: {len(moods)}")
        for insight in generate_insights(habits, today):
            lines.append(f"{insight.icon} {insight.title}: {insight.description}")
        self.query_one("#analytics-info", Static).update("\n".join(lines))

        table: DataTable = self.query_one("#performance-table", DataTable)
        table.add_columns("Habit", "Rate", "Done", "Possible", "Status")
        for row in habit_performance(habits, self.period, today, week_start_day=wsd):
            table.add_row(
                f"{row.habit.icon} {row.habit.name}",
                f"{row.completion_rate}%",
                str(row.completed_count),
                str(row.possible_count),
                row.status.upper(),
            )


class NotesScreen(Vertical):
    """Journal history for one habit."""

    def __init__(self, habit_id: str | None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.habit_id = habit_id

    def compose(self) -> ComposeResult:
        yield Label("Notes", classes="section-title")
        yield DataTable(id="notes-table")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#notes-table", DataTable)
        table.add_columns("Date", "Mood", "Note", "Images")
        if not self.habit_id:
            return
        for note in notes_by_habit(load_notes(workspace_root()), self.habit_id):
            mood = MOOD_EMOJIS.get(note.mood or "", "")
            first_line = note.content.strip().splitlines()[0] if note.content.strip() else ""
            table.add_row(note.date, mood, first_line[:60], str(len(note.images)))


# ── Main app ───────────────────────────────────────────────────


class HabitlineApp(App):
    """habitline: daily habit check-ins with notes and analytics."""

    TITLE = "habitline"
    CSS = CSS
    AUTO_FOCUS = "#habits-table"

    BINDINGS = [
        Binding("h", "show_habits", "Habits"),
        Binding("a", "show_analytics", "Analytics"),
        Binding("n", "show_notes", "Notes"),
        Binding("p", "cycle_period", "Period"),
        Binding("space", "mark_done", "Done"),
        Binding("ctrl+s", "save_note", "Save Note"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    current_view: reactive[str] = reactive("habits")
    period: reactive[str] = reactive("week")

    def __init__(self) -> None:
        super().__init__()
        self._habit_ids: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("Today", classes="section-title"),
                DataTable(id="habits-table", cursor_type="row"),
                Static(id="day-summary"),
                id="left-pane",
            ),
            VerticalScroll(
                Label("Note", classes="section-title"),
                Input(placeholder="mood: " + ", ".join(MOOD_VALUES), id="mood-input"),
                TextArea(id="note-area"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Footer()

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#habits-table", DataTable)
        table.add_columns("", "Habit", "Today", "Streak", "Progress")
        load_workspace_habits(workspace_root())
        self._load_data()

    def _selected_habit_id(self) -> str | None:
        table = self.query_one("#habits-table", DataTable)
        if not self._habit_ids or table.cursor_row is None:
            return None
        if 0 <= table.cursor_row < len(self._habit_ids):
            return self._habit_ids[table.cursor_row]
        return None

    def _load_data(self) -> None:
        """Refresh the habit table, day summary and header."""
        root = workspace_root()
        today = today_str(root)
        habits = load_habits(root).habits

        table = self.query_one("#habits-table", DataTable)
        cursor = table.cursor_row
        table.clear()
        self._habit_ids = [h.id for h in habits]
        for h in habits:
            value = h.completed_dates.get(today, 0)
            if h.metric_type == "boolean":
                mark = "✓" if value else "·"
            else:
                mark = f"{value:g}/{h.goal:g} {h.unit}"
            table.add_row(
                h.icon,
                h.name,
                mark,
                str(current_streak(h.completed_dates, today)),
                f"{h.percent_complete}%",
            )
        if habits and cursor is not None:
            table.move_cursor(row=min(cursor, len(habits) - 1))

        stats = day_stats(habits, today)
        self.query_one("#day-summary", Static).update(
            f"{format_date_for_display(today)}: {stats.completed}/{stats.total} done ({stats.percentage}%)"
        )

        streaks = streak_data(habits, today)
        self.sub_title = f"\U0001F525 {streaks.current}  [{self.period.upper()}]"
        self._load_note()

    def _load_note(self) -> None:
        habit_id = self._selected_habit_id()
        root = workspace_root()
        note = get_note(load_notes(root), habit_id, today_str(root)) if habit_id else None
        self.query_one("#note-area", TextArea).load_text(note.content if note else "")
        self.query_one("#mood-input", Input).value = (note.mood or "") if note else ""

    @on(DataTable.RowHighlighted, "#habits-table")
    def _on_habit_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._load_note()

    # ── Actions ────────────────────────────────────────────────

    def action_mark_done(self) -> None:
        if self.current_view != "habits":
            return
        habit_id = self._selected_habit_id()
        if habit_id is None:
            return
        habit = complete_habit_today(habit_id, workspace_root())
        if habit is None:
            self.notify("Habit not found", severity="warning")
        self._load_data()

    def action_save_note(self) -> None:
        habit_id = self._selected_habit_id()
        if habit_id is None:
            return
        mood = self.query_one("#mood-input", Input).value.strip().lower() or None
        content = self.query_one("#note-area", TextArea).text
        self._do_save_note(habit_id, {"content": content, "mood": mood})

    @work(thread=True)
    def _do_save_note(self, habit_id: str, form: dict) -> None:
        root = workspace_root()
        existing = get_note(load_notes(root), habit_id, today_str(root))
        if existing is not None:
            form["images"] = [i.to_dict() for i in existing.images]
            form["tags"] = existing.tags
        note, errors = write_note(habit_id, today_str(root), form, root)
        if errors:
            logger.warning("Note for %s not saved: %s", habit_id, errors)
            self.call_from_thread(self.notify, "; ".join(errors), title="Note not saved", severity="warning")
        else:
            self.call_from_thread(self.notify, "Note saved", severity="information")

    def action_cycle_period(self) -> None:
        idx = PERIODS.index(self.period)
        self.period = PERIODS[(idx + 1) % len(PERIODS)]
        self.sub_title = self.sub_title.rsplit("[", 1)[0] + f"[{self.period.upper()}]"
        if self.current_view == "analytics":
            self._switch_to("analytics")

    def action_blur_focus(self) -> None:
        if self.current_view != "habits":
            self._switch_to("habits")
        else:
            self.set_focus(None)

    def action_quit_app(self) -> None:
        self.exit()

    # ── View switching via overlay ─────────────────────────────

    def action_show_habits(self) -> None:
        self._switch_to("habits")

    def action_show_analytics(self) -> None:
        if self.current_view == "analytics":
            self._switch_to("habits")
            return
        self._switch_to("analytics")

    def action_show_notes(self) -> None:
        if self.current_view == "notes":
            self._switch_to("habits")
            return
        self._switch_to("notes")

    def _switch_to(self, view: str) -> None:
        main = self.query_one("#main-layout", Horizontal)
        for old in self.query(".overlay-screen"):
            old.remove()

        panes_visible = view == "habits"
        self.query_one("#left-pane").display = panes_visible
        self.query_one("#right-pane").display = panes_visible

        if view == "analytics":
            main.mount(AnalyticsScreen(self.period, classes="overlay-screen"))
        elif view == "notes":
            main.mount(NotesScreen(self._selected_habit_id(), classes="overlay-screen"))
        else:
            self._load_data()

        self.current_view = view


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("HABITLINE_LOG_LEVEL", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set HABITS_ROOT or create the directory first.")
        sys.exit(1)

    app = HabitlineApp()
    app.run()


if __name__ == "__main__":
    main()
