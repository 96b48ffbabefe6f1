"""habitline core library: habit store, journal notes, settings and analytics.

Public API re-exports for convenient imports:
    from habitcore import load_habits, completion_rate, streak_data, ...
"""

# Workspace & paths
from habitcore.workspace import (
    workspace_root,
    get_user_timezone,
    today_str,
    now_local,
    habits_path,
    notes_path,
    settings_path,
    reminders_path,
    config_path,
    hooks_config_path,
    images_dir,
    exports_dir,
)

# File I/O
from habitcore.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
)

# Habits (completion store)
from habitcore.habits import (
    validate_habit,
    normalize_habit,
    normalize_habits,
    load_habits,
    save_habits,
    find_habit,
    create_habit,
    update_habit,
    delete_habit,
    record_progress,
    toggle_date_completion,
    mark_habit_done,
)

# Notes
from habitcore.notes import (
    note_id,
    load_notes,
    save_notes,
    get_note,
    has_note,
    notes_by_habit,
    save_note,
    delete_note,
    clear_all_notes,
)

# Settings
from habitcore.settings import (
    DEFAULT_SETTINGS,
    load_settings,
    save_settings,
    update_settings,
    reset_settings,
)

# Analytics
from habitcore.analytics import (
    current_streak,
    best_streak,
    perfect_dates,
    streak_data,
    period_range,
    completion_rate,
    compare_periods,
    weekly_activity,
    total_stats,
    best_days_analysis,
    habit_performance,
    monthly_heatmap,
    daily_precision,
    generate_insights,
)
from habitcore.calendar_stats import (
    day_stats,
    dates_in_month,
    month_completion_stats,
    format_date_for_display,
)
from habitcore.mood import mood_trend

# Orchestration
from habitcore.lifecycle import (
    load_workspace_habits,
    add_habit,
    edit_habit,
    remove_habit,
    complete_habit_today,
    set_progress,
    toggle_day,
    write_note,
    remove_note,
    apply_notification_settings,
)
from habitcore.export import build_export, write_export, write_completions_csv

# Models
from habitcore.models import (
    Habit,
    HabitsFile,
    Note,
    NoteImage,
    Settings,
    Reminder,
    StreakData,
    PeriodComparison,
    DayActivity,
    DayStats,
    MoodPoint,
    TotalStats,
    BestDay,
    HabitPerformance,
    HeatmapCell,
    Insight,
)
