"""Application constants"""

# Theme colors
PRIMARY_COLOR = "#6366f1"
SECONDARY_COLOR = "#8b5cf6"
SUCCESS_COLOR = "#10b981"
WARNING_COLOR = "#f59e0b"
ERROR_COLOR = "#ef4444"
DEFAULT_ENTRY_COLOR = "#3b82f6"

ENTRY_COLORS = [
    DEFAULT_ENTRY_COLOR,
    PRIMARY_COLOR,
    SECONDARY_COLOR,
    SUCCESS_COLOR,
    WARNING_COLOR,
    ERROR_COLOR,
]

# Weekdays, in the order the schedule evaluator resolves them (Sunday first)
WEEKDAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# Order used by the week view and the entry form
WEEK_VIEW_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Default Pomodoro settings
POMODORO_WORK_MINUTES = 25
POMODORO_SHORT_BREAK_MINUTES = 5
POMODORO_LONG_BREAK_MINUTES = 15
CUSTOM_DEFAULT_MINUTES = 45
CUSTOM_MIN_MINUTES = 1
CUSTOM_MAX_MINUTES = 180

# Polling periods (seconds)
TIMER_TICK_SECONDS = 1
SCHEDULE_REFRESH_SECONDS = 1
NOTIFICATION_POLL_SECONDS = 30

# Reminder lead window, in whole minutes before the class starts
NOTIFICATION_LEAD_MIN_MINUTES = 4
NOTIFICATION_LEAD_MAX_MINUTES = 5
NOTIFICATION_ICON = "🔔"

# Retry-write defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000

# Store collections
ENTRIES_COLLECTION = "entries"
TODOS_COLLECTION = "todos"
FOCUS_HISTORY_COLLECTION = "focus_history"

# Account reset
RESET_CONFIRM_PHRASE = "DELETE-MY-DATA"

# Preferences
THEMES = ["system", "light", "dark"]
DEFAULT_THEME = "system"
