"""Centralized constants for the flashdeck scheduling core.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Ease factor ----------
MIN_EASE = 1.3
MAX_EASE = 3.0
DEFAULT_EASE = 2.5
EASE_BONUS = 0.15  # Easy
EASE_PENALTY = 0.2  # Hard and Again

# ---------- Intervals (days) ----------
DEFAULT_INTERVAL = 1.0
MINUTES_PER_DAY = 1440

# First success (or first after a lapse). Again is the lapse step.
INITIAL_INTERVALS = {
    "again": 1 / 1440,  # 1 minute
    "hard": 1 / 240,  # 6 minutes
    "good": 1 / 144,  # 10 minutes
    "easy": 4.0,
}

# Second consecutive success.
SECOND_STEP_INTERVALS = {
    "hard": 0.25,
    "good": 1.0,
    "easy": 4.0,
}

# Mature phase: interval * ease * multiplier.
DIFFICULTY_MULTIPLIERS = {
    "again": 0.0,
    "hard": 0.8,
    "good": 1.0,
    "easy": 1.3,
}
HARD_FLOOR_RATIO = 0.8

# ---------- Card classes ----------
LEARNING_REPETITIONS = 3
MATURE_INTERVAL_DAYS = 21

# ---------- Session planning ----------
DEFAULT_AVAILABLE_MINUTES = 20
DEFAULT_SECONDS_PER_CARD = 30
OVERDUE_SHARE = 0.5
NEW_SHARE = 0.3
DEFAULT_CARDS_PER_SESSION = 20

# ---------- Forecast ----------
DEFAULT_FORECAST_DAYS = 7

# ---------- History ----------
HISTORY_KEEP_DAYS = 30

# ---------- Storage ----------
STORAGE_VERSION = "1.0"
DEMO_CARD_SET_ID = "demo"
