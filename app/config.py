"""
BotLab v1.0 - Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ─── Paths ───────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# Real environment wins over .env
load_dotenv(BASE_DIR / ".env", override=False)

# ─── Database ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{BASE_DIR / 'botlab.db'}"
)
# Hosted Postgres often hands out "postgres://", which SQLAlchemy rejects
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# ─── JWT / Auth ──────────────────────────────────────────────────────────────
JWT_SECRET = os.getenv("JWT_SECRET", "botlab-dev-secret-change-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = int(os.getenv("JWT_EXPIRY_HOURS", "24"))
MAX_LOGIN_ATTEMPTS = 5
LOGIN_LOCKOUT_MINUTES = 15

# ─── Intent Matching ─────────────────────────────────────────────────────────
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.3"))
# Below this, a match among connected intents is retried against every intent
CONNECTED_MATCH_THRESHOLD = float(os.getenv("CONNECTED_MATCH_THRESHOLD", "0.5"))
PERSONALITY_PREFIX_RATE = 0.3
MAX_ENGINE_HISTORY = 50  # Exchanges kept in a bot's stored tester state

# ─── Builder Limits ──────────────────────────────────────────────────────────
BOT_NAME_MIN = 3
BOT_NAME_MAX = 50
TRAINING_PHRASE_MIN = 3
TRAINING_PHRASE_MAX = 200
RESPONSE_MAX = 1000
CHAT_MESSAGE_MAX = 2000
VOICE_SPEED_RANGE = (0.1, 3.0)
VOICE_PITCH_RANGE = (-20, 20)
VOICE_VOLUME_RANGE = (0.0, 1.0)

# ─── Flashcards (SM-2) ───────────────────────────────────────────────────────
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MASTERY_REPETITIONS = 10  # Repetitions needed for 100% mastery

# ─── Streaks ─────────────────────────────────────────────────────────────────
MIN_ACTIVITY_SECONDS = 120
MIN_LESSON_SCORE = 50
ACTIVITY_COOLDOWN_MINUTES = 60
FREEZE_DAYS_PER_MONTH = 3
STREAK_MILESTONE_DAYS = 7

# ─── Community ───────────────────────────────────────────────────────────────
XP_PER_LEVEL = 1000
ACTIVITY_XP = 10
CHAT_HISTORY_LIMIT = 50
LEADERBOARD_SIZE = 10

# ─── CORS ────────────────────────────────────────────────────────────────────
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ─── Feature Flags ───────────────────────────────────────────────────────────
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"
ENABLE_ASSISTANT_WEBHOOK = os.getenv("ENABLE_ASSISTANT_WEBHOOK", "true").lower() == "true"
