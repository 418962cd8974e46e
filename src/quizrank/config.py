# src/quizrank/config.py

"""Runtime configuration read from environment variables."""

import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./quizrank.db")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Access token signing. Token issuance fails while this is unset.
AUTH_SECRET = os.getenv("AUTH_SECRET")
JWT_ISSUER = os.getenv("JWT_ISSUER", "curvaqz")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE")
JWT_ALGORITHM = "HS256"

# Cookies
SESSION_COOKIE = "cq_session"
ACCESS_TOKEN_COOKIE = "cq_access"
SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 30  # 30 days
ACCESS_TOKEN_MAX_AGE_SECONDS = 60 * 60  # 1 hour

# Quiz generation
QUIZ_MODE = os.getenv("QUIZ_MODE", "mock")
QUIZ_LENGTH = os.getenv("QUIZ_LENGTH", "10")

# Live quiz API, used when QUIZ_MODE is "live"
QUIZ_API_BASE = os.getenv("QUIZ_API_BASE")
QUIZ_API_AUTH = os.getenv("QUIZ_API_AUTH")
QUIZ_API_TIMEOUT = float(os.getenv("QUIZ_API_TIMEOUT", "10"))
# Pin live quizzes to one league instead of picking at random.
QUIZ_LEAGUE_ID = os.getenv("QUIZ_LEAGUE_ID")
QUIZ_LIVE_ATTEMPTS = 5

# Leaderboard windows
NICKNAME_MAX_LENGTH = 64
TOP_VIEW_SIZE = 10
ME_TOP_SIZE = 5
ME_AROUND_RADIUS = 2
ME_BOTTOM_SIZE = 5
