"""Application configuration driven by environment variables.

All settings have sensible defaults for local development.  Engine modules
never read this file; ``main.py`` passes the values into constructors.
"""

import os

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# Recommendation engine
# ---------------------------------------------------------------------------

MAX_RECOMMENDATIONS: int = int(os.getenv("MAX_RECOMMENDATIONS", "20"))

# Mood-filtered and learned-weight results scoring below this are dropped
MIN_SCORE_THRESHOLD: float = float(os.getenv("MIN_SCORE_THRESHOLD", "30"))

# Cosine similarity floor for the context-free vector strategy
VECTOR_MIN_SIMILARITY: float = float(os.getenv("VECTOR_MIN_SIMILARITY", "0.3"))

# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

DEFAULT_FORECAST_TIMEFRAME: str = os.getenv("DEFAULT_FORECAST_TIMEFRAME", "next_week")

# Sessions this many days older than the newest one count half as much
PLAYSTYLE_RECENCY_HALF_LIFE_DAYS: float = float(
    os.getenv("PLAYSTYLE_RECENCY_HALF_LIFE_DAYS", "30")
)
