"""Shared constants and defaults for trades and analytics."""

TRADE_TYPES = ["BUY", "SELL"]
TRADE_STATUSES = ["OPEN", "CLOSED", "CANCELLED", "PENDING"]
TRADE_RESULTS = ["WIN", "LOSS", "BREAKEVEN", "UNKNOWN"]

PERIODS = ["all-time", "daily", "weekly", "monthly", "yearly"]
DEFAULT_PERIOD = "all-time"

DEFAULT_CAPITAL = 10000.0
DEFAULT_EMOTIONAL_STATE = "neutral"
DEFAULT_RISK_FREE_RATE = 0.02

# Risk/reward reported when there are wins but no losses
RISK_REWARD_SENTINEL = 100.0

# A trade risking at most this % of capital counts as well managed
MAX_RISK_PER_TRADE_PCT = 2.0

# More trades per day than this starts to lower the time-management score
MAX_TRADES_PER_DAY = 5.0

# Placeholder label for empty breakdown lists
NO_DATA_LABEL = "No data"

HOURS_IN_DAY = 24
