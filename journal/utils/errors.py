"""Application error types with stable codes the API and clients share."""

ERROR_MESSAGES: dict[str, str] = {
    "trade/not-found": "The requested trade could not be found.",
    "trade/already-closed": "This trade has already been closed.",
    "trade/invalid-status": "Invalid trade status provided.",
    "trade/invalid-date-range": "Invalid date range for trade.",
    "validation/invalid-data": "The provided data is invalid.",
    "analytics/invalid-date-range": "Please select a valid date range.",
    "analytics/invalid-parameters": "Invalid parameters for analytics calculation.",
    "analytics/fetch-failed": "Could not load trades for analytics.",
    "analytics/calculation-error": "Error calculating analytics.",
}


class JournalError(Exception):
    """Base error carrying a code such as ``trade/not-found``."""

    status_code = 400

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "An error occurred.")
        super().__init__(self.message)


class TradeNotFoundError(JournalError):
    status_code = 404

    def __init__(self, trade_id: int):
        super().__init__("trade/not-found", f"Trade {trade_id} not found")


class TradeStateError(JournalError):
    status_code = 409


class AnalyticsQueryError(JournalError):
    status_code = 422


class TradeFetchError(JournalError):
    """The trade repository could not return the user's trades."""

    status_code = 503

    def __init__(self, user_id: str, cause: Exception | None = None):
        detail = f"Failed to fetch trades for user {user_id}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__("analytics/fetch-failed", detail)
        self.user_id = user_id


class TradeValidationError(JournalError):
    status_code = 422

    def __init__(self, errors: list):
        super().__init__("validation/invalid-data")
        self.errors = errors
