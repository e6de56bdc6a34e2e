"""Error taxonomy shared by the store, the recalculation workflows and the API.

Each error carries the HTTP status the API maps it to.
"""


class MatchingError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, details: str | None = None):
        super().__init__(details or self.message)
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(MatchingError):
    status_code = 400
    message = "Invalid request"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(details)
        self.message = message
        self.args = (message,)


class UnauthorizedError(MatchingError):
    status_code = 401
    message = "Unauthorized"


class NotFoundError(MatchingError):
    status_code = 404
    message = "Not found"

    def __init__(self, message: str, details: str | None = None):
        super().__init__(details)
        self.message = message
        self.args = (message,)


class PayloadTooLargeError(MatchingError):
    status_code = 413
    message = "Payload too large"

    def __init__(self, message: str):
        super().__init__()
        self.message = message
        self.args = (message,)


class ConfigurationError(MatchingError):
    """Server-side misconfiguration, never the caller's fault."""
    status_code = 500
    message = "Server configuration error"


class PersistenceError(MatchingError):
    status_code = 500
    message = "Database operation failed"


class AnalysisError(MatchingError):
    status_code = 500
    message = "Failed to analyze deck"
