"""CircleCI client exceptions."""


class CircleCIError(Exception):
    """Base exception for CircleCI client errors."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        name = type(self).__name__
        if self.status:
            return f"{name}({self.status}): {self.message}"
        return f"{name}: {self.message}"


class ConfigurationError(CircleCIError):
    """Raised when the client cannot be configured (bad base URL, missing token)."""


class TransportError(CircleCIError):
    """Raised when the request could not be sent or timed out."""


class APIError(CircleCIError):
    """Raised when the API answers with an unexpected status code."""


class KeyNotFoundError(APIError):
    """Raised when the API answers 404 for a key."""

    def __init__(self, key: str):
        super().__init__(f'the key "{key}" does not exist', 404)
        self.key = key


class DecodeError(CircleCIError):
    """Raised when a successful response body is not the expected JSON."""
