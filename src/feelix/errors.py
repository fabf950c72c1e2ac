from __future__ import annotations


class FeelixError(Exception):
    """Base class for errors raised by the companion."""


class InvalidInputError(FeelixError, ValueError):
    pass


class NotFoundError(FeelixError, LookupError):
    pass


class SessionClosedError(FeelixError, RuntimeError):
    pass


class BackendError(FeelixError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class AuthError(BackendError):
    pass
