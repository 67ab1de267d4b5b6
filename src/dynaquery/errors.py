from __future__ import annotations


class DynaqueryError(Exception):
    pass


class ConfigurationError(DynaqueryError):
    pass


class ValidationError(DynaqueryError):
    pass


class NotFoundError(DynaqueryError):
    pass


class ThrottlingError(DynaqueryError):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class ThrottleRetryExceededError(DynaqueryError):
    def __init__(self, *, operation: str, attempts: int) -> None:
        super().__init__(f"{operation}: throttled, retry limit exceeded (attempts={attempts})")
        self.operation = operation
        self.attempts = attempts


class AwsError(DynaqueryError):
    def __init__(self, *, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
