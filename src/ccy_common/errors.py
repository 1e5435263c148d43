"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Request validation
  2xxx: Currency
  9xxx: System (store / cache / internal)

Only the HTTP layer turns these into status codes; everything below it
raises and propagates.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str, code: int = 1001) -> None:
        super().__init__(code, detail, 400)


class InvalidCurrencyCodeError(ValidationError):
    def __init__(self, currency_code: str) -> None:
        super().__init__(f"Invalid currency code format: {currency_code!r}", 1002)


# --- 2xxx: Currency ---

class NotFoundError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(2001, message, 404)


class CurrencyNotFoundError(NotFoundError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Currency not found: {key}")


class ConflictError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(2002, message, 409)


class CurrencyCodeExistsError(ConflictError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Currency code already exists: {code}")


# --- 9xxx: System ---

class StoreError(AppError):
    """Persistent store failure (I/O, transport, timeout)."""

    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Store error: {detail}", 500)


class CacheError(AppError):
    """Cache store failure. Never reaches a client: callers degrade to the store."""

    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Cache error: {detail}", 500)
