"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet/Transaction
  3xxx: Market
  4xxx: Binary order
  9xxx: System / upstream exchange
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


class InvalidInputError(AppError):
    """400 — request is well-formed JSON but violates a business rule."""

    def __init__(self, message: str, code: int = 4001) -> None:
        super().__init__(code, message, 400)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class OperatorRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Operator account required", 403)


# --- 2xxx: Wallet/Transaction ---

class InsufficientBalanceError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__("Insufficient balance", code=2001)


class WalletNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(2002, "Wallet not found")


class TransactionNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(2003, f"Transaction not found for order {order_id}")


# --- 3xxx: Market ---

class MarketNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(3001, "Market data not found")


# --- 4xxx: Binary order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}")


class CancellationWindowError(InvalidInputError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code=4006)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ServiceUnavailableError(AppError):
    """503 — retryable; must reach the client unmodified."""

    def __init__(self, detail: str = "Service temporarily unavailable") -> None:
        super().__init__(9003, detail, 503)


class ExternalServiceError(AppError):
    """500 — the exchange answered but gave nothing usable, or raised."""

    def __init__(self, detail: str) -> None:
        super().__init__(9004, detail, 500)
