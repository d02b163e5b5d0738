"""Unified error codes and custom exceptions.

Error code ranges:
  3xxx: Market
  4xxx: Input validation
  5xxx: Position
  6xxx: Lifecycle / settlement
  9xxx: System
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


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketAlreadyExistsError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market already initialized: {market_id}", 409)


# --- 4xxx: Input validation ---

class InvalidAmountError(AppError):
    def __init__(self, field: str, value: int) -> None:
        super().__init__(4001, f"Invalid {field}: {value}", 400)


# --- 5xxx: Position ---

class InsufficientPositionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Insufficient position: {detail}", 422)


# --- 6xxx: Lifecycle / settlement ---

class StateError(AppError):
    """Operation attempted outside its required lifecycle phase."""

    def __init__(self, market_id: str, detail: str) -> None:
        self.market_id = market_id
        super().__init__(6001, f"Market {market_id}: {detail}", 422)


class SwapDisabledError(StateError):
    def __init__(self, market_id: str) -> None:
        super().__init__(market_id, "outcome conversion is disabled")


class ZeroAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6002, f"Zero output amount: {detail}", 422)


class NoSupplyError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(6003, f"No winning supply to claim against: {market_id}", 422)


class ExternalTransferError(AppError):
    """A token collaborator rejected a mint/burn/transfer."""

    def __init__(self, token: str, operation: str, detail: str) -> None:
        self.token = token
        self.operation = operation
        super().__init__(6004, f"{token} {operation} rejected: {detail}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
