"""Unified error codes and custom exceptions.

Every expected outcome is an AppError subclass grouped under one of five
categories; routers never catch them, the app-level handler renders them.

Error code ranges:
  1xxx: Identity
  2xxx: Account / Ledger
  3xxx: Match
  4xxx: Wager
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


# --- Categories ---

class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidStateError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class ValidationError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


# --- 1xxx: Identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Admin role required", 403)


# --- 2xxx: Account / Ledger ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required} chips, available {available} chips",
            422,
        )
        self.required = required
        self.available = available


class AccountNotFoundError(NotFoundError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2002, f"Account not found: {account_id}")


class InvalidAmountError(ValidationError):
    def __init__(self, amount: object) -> None:
        super().__init__(2003, f"Invalid ledger amount: {amount!r}")


# --- 3xxx: Match ---

class MatchNotFoundError(NotFoundError):
    def __init__(self, match_id: str) -> None:
        super().__init__(3001, f"Match not found: {match_id}")


class WageringClosedError(InvalidStateError):
    def __init__(self, match_id: str) -> None:
        super().__init__(3002, f"Wagering is closed for match {match_id}")


class InvalidMatchStateError(InvalidStateError):
    def __init__(self, match_id: str, status: str, expected: str) -> None:
        super().__init__(
            3003, f"Match {match_id} is {status}, expected {expected}"
        )


class InvalidStatusTransitionError(InvalidStateError):
    def __init__(self, match_id: str, current: str, target: str) -> None:
        super().__init__(
            3004, f"Match {match_id} cannot move from {current} to {target}"
        )


class CompetitorNotFoundError(NotFoundError):
    def __init__(self, competitor_id: str) -> None:
        super().__init__(3005, f"Competitor not found: {competitor_id}")


class UnknownMatchStatusError(ValidationError):
    def __init__(self, status: str) -> None:
        super().__init__(3007, f"Unknown match status: {status}")


class InvalidWinnerError(ValidationError):
    def __init__(self, match_id: str, winner_id: str) -> None:
        super().__init__(
            3006, f"Winner {winner_id} is not a competitor in match {match_id}"
        )


# --- 4xxx: Wager ---

class WagerNotFoundError(NotFoundError):
    def __init__(self, wager_id: str) -> None:
        super().__init__(4001, f"Wager not found: {wager_id}")


class WagerNotPendingError(InvalidStateError):
    def __init__(self, wager_id: str, status: str) -> None:
        super().__init__(4002, f"Wager {wager_id} is {status}, not PENDING")


class UnsupportedMarketError(ValidationError):
    def __init__(self, market_type: str) -> None:
        super().__init__(4003, f"Unsupported market type: {market_type}")


class InvalidSideError(ValidationError):
    def __init__(self, side: str) -> None:
        super().__init__(4004, f"Invalid side for a two-way market: {side}")


class InvalidStakeError(ValidationError):
    def __init__(self, stake: object) -> None:
        super().__init__(4005, f"Stake must be a positive integer, got {stake!r}")


class ExposureLimitError(ValidationError):
    def __init__(self, match_id: str, side: str, limit: int) -> None:
        super().__init__(
            4006, f"Liability cap of {limit} chips reached on side {side} of match {match_id}"
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
