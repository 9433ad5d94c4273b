# app/errors.py

class BankingError(ValueError):
    """Base for errors shown to the user; routers map status_code onto the HTTP response."""
    status_code = 400


class ValidationError(BankingError):
    pass


class InsufficientBalanceError(BankingError):
    pass


class NotFoundError(BankingError):
    status_code = 404


class AuthenticationError(BankingError):
    status_code = 401


class PermissionDeniedError(BankingError):
    status_code = 403


class BackendError(BankingError):
    """A storage write did not go through."""
    status_code = 502


class DebitFailedError(BackendError):
    pass


class CreditFailedError(BackendError):
    def __init__(self, message: str, compensated: bool):
        super().__init__(message)
        self.compensated = compensated
