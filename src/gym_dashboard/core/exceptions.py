class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist for the caller."""


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id=None):
        super().__init__("no member found" if member_id is None else f"no member found (id={member_id})")
        self.member_id = member_id


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id=None):
        super().__init__("no payment found" if payment_id is None else f"no payment found (id={payment_id})")
        self.payment_id = payment_id


class AlreadyCheckedInError(DomainError):
    def __init__(self, message: str = "already checked in today"):
        super().__init__(message)


class NoRemainingSessionsError(DomainError):
    def __init__(self, message: str = "no remaining sessions"):
        super().__init__(message)


class NoAttendanceTodayError(DomainError):
    def __init__(self, message: str = "no attendance recorded today for this member"):
        super().__init__(message)


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the login has expired."""


class StoreError(Exception):
    """Raised when the backing store rejects or fails a query."""


class DuplicateKeyError(StoreError):
    """Raised when an insert collides with a unique key."""
