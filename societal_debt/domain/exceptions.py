"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCreditAmountError(DomainException):
    """Credit amount is zero, negative or not a finite number"""

    pass


class NoImpactDataError(DomainException):
    """No scored transactions exist yet for the requested user"""

    pass


class CreditConflictError(DomainException):
    """Concurrent credit applications kept colliding on the running total"""

    pass


class ClassifierAPIError(DomainException):
    """Classification gateway returned an error or is unavailable"""

    pass


class TransactionFeedError(DomainException):
    """Transaction feed returned an error or is unavailable"""

    pass
