"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Loan, rate, term or ratio input is non-positive, non-finite or out of range"""

    pass


class ArithmeticOverflowError(DomainException):
    """A repayment simulation exceeded its iteration bound or produced a non-finite value"""

    pass


class BorrowerNotFoundError(DomainException):
    """No borrower profile exists for the requested identifier"""

    pass


class CatalogUnavailableError(DomainException):
    """Lender catalog or borrower service returned an error or is unavailable"""

    pass
