"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainException):
    """Transaction or vehicle does not exist"""

    code = "NOT_FOUND"


class ForbiddenError(DomainException):
    """Caller is not a party allowed to perform the operation"""

    code = "FORBIDDEN"


class InvalidStateError(DomainException):
    """Transition attempted from a status that does not allow it"""

    code = "INVALID_STATE"


class ValidationFailedError(DomainException):
    """Request data breaks a business rule (payment details, self-dealing, availability)"""

    code = "VALIDATION_ERROR"


class PersistenceError(DomainException):
    """Store unreachable or atomic commit aborted"""

    code = "PERSISTENCE_ERROR"
