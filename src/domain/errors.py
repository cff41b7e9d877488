"""
Domain error taxonomy.

Services raise these; the API layer maps each class to an HTTP status via
``status_code`` and renders ``message`` as the response detail.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """A referenced trip, user, location or rating does not exist."""

    status_code = 404


class BusinessRuleError(DomainError):
    """A well-formed request violates a domain precondition."""

    status_code = 400


class ForbiddenError(DomainError):
    """The acting user is not the party allowed to perform the action."""

    status_code = 403


class InternalError(DomainError):
    """An invariant that must hold on valid input was broken."""

    status_code = 500
