"""Exceptions raised by the services. Routers map them to HTTP responses."""


class BookSwapError(Exception):
    """Base class; ``str(exc)`` is the user-facing message."""


# ---- validation ----

class ValidationError(BookSwapError):
    pass


class DuplicateParticipantError(BookSwapError):
    pass


class ParticipantNotFoundError(BookSwapError):
    pass


# ---- external dependencies ----

class CatalogError(BookSwapError):
    pass


class BookNotFoundError(CatalogError):
    pass


class AIServiceError(BookSwapError):
    pass


class MissingCredentialError(AIServiceError):
    pass


class InvalidAIResponseError(AIServiceError):
    pass


# ---- matching ----

class NotEnoughParticipantsError(BookSwapError):
    pass


class InvalidAssignmentError(BookSwapError):
    def __init__(self, message: str, violations: list | None = None):
        super().__init__(message)
        self.violations = violations or []


# ---- persistence ----

class RemoteStoreError(BookSwapError):
    """The sheet endpoint could not be reached or returned garbage."""
