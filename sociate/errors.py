"""Error taxonomy shared by services and the HTTP layer."""


class SociateError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SociateError):
    """Missing or invalid required input."""

    status_code = 400


class ForbiddenError(SociateError):
    """Caller is not allowed to act on the referenced resource."""

    status_code = 403


class NotFoundError(SociateError):
    """Referenced user, post, conversation or notification does not exist."""

    status_code = 404


class ConflictError(SociateError):
    """Write would break a uniqueness rule (e.g. a taken username)."""

    status_code = 409
