"""
Talent Trust - Error taxonomy.

Every error the engine raises on purpose derives from TrustError.
The HTTP layer maps each class to a status code; see STATUS_CODES.
"""


class TrustError(Exception):
    """Base class for trust engine errors."""
    message = "Trust engine error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class AuthenticationError(TrustError):
    """No bearer credential, or one that does not resolve to a user."""
    message = "Invalid or expired token"


class Unauthorized(TrustError):
    """Caller is authenticated but is not an admin."""
    message = "Unauthorized. Admin access required."


class TalentNotFound(TrustError):
    message = "Talent not found"

    def __init__(self, talent_id: str):
        super().__init__(self.message)
        self.talent_id = talent_id


class UpstreamFailure(TrustError):
    """
    The data store failed on a path that must not degrade silently:
    a persisted-score read, a score write, or talent enumeration.
    """
    message = "Data store operation failed"

    def __init__(self, operation: str, cause: Exception = None):
        detail = f"{operation} failed"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.operation = operation
        self.cause = cause


STATUS_CODES = {
    AuthenticationError: 401,
    Unauthorized: 403,
    TalentNotFound: 404,
    UpstreamFailure: 500,
}


def status_code_for(exc: TrustError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500
