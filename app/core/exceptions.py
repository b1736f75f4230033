# app/core/exceptions.py

from fastapi import status


class IdentityError(Exception):
    """Base class for every failure raised by the identity core.

    Each subclass carries a user-facing ``message`` and the HTTP status the
    API layer answers with when the error reaches the edge.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Identity operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ------------------------------------------------------------
# Authentication outcomes
# ------------------------------------------------------------
class AuthError(IdentityError):
    pass


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class AccountDisabled(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "This account has been disabled"


class PendingApproval(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Your account is awaiting approval"


# ------------------------------------------------------------
# Profile management
# ------------------------------------------------------------
class EmailAlreadyRegistered(IdentityError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already registered"


class ProfileNotFound(IdentityError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Profile not found"


class StoreError(IdentityError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Profile store operation failed"


# ------------------------------------------------------------
# HR federation (all of these allow a local-only fallback)
# ------------------------------------------------------------
class FederationError(IdentityError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "HR service rejected the request"


class FederationUnauthorized(FederationError):
    default_message = "HR service rejected the credentials"


class FederationNotFound(FederationError):
    default_message = "HR service has no such employee"


class ExternalServiceUnavailable(FederationError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "HR service is unavailable"
