class FinanceTrackerException(Exception):
    """Base exception for the shop finance tracker"""

    status_code = 500


class UnauthenticatedException(FinanceTrackerException):
    """Raised when the bearer credential is missing or malformed"""

    status_code = 401


class InvalidTokenException(UnauthenticatedException):
    """Raised when the identity provider rejects the bearer credential"""

    pass


class ForbiddenException(FinanceTrackerException):
    """Raised when the caller's role lacks the required capability"""

    status_code = 403


class InvalidInputException(FinanceTrackerException):
    """Raised for missing or malformed request fields"""

    status_code = 400


class InviteFailedException(FinanceTrackerException):
    """Raised when the identity provider rejects an invite/create call"""

    status_code = 400


class NotFoundException(FinanceTrackerException):
    """Raised when resource not found"""

    status_code = 404


class ProfileLookupException(FinanceTrackerException):
    """Raised when a profile read fails (transient, never retried here)"""

    status_code = 503


class ProfileSyncException(FinanceTrackerException):
    """
    Raised when a principal was invited but its profile upsert failed.

    Carries the invited user_id so the gap can be reconciled by hand.
    """

    status_code = 500

    def __init__(self, message: str, user_id: str):
        super().__init__(message)
        self.user_id = user_id


class ConfigurationException(FinanceTrackerException):
    """Raised when required platform configuration is absent"""

    status_code = 500
