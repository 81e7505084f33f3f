"""
Error taxonomy shared by all services.

Each failure is an HTTPException so it propagates through FastAPI unchanged;
services raise these directly and let anything else bubble to the global handler.
"""

from fastapi import HTTPException, status


class ValidationFailure(HTTPException):
    """Bad input: blank required field, conflicting scopes, malformed cursor."""

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundFailure(HTTPException):
    """A referenced profile, church or note does not exist."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class PermissionFailure(HTTPException):
    def __init__(self, detail: str = "Not allowed"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class RemoteFailure(HTTPException):
    """The data store rejected the call or did not answer."""

    def __init__(self, detail: str = "Data store request failed"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
