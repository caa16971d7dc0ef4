# app/utils/exceptions.py
"""
Service-level error taxonomy.
Raised by services and the auth gate; rendered by the handlers in app/main.py
as {"success": false, "message": ...} with the matching status code.
"""

from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidState(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidOrExpired(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationFailed(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
