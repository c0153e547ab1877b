"""Translation of database and object-store failures into user-facing messages."""

import logging

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
)
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ...domain.errors import DomainError

logger = logging.getLogger(__name__)

PERMISSION_DENIED = "You do not have permission to perform this action."
NOT_FOUND = "The requested document was not found."
ALREADY_EXISTS = "A document with this ID already exists."
QUOTA_EXCEEDED = "Quota exceeded. Please try again later."
UNAUTHENTICATED = "You must be logged in to perform this action."
UNAVAILABLE = "The service is temporarily unavailable. Please try again later."
UNEXPECTED = "An unexpected error occurred. Please try again."

# MongoDB server error codes
_MONGO_UNAUTHORIZED = 13
_MONGO_AUTH_FAILED = 18
_MONGO_QUOTA_CODES = {14031, 12501}  # out of disk space, quota exceeded


def describe_backend_error(error: BaseException) -> str:
    """Map a backend exception to a message safe to show to users."""
    logger.error("Backend error: %s", error, exc_info=error)

    if isinstance(error, DomainError):
        return error.message

    if isinstance(error, DuplicateKeyError):
        return ALREADY_EXISTS
    if isinstance(error, (ServerSelectionTimeoutError, ConnectionFailure)):
        return UNAVAILABLE
    if isinstance(error, OperationFailure):
        if error.code == _MONGO_UNAUTHORIZED:
            return PERMISSION_DENIED
        if error.code == _MONGO_AUTH_FAILED:
            return UNAUTHENTICATED
        if error.code in _MONGO_QUOTA_CODES:
            return QUOTA_EXCEEDED
        return UNEXPECTED

    if isinstance(error, ClientAuthenticationError):
        return UNAUTHENTICATED
    if isinstance(error, ResourceNotFoundError):
        return NOT_FOUND
    if isinstance(error, ResourceExistsError):
        return ALREADY_EXISTS
    if isinstance(error, ServiceRequestError):
        return UNAVAILABLE
    if isinstance(error, HttpResponseError):
        status = error.status_code
        if status == 403:
            return PERMISSION_DENIED
        if status == 401:
            return UNAUTHENTICATED
        if status == 404:
            return NOT_FOUND
        if status == 409:
            return ALREADY_EXISTS
        if status in (429, 507):
            return QUOTA_EXCEEDED
        if status in (500, 502, 503, 504):
            return UNAVAILABLE

    return UNEXPECTED
