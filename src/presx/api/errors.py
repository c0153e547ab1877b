"""Translation of domain errors into HTTP errors for the routers."""

import logging

from fastapi import HTTPException, status

from ..domain.errors import DomainError

logger = logging.getLogger("presx")


def http_error(status_code: int, e: DomainError) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "error": e.error_code or "DOMAIN_ERROR",
            "message": e.message,
            "details": e.details,
        },
    )


def internal_error(where: str, e: Exception) -> HTTPException:
    """Log an unexpected exception and build the generic 500 response."""
    logger.error(f"Unhandled error in {where}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "details": {"exception": str(e) or repr(e), "type": e.__class__.__name__},
        },
    )


def validation_error(e: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"error": "VALIDATION_ERROR", "message": str(e), "details": {}},
    )
