"""API error handling and response helpers."""

from typing import Any, Dict

from fastapi import status

from rentbill.services.errors import BillReadError, BillStoreError, RenterNotFoundError


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class RenterNotFound(AppError):
    """Renter referenced by the request does not exist."""

    def __init__(self, message: str = "Renter not found"):
        super().__init__(message, "renter_not_found", status.HTTP_404_NOT_FOUND)


class BillReadFailed(AppError):
    """Bill or renter data could not be read."""

    def __init__(self, message: str = "Failed to fetch bill details"):
        super().__init__(message, "read_failed", status.HTTP_500_INTERNAL_SERVER_ERROR)


class BillWriteFailed(AppError):
    """Bill or renter data could not be saved; nothing was persisted."""

    def __init__(self, message: str = "Failed to save bill"):
        super().__init__(message, "write_failed", status.HTTP_500_INTERNAL_SERVER_ERROR)


def from_store_error(error: BillStoreError) -> AppError:
    """Map a store exception onto the API error it is reported as."""
    if isinstance(error, RenterNotFoundError):
        return RenterNotFound(str(error))
    if isinstance(error, BillReadError):
        return BillReadFailed(str(error))
    return BillWriteFailed(str(error))


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }
