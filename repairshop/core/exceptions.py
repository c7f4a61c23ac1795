"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    error_code = "server_error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_payload(self) -> dict[str, Any]:
        """Structured error body returned to clients."""
        return {"error": self.error_code, "detail": self.detail}


class ValidationError(AppException):
    """Validation error exception."""

    error_code = "validation_failed"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFoundError(AppException):
    """Resource not found exception."""

    error_code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None, detail: str | None = None) -> None:
        if detail is None:
            detail = f"{resource} not found"
            if identifier:
                detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthenticatedError(AppException):
    """Missing or invalid identity token."""

    error_code = "unauthenticated"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(AppException):
    """Authenticated but not allowed to touch the entity or operation."""

    error_code = "forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InvalidBookingStatus(AppException):
    """Invalid booking status for operation."""

    error_code = "invalid_status_transition"

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class VehicleInUseError(AppException):
    """Vehicle still referenced by bookings."""

    error_code = "vehicle_in_use"

    def __init__(self, bookings_count: int, detail: str = "Cannot delete car with existing bookings") -> None:
        self.bookings_count = bookings_count
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["bookingsCount"] = self.bookings_count
        return payload


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    error_code = "rate_limited"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers={"Retry-After": "60"},
        )


class DependencyError(AppException):
    """Storage or SMS collaborator failure."""

    error_code = "dependency_failed"

    def __init__(self, service: str, detail: str | None = None) -> None:
        self.service = service
        message = f"External service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
