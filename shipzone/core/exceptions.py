"""
Shipzone Exception Hierarchy

All exceptions include code, message, and details so callers can map them to
user-facing messages and log them consistently.

Exception Hierarchy:
    ShipzoneError
    ├── InvalidPincodeFormat
    ├── NoServiceableZone
    ├── MethodNotFound
    │   └── MethodInactive
    └── RepositoryUnavailable
"""
from typing import Optional, Dict, Any


class ShipzoneError(Exception):
    """
    Base exception for all shipping resolution errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "SHIPZONE_ERROR"
    default_severity: str = "P2"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidPincodeFormat(ShipzoneError):
    """Destination postal code is malformed; rejected before any resolution."""

    default_code = "INVALID_PINCODE"
    default_severity = "P3"
    http_status = 400

    def __init__(self, pincode: Any, **kwargs):
        super().__init__(
            message=f"Invalid pincode format: {pincode!r}",
            details={"pincode": pincode},
            **kwargs,
        )
        self.pincode = pincode


class NoServiceableZone(ShipzoneError):
    """No active zone covers the destination. A business outcome, not a fault."""

    default_code = "NO_SERVICEABLE_ZONE"
    default_severity = "P3"
    http_status = 422

    def __init__(self, pincode: str, **kwargs):
        super().__init__(
            message="Shipping not available for this location",
            details={"pincode": pincode},
            **kwargs,
        )
        self.pincode = pincode


class MethodNotFound(ShipzoneError):
    """Requested shipping method does not exist."""

    default_code = "METHOD_NOT_FOUND"
    default_severity = "P3"
    http_status = 404

    def __init__(self, method_ref: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message or f"Shipping method '{method_ref}' not found",
            details={"method": method_ref},
            **kwargs,
        )
        self.method_ref = method_ref


class MethodInactive(MethodNotFound):
    """Requested shipping method exists but is disabled."""

    default_code = "METHOD_INACTIVE"

    def __init__(self, method_ref: str, **kwargs):
        super().__init__(
            method_ref,
            message=f"Shipping method '{method_ref}' is not currently available",
            **kwargs,
        )


class RepositoryUnavailable(ShipzoneError):
    """A data collaborator failed or timed out. The caller owns retry policy."""

    default_code = "REPOSITORY_UNAVAILABLE"
    default_severity = "P1"
    http_status = 503

    def __init__(self, operation: str, reason: str, timeout: Optional[float] = None, **kwargs):
        details = {"operation": operation, "reason": reason}
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(
            message=f"Shipping data unavailable during {operation}: {reason}",
            details=details,
            **kwargs,
        )
        self.operation = operation
