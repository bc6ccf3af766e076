"""
Error Definitions

Defines the adaptor's exception classes. Every error carries the normalized
error record (message, type, code) and the HTTP status code the gateway
should answer with.
"""

from typing import Any, Optional, Union


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: Union[str, int] = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to include the details block

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class AuthError(AppError):
    """
    Authentication Error

    Raised when the channel key is not an "<access_key>|<secret_key>" pair
    or when the outbound token cannot be signed.
    """

    def __init__(
        self,
        message: str = "invalid_auth",
        code: str = "invalid_auth",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="authentication_error",
            code=code,
            details=details,
            status_code=401,
        )


class UnsupportedRequestError(AppError):
    """
    Unsupported Request Error

    Raised when a request kind has no SenseTime counterpart (image generation).
    """

    def __init__(
        self,
        message: str = "request is not supported",
        code: str = "unsupported_request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            code=code,
            details=details,
            status_code=400,
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Base class for failures while talking to SenseTime.
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        code: str = "upstream_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 502,
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            code=code,
            details=details,
            status_code=status_code,
        )


class UpstreamRequestError(UpstreamError):
    """Raised when the outbound request could not be sent."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 502,
    ):
        super().__init__(
            message=message,
            code="do_request_failed",
            details=details,
            status_code=status_code,
        )


class UpstreamReadError(UpstreamError):
    """Raised when reading the upstream response body fails."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="read_response_body_failed",
            details=details,
            status_code=500,
        )


class UpstreamCloseError(UpstreamError):
    """Raised when the upstream response body cannot be released."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="close_response_body_failed",
            details=details,
            status_code=500,
        )


class DecodeError(UpstreamError):
    """Raised when an upstream payload is not the expected JSON."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="unmarshal_response_body_failed",
            details=details,
            status_code=500,
        )


class EncodeError(AppError):
    """Raised when a normalized payload cannot be serialized."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_type="internal_error",
            code="marshal_response_body_failed",
            details=details,
            status_code=500,
        )


class VendorError(AppError):
    """
    Vendor Error

    Well-formed error payload returned by SenseTime. Passed through with the
    upstream HTTP status code instead of a fixed one.
    """

    def __init__(
        self,
        message: str,
        code: Union[str, int] = "",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="sensetime_error",
            code=code,
            details=details,
            status_code=status_code,
        )


class InvalidRequestError(AppError):
    """Raised when the inbound request body cannot be read as a normalized request."""

    def __init__(
        self,
        message: str = "invalid request",
        code: str = "invalid_request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            code=code,
            details=details,
            status_code=400,
        )
