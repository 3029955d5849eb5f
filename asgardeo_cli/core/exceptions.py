"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every layer raises one of these, chaining the underlying cause with
``raise ... from``. The CLI prints the message and exits with ``exit_code``.
"""


class AsgardeoError(Exception):
    """Base exception for all asgardeo-cli errors."""

    exit_code = 1

    def __init__(self, message: str, code: str = "CLI_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigurationError(AsgardeoError):
    """Raised when settings, the base URL or the tenant cannot be resolved."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")


class SerializationError(AsgardeoError):
    """Raised when a request payload cannot be encoded as JSON."""

    def __init__(self, message: str = "Failed to encode request payload") -> None:
        super().__init__(message, code="REQ_SERIALIZATION_ERROR")


class TransportError(AsgardeoError):
    """Raised when the network exchange fails for a reason other than cancellation."""

    def __init__(self, message: str = "Failed to send the request") -> None:
        super().__init__(message, code="NET_TRANSPORT_ERROR")


class CancellationError(AsgardeoError):
    """Raised when the operation was cancelled or its deadline passed."""

    exit_code = 130

    def __init__(self, message: str = "operation cancelled", deadline_exceeded: bool = False) -> None:
        self.deadline_exceeded = deadline_exceeded
        super().__init__(message, code="OP_DEADLINE_EXCEEDED" if deadline_exceeded else "OP_CANCELLED")


class UpstreamError(AsgardeoError):
    """Raised when the server answers with a status code of 400 or above."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str | None = None,
        description: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.description = description
        self.trace_id = trace_id
        super().__init__(message, code="API_UPSTREAM_ERROR")

    def __str__(self) -> str:
        text = f"{self.status_code}: {self.message}"
        if self.description and self.description != self.message:
            text += f" ({self.description})"
        return text


class DecodeError(AsgardeoError):
    """Raised when a successful response body does not match the expected shape."""

    def __init__(self, message: str = "Failed to decode response payload") -> None:
        super().__init__(message, code="API_DECODE_ERROR")


class AuthenticationError(AsgardeoError):
    """Raised when no usable session exists for the selected tenant."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")
