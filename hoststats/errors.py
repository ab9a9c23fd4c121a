"""
Custom exceptions for hoststats.

This module provides the exception taxonomy used by the collection pipeline.
Every exception carries:
- A machine-readable error code
- Technical details for debugging
- An actionable suggestion for the operator

Each exception type maps to one failure policy:
- ConfigError: abort the run before any connection attempt
- EndpointConnectionError: isolate to the offending endpoint
- CollectionError: discard all records of the endpoint
- DisconnectWarning: log only
- SinkWriteError: fatal for the run, no rollback
"""

from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class ErrorCode(Enum):
    """Machine-readable error codes for hoststats errors."""
    # Configuration errors (1xx)
    CONFIG_FILE_NOT_FOUND = "E101"
    CONFIG_PARSE_ERROR = "E102"
    CONFIG_MISSING_REQUIRED = "E103"
    CONFIG_INVALID_VALUE = "E104"

    # Endpoint connection errors (2xx)
    CONNECT_INVALID_ADDRESS = "E201"
    CONNECT_AUTH_FAILED = "E202"
    CONNECT_UNREACHABLE = "E203"

    # Collection errors (3xx)
    COLLECT_DISCOVERY_FAILED = "E301"
    COLLECT_LOOKUP_FAILED = "E302"
    COLLECT_CANCELLED = "E303"

    # Disconnect warnings (4xx)
    DISCONNECT_FAILED = "E401"

    # Sink errors (5xx)
    SINK_NOT_WRITABLE = "E501"
    SINK_WRITE_FAILED = "E502"
    SINK_UNSUPPORTED_FORMAT = "E503"

    # Internal errors (9xx)
    INTERNAL_ERROR = "E901"


@dataclass
class HostStatsError:
    """
    Structured error information for hoststats.

    Attributes:
        code: Machine-readable error code.
        message: User-facing error message.
        details: Technical details for debugging.
        suggestion: How to fix the issue.
        context: Additional context information.
    """
    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        lines = [f"[{self.code.value}] {self.message}"]
        if self.details:
            lines.append(f"  Details: {self.details}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)


class HostStatsException(Exception):
    """
    Base exception class for hoststats.

    All custom exceptions inherit from this class and provide
    structured error information.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR,
                 details: str = "", suggestion: str = "", **context):
        self.error = HostStatsError(
            code=code,
            message=message,
            details=details,
            suggestion=suggestion,
            context=context
        )
        super().__init__(str(self.error))

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def suggestion(self) -> str:
        return self.error.suggestion


class ConfigError(HostStatsException):
    """
    Raised when the configuration is unreadable or malformed.

    Examples:
        - Configuration file not found
        - Invalid YAML/JSON syntax
        - Missing output path
        - Endpoint without a hostname
    """

    def __init__(self, message: str, path: str = None, parameter: str = None,
                 suggestion: str = None,
                 code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE):
        details_parts = []
        if path:
            details_parts.append(f"File: {path}")
        if parameter:
            details_parts.append(f"Parameter: {parameter}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts) if details_parts else "",
            suggestion=suggestion or self._default_suggestion(code),
            path=path,
            parameter=parameter
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.CONFIG_FILE_NOT_FOUND: "Verify the config file path exists or pass --config-file",
            ErrorCode.CONFIG_PARSE_ERROR: "Check config file syntax (YAML or JSON expected)",
            ErrorCode.CONFIG_MISSING_REQUIRED: "Add the missing key to the configuration file",
            ErrorCode.CONFIG_INVALID_VALUE: "Check the value and correct it",
        }
        return suggestions.get(code, "Check the configuration and try again")


class EndpointError(HostStatsException):
    """Base class for failures tied to a single endpoint."""

    def __init__(self, message: str, endpoint: str = None, cause: str = None,
                 suggestion: str = "", code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        details_parts = []
        if endpoint:
            details_parts.append(f"Endpoint: {endpoint}")
        if cause:
            details_parts.append(f"Cause: {cause}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts) if details_parts else "",
            suggestion=suggestion,
            endpoint=endpoint,
            cause=cause
        )
        self.endpoint = endpoint
        self.cause = cause


class EndpointConnectionError(EndpointError):
    """
    Raised when a session to an endpoint cannot be established.

    Covers bad addresses, rejected credentials and network failures. The
    endpoint contributes zero rows; other endpoints are unaffected.
    """

    def __init__(self, message: str, endpoint: str = None, cause: str = None,
                 suggestion: str = None,
                 code: ErrorCode = ErrorCode.CONNECT_UNREACHABLE):
        super().__init__(
            message=message,
            endpoint=endpoint,
            cause=cause,
            suggestion=suggestion or self._default_suggestion(code),
            code=code
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.CONNECT_INVALID_ADDRESS: "Check the endpoint hostname in the configuration",
            ErrorCode.CONNECT_AUTH_FAILED: "Verify the username and password for the endpoint",
            ErrorCode.CONNECT_UNREACHABLE: "Verify the endpoint is online and reachable on the configured port",
        }
        return suggestions.get(code, "Check endpoint connectivity")


class CollectionError(EndpointError):
    """
    Raised when host enumeration or a cluster lookup fails.

    All records gathered so far for the endpoint are discarded.
    """

    def __init__(self, message: str, endpoint: str = None, cause: str = None,
                 host: str = None, suggestion: str = None,
                 code: ErrorCode = ErrorCode.COLLECT_DISCOVERY_FAILED):
        super().__init__(
            message=message,
            endpoint=endpoint,
            cause=cause,
            suggestion=suggestion or self._default_suggestion(code),
            code=code
        )
        self.host = host

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.COLLECT_DISCOVERY_FAILED: "Check that the account can read HostSystem inventory",
            ErrorCode.COLLECT_LOOKUP_FAILED: "Check permissions on the cluster objects of the endpoint",
            ErrorCode.COLLECT_CANCELLED: "Re-run the collection when ready",
        }
        return suggestions.get(code, "Check the endpoint logs for details")


class DisconnectWarning(EndpointError):
    """
    Raised when releasing a session fails.

    Never affects records that were already collected.
    """

    def __init__(self, message: str, endpoint: str = None, cause: str = None):
        super().__init__(
            message=message,
            endpoint=endpoint,
            cause=cause,
            suggestion="The session will expire on the server side",
            code=ErrorCode.DISCONNECT_FAILED
        )


class SinkWriteError(HostStatsException):
    """
    Raised when the output destination cannot be written.

    Rows appended before the failure stay in the file.
    """

    def __init__(self, message: str, path: str = None, operation: str = None,
                 suggestion: str = None,
                 code: ErrorCode = ErrorCode.SINK_WRITE_FAILED):
        details_parts = []
        if path:
            details_parts.append(f"Path: {path}")
        if operation:
            details_parts.append(f"Operation: {operation}")

        super().__init__(
            message=message,
            code=code,
            details="; ".join(details_parts) if details_parts else "",
            suggestion=suggestion or self._default_suggestion(code),
            path=path,
            operation=operation
        )

    @staticmethod
    def _default_suggestion(code: ErrorCode) -> str:
        suggestions = {
            ErrorCode.SINK_NOT_WRITABLE: "Check that the output directory exists and is writable",
            ErrorCode.SINK_WRITE_FAILED: "Check free disk space and file permissions",
            ErrorCode.SINK_UNSUPPORTED_FORMAT: "Use an output path ending in .csv or .xlsx",
        }
        return suggestions.get(code, "Check the output path and try again")
