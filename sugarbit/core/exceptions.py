"""
Custom exceptions for sugarbit.

Provides specific exception types with associated exit codes
for different failure modes. All exceptions support JSON serialization
for scripted use via the --json-errors flag.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional


class ExitCode:
    """Standard exit codes for sugarbit."""
    SUCCESS = 0
    GENERAL_ERROR = 1
    MALFORMED_PAYLOAD = 2
    FETCH_FAILED = 3
    INVALID_SCALE = 4


@dataclass
class MalformedTimestamp(Exception):
    """Raised when a reading key does not follow ``YYYY.MM.DD - HH:MM:SS``.

    Attributes:
        text: The offending timestamp text
        reason: What was wrong with it
    """
    text: str
    reason: str = "invalid layout"

    def __str__(self) -> str:
        return f"Malformed timestamp {self.text!r}: {self.reason}"

    @property
    def exit_code(self) -> int:
        return ExitCode.MALFORMED_PAYLOAD


@dataclass
class MalformedPayload(Exception):
    """Raised when a payload is not a mapping of timestamps to readings.

    Attributes:
        details: Human-readable explanation
        key: The entry that triggered the failure, if any
    """
    details: str
    key: Optional[str] = None

    def __str__(self) -> str:
        key_info = f" (entry {self.key!r})" if self.key is not None else ""
        return f"Malformed payload{key_info}: {self.details}"

    @property
    def exit_code(self) -> int:
        return ExitCode.MALFORMED_PAYLOAD


@dataclass
class InvalidScale(Exception):
    """Raised when the value axis ceiling is not strictly positive."""
    value_ceiling: float

    def __str__(self) -> str:
        return f"Invalid value axis ceiling: {self.value_ceiling} (must be > 0)"

    @property
    def exit_code(self) -> int:
        return ExitCode.INVALID_SCALE


@dataclass
class FetchFailed(Exception):
    """Raised when the readings endpoint cannot be fetched.

    Attributes:
        url: The URL that was requested
        reason: Transport or HTTP error description
        status_code: HTTP status, when a response was received
    """
    url: str
    reason: str
    status_code: Optional[int] = None

    def __str__(self) -> str:
        status_info = f" (HTTP {self.status_code})" if self.status_code else ""
        return f"Could not fetch {self.url}{status_info}: {self.reason}"

    @property
    def exit_code(self) -> int:
        return ExitCode.FETCH_FAILED


def exception_to_json(exc: Exception, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Convert an exception to a JSON-serializable dictionary.

    Args:
        exc: The exception to convert
        context: Optional additional context (url, tick, etc.)

    Returns:
        JSON-serializable dict with error details
    """
    error_dict: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": str(exc),
    }

    if hasattr(exc, "exit_code"):
        error_dict["exit_code"] = exc.exit_code
    else:
        error_dict["exit_code"] = ExitCode.GENERAL_ERROR

    if isinstance(exc, MalformedTimestamp):
        error_dict["text"] = exc.text
        error_dict["reason"] = exc.reason

    elif isinstance(exc, MalformedPayload):
        error_dict["details"] = exc.details
        if exc.key is not None:
            error_dict["key"] = exc.key

    elif isinstance(exc, InvalidScale):
        error_dict["value_ceiling"] = exc.value_ceiling

    elif isinstance(exc, FetchFailed):
        error_dict["url"] = exc.url
        error_dict["reason"] = exc.reason
        if exc.status_code is not None:
            error_dict["status_code"] = exc.status_code

    if context:
        error_dict["context"] = context

    return {"error": error_dict}


def format_json_error(exc: Exception, context: Optional[dict[str, Any]] = None) -> str:
    """Format an exception as a JSON string."""
    return json.dumps(exception_to_json(exc, context), indent=2, default=str)
