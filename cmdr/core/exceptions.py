"""
Exception classes for cmdr.

Every failure inside the renderer and the runner is raised as a subclass of
CmdrError. Runner failures carry the partially populated Runtime in
``result`` so callers can inspect what was set before the failing step.
"""

from typing import Any, Dict, Optional


class CmdrError(Exception):
    """Base exception class for all cmdr errors."""

    error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize cmdr error.

        Args:
            message: Human-readable error message
            error_code: Optional error code overriding the class default
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        self.result = None

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class TemplateSyntaxError(CmdrError):
    """Raised for malformed optional-bracket nesting."""

    error_code = "SYNTAX"


class IncompleteParametersError(CmdrError):
    """Raised when a required placeholder was not supplied."""

    error_code = "INCOMPLETE"


class NoSuchFileError(CmdrError):
    """Raised when a glob matches nothing or an executable cannot be found."""

    error_code = "NO_SUCH_FILE"


class MustBeRootError(CmdrError):
    """Raised when impersonation is requested without superuser privileges."""

    error_code = "MUST_BE_ROOT"


class UserLookupError(CmdrError):
    """Raised when a user name cannot be resolved."""

    error_code = "USER_LOOKUP"


class SpawnError(CmdrError):
    """Raised when pipes cannot be created or the child cannot be started."""

    error_code = "SPAWN"


class StreamError(CmdrError):
    """Raised when waiting on the child or draining its pipes fails."""

    error_code = "STREAM"


class CommandTimeoutError(CmdrError):
    """Raised when a deadline expires before the command finishes."""

    error_code = "TIMEOUT"


class ConfigError(CmdrError):
    """Exception raised for configuration-related errors."""

    error_code = "CONFIG"
