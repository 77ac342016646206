"""
Party Sheets - Custom Error Types
Structured exceptions with recovery hints for the frontend.
"""
from typing import Dict, Any, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the character service."""
    # General errors
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Character errors
    CHARACTER_NOT_FOUND = "CHARACTER_NOT_FOUND"
    CHARACTER_IMPORT_FAILED = "CHARACTER_IMPORT_FAILED"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # Storage errors
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


class SheetError(Exception):
    """
    Base exception for all character sheet errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Additional context details
    - Recovery hints for the frontend
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "An unexpected error occurred",
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None,
        http_status: int = 500
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# =============================================================================
# Import Errors
# =============================================================================

class MalformedInputError(SheetError):
    """Raised when an uploaded file is not a JSON object."""

    def __init__(self, reason: Optional[str] = None):
        details = {}
        if reason:
            details["reason"] = reason
        super().__init__(
            code=ErrorCode.CHARACTER_IMPORT_FAILED,
            message="Invalid file",
            details=details,
            http_status=400,
            recovery_hint="Upload a character JSON file exported from Foundry VTT"
        )


class FileTooLargeError(SheetError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            code=ErrorCode.FILE_TOO_LARGE,
            message="File is too large",
            details={"size": size, "limit": limit},
            http_status=413,
            recovery_hint="Export the character again or remove embedded images"
        )


# =============================================================================
# Character Errors
# =============================================================================

class CharacterNotFoundError(SheetError):
    """Raised when a stored character is not found."""

    def __init__(self, character_id: Optional[str] = None):
        details = {}
        if character_id:
            details["character_id"] = character_id
        super().__init__(
            code=ErrorCode.CHARACTER_NOT_FOUND,
            message="Character not found",
            details=details,
            http_status=404,
            recovery_hint="Upload the character again"
        )


# =============================================================================
# Storage Errors
# =============================================================================

class StorageError(SheetError):
    """Raised when the character store cannot be read or written."""

    def __init__(self, message: str = "Character storage is unavailable", **kwargs):
        kwargs.setdefault("code", ErrorCode.STORAGE_UNAVAILABLE)
        kwargs.setdefault("recovery_hint", "Please try again in a moment")
        super().__init__(message=message, http_status=503, **kwargs)
