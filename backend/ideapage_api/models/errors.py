"""Error models"""

from enum import Enum
from typing import Optional
import uuid


class ErrorCode(str, Enum):
    """Error codes surfaced to API clients"""
    RECORD_INVALID = "RECORD_INVALID"
    STORE_VERIFICATION_FAILED = "STORE_VERIFICATION_FAILED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ApplicationError(Exception):
    """Application error carrying an error code and a user-facing hint"""
    def __init__(self, code: ErrorCode, message: str, retryable: bool = False, hint: Optional[str] = None):
        self.error_id = str(uuid.uuid4())
        self.code = code
        self.message = message
        self.retryable = retryable
        self.hint = hint
        super().__init__(self.message)

    def model_dump(self):
        """Return dict representation for API responses"""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "retryable": self.retryable,
        }

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status"""
        mapping = {
            ErrorCode.RECORD_INVALID: 404,
            ErrorCode.STORE_VERIFICATION_FAILED: 500,
            ErrorCode.STORE_UNAVAILABLE: 503,
            ErrorCode.UPSTREAM_ERROR: 502,
            ErrorCode.CONFIGURATION_ERROR: 500,
        }
        return mapping.get(self.code, 500)


class RecordSchemaError(ApplicationError):
    """Stored or submitted record is missing required fields"""
    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(
            code=ErrorCode.RECORD_INVALID,
            message=message,
            retryable=False,
            hint="The landing page content is incomplete. Please generate it again.",
        )
        self.key = key


class StoreVerificationError(ApplicationError):
    """Read-back after a write did not match the written payload"""
    def __init__(self, key: str, reason: str):
        super().__init__(
            code=ErrorCode.STORE_VERIFICATION_FAILED,
            message=f"Stored content for {key} failed verification ({reason})",
            retryable=True,
            hint="Storage issue encountered. Please try again.",
        )
        self.key = key
        self.reason = reason


class StoreUnavailableError(ApplicationError):
    """Key-value backend could not be reached or rejected the command"""
    def __init__(self, message: str):
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
            retryable=True,
            hint="Storage is temporarily unavailable. Please try again shortly.",
        )
