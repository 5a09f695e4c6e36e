# util/errors.py
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
from fastapi import HTTPException, status
from util.enums import ErrorInfo, ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status, code & message.
    def __init__(
        self,
        message: str,
        http_status: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        details: Optional[List[Any]] = None,
    ) -> None:
        super().__init__(status_code=http_status, detail=message)
        self.code = code
        self.message = message
        self.details = details

    @classmethod
    def from_info(cls, info: ErrorInfo, details: Optional[List[Any]] = None):
        return cls(info.message, info.http_status, info.code, details)

    def to_payload(self) -> dict:
        body = {"ok": False, "error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InputRejected(AppError):
    def __init__(self, errors: Iterable["FieldError"]) -> None:
        info = ErrorMessage.VALIDATION_ERROR.value
        super().__init__(
            info.message,
            info.http_status,
            info.code,
            [e.as_dict() for e in errors],
        )


class MissingObjects(AppError):
    def __init__(self, missing: Iterable[str]) -> None:
        info = ErrorMessage.MISSING_OBJECTS.value
        self.missing = list(missing)
        super().__init__(info.message, info.http_status, info.code, self.missing)


class AuthorizationFailed(AppError):
    def __init__(self, key: str = "") -> None:
        info = ErrorMessage.PRESIGN_FAILED.value
        self.key = key
        super().__init__(info.message, info.http_status, info.code)


class VerificationError(AppError):
    def __init__(self, key: str = "") -> None:
        info = ErrorMessage.VERIFICATION_FAILED.value
        self.key = key
        super().__init__(info.message, info.http_status, info.code)


class Unauthorized(AppError):
    def __init__(self, info: ErrorInfo = ErrorMessage.INVALID_API_KEY.value) -> None:
        super().__init__(info.message, info.http_status, info.code)


class StorageCheckError(Exception):
    """Existence check could not be answered (transport/auth), as opposed to 'not found'."""

    def __init__(self, key: str) -> None:
        super().__init__(f"existence check failed for {key}")
        self.key = key


class CapabilityError(Exception):
    """Storage could not issue a read/write capability for a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"capability issue failed for {key}")
        self.key = key


class NotificationFailed(Exception):
    """Notifier could not deliver. Logged by the caller, never surfaced over HTTP."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}
