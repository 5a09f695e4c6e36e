# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Slot(str, Enum):
    """Logical objects inside one failure bundle."""

    ENVELOPE = "envelope"
    REQUEST_RAW = "requestRaw"
    REQUEST_HEADERS = "requestHeaders"
    RESPONSE_RAW = "responseRaw"
    CHECKSUMS = "checksums"
    FILE = "file"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Platform(str, Enum):
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"
    DESKTOP = "desktop"


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    VALIDATION_ERROR = ErrorInfo(
        "validation_error", "Validation failed", status.HTTP_400_BAD_REQUEST
    )
    MISSING_OBJECTS = ErrorInfo(
        "missing_objects",
        "Some objects were not found in storage",
        status.HTTP_400_BAD_REQUEST,
    )
    PRESIGN_FAILED = ErrorInfo(
        "presign_failed",
        "Failed to generate upload URLs",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    VERIFICATION_FAILED = ErrorInfo(
        "verification_failed",
        "Failed to verify uploaded objects",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    MISSING_API_KEY = ErrorInfo(
        "unauthorized", "Missing API key", status.HTTP_401_UNAUTHORIZED
    )
    INVALID_API_KEY = ErrorInfo(
        "unauthorized", "Invalid API key", status.HTTP_401_UNAUTHORIZED
    )
    RATE_LIMITED = ErrorInfo(
        "rate_limited",
        "Too many requests. Try again later.",
        status.HTTP_429_TOO_MANY_REQUESTS,
    )
    INTERNAL_ERROR = ErrorInfo(
        "internal_error", "Internal error", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
