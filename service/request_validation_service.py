# service/request_validation_service.py
import re
from dataclasses import dataclass
from typing import Final, List
from core import keys
from model.api import UploadCompleteRequest, UploadTicketRequest
from util.enums import HttpMethod, Platform
from util.errors import FieldError, InputRejected

PROJECT_RE: Final[re.Pattern] = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
ENV_RE: Final[re.Pattern] = re.compile(r"^[A-Za-z0-9_-]{1,32}$")
BUNDLE_ID_RE: Final[re.Pattern] = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
# One path segment: no separators, no control characters.
FILENAME_RE: Final[re.Pattern] = re.compile(r"^[^/\\\x00-\x1f\x7f]{1,255}$")

METHODS: Final[frozenset] = frozenset(m.value for m in HttpMethod)
PLATFORMS: Final[frozenset] = frozenset(p.value for p in Platform)


@dataclass(frozen=True)
class UploadLimits:
    max_body_bytes: int
    max_file_bytes: int
    max_total_bytes: int


class RequestValidationService:
    """
    Pre-condition gate in front of the ticket issuer and completion verifier.
    Collects every violation and raises InputRejected once.
    """

    def __init__(self, limits: UploadLimits) -> None:
        self._limits = limits

    def validate_ticket(self, req: UploadTicketRequest) -> None:
        errors = self.ticket_errors(req)
        if errors:
            raise InputRejected(errors)

    def validate_completion(self, req: UploadCompleteRequest) -> None:
        errors = self.completion_errors(req)
        if errors:
            raise InputRejected(errors)

    def ticket_errors(self, req: UploadTicketRequest) -> List[FieldError]:
        lim = self._limits
        errors: List[FieldError] = []
        _check_tag(errors, "project", req.project, PROJECT_RE, 64)
        _check_tag(errors, "env", req.env, ENV_RE, 32)

        r = req.request
        if not r.method:
            errors.append(FieldError("request.method", "required"))
        elif r.method.upper() not in METHODS:
            errors.append(FieldError("request.method", "invalid HTTP method"))

        if not r.url:
            errors.append(FieldError("request.url", "required"))
        elif not r.url.startswith(("http://", "https://")):
            errors.append(FieldError("request.url", "must be a valid HTTP(S) URL"))

        if r.bodyBytes < 0:
            errors.append(FieldError("request.bodyBytes", "cannot be negative"))
        elif r.bodyBytes > lim.max_body_bytes:
            errors.append(
                FieldError(
                    "request.bodyBytes",
                    f"exceeds maximum allowed size ({lim.max_body_bytes} bytes)",
                )
            )

        total_file_bytes = 0
        for i, f in enumerate(r.files):
            field = f"request.files[{i}]"
            if not f.filename:
                errors.append(FieldError(f"{field}.filename", "required"))
            elif f.filename in (".", "..") or not FILENAME_RE.fullmatch(f.filename):
                errors.append(
                    FieldError(
                        f"{field}.filename",
                        "must be a single path segment without control characters",
                    )
                )
            if f.size < 0:
                errors.append(FieldError(f"{field}.bytes", "cannot be negative"))
            elif f.size > lim.max_file_bytes:
                errors.append(
                    FieldError(
                        f"{field}.bytes",
                        f"exceeds maximum allowed size ({lim.max_file_bytes} bytes)",
                    )
                )
            total_file_bytes += max(f.size, 0)

        if max(r.bodyBytes, 0) + total_file_bytes > lim.max_total_bytes:
            errors.append(
                FieldError(
                    "totalBytes",
                    f"total upload size exceeds maximum ({lim.max_total_bytes} bytes)",
                )
            )

        platform = req.client.platform
        if platform and platform.lower() not in PLATFORMS:
            errors.append(
                FieldError(
                    "client.platform",
                    "must be one of: " + ", ".join(p.value for p in Platform),
                )
            )
        return errors

    def completion_errors(self, req: UploadCompleteRequest) -> List[FieldError]:
        errors: List[FieldError] = []
        if not req.failureId:
            errors.append(FieldError("failureId", "required"))
        elif not BUNDLE_ID_RE.fullmatch(req.failureId):
            errors.append(FieldError("failureId", "invalid format"))
        _check_tag(errors, "project", req.project, PROJECT_RE, 64)
        _check_tag(errors, "env", req.env, ENV_RE, 32)

        if not req.uploadedKeys:
            errors.append(FieldError("uploadedKeys", "required"))
            return errors
        if errors:
            # Namespace checks need a well-formed identity.
            return errors

        dates = set()
        for i, key in enumerate(req.uploadedKeys):
            d = keys.bundle_date_of(key, req.project, req.env, req.failureId)
            if d is None:
                errors.append(
                    FieldError(f"uploadedKeys[{i}]", "not part of this bundle")
                )
            else:
                dates.add(d)
        if len(dates) > 1:
            errors.append(
                FieldError("uploadedKeys", "keys span more than one bundle prefix")
            )
        return errors


def _check_tag(
    errors: List[FieldError], field: str, value: str, pattern: re.Pattern, max_len: int
) -> None:
    if not value:
        errors.append(FieldError(field, "required"))
    elif not pattern.fullmatch(value):
        errors.append(
            FieldError(
                field,
                f"invalid format (alphanumeric, underscore, hyphen, max {max_len} chars)",
            )
        )
