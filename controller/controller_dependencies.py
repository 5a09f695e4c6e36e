# controller/controller_dependencies.py
import logging
import secrets
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Header, Request
from config.aws import get_s3_client, get_ses_client
from config.settings import settings
from core.notifier import NoopNotifier, Notifier, SesNotifier
from repository.storage_authority import S3StorageAuthority, StorageAuthority
from service.completion_service import CompletionService
from service.request_validation_service import RequestValidationService, UploadLimits
from service.ticket_service import TicketService
from util.constants import API_KEY_HEADER
from util.enums import ErrorMessage
from util.errors import Unauthorized

logger = logging.getLogger(__name__)


def get_storage_authority() -> StorageAuthority:
    return S3StorageAuthority(get_s3_client(), settings.BUCKET_NAME)


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    """
    SES when a sender and recipient are configured, else a no-op.
    A client that cannot be built disables notifications instead of the service.
    """
    if not settings.NOTIFICATIONS_ENABLED:
        logger.info("notify.disabled reason=unconfigured")
        return NoopNotifier()
    try:
        client = get_ses_client()
    except Exception as exc:
        logger.warning("notify.disabled reason=client_init err=%s", type(exc).__name__)
        return NoopNotifier()
    return SesNotifier(client, settings.SES_FROM, settings.SES_TO)


def get_validation_service() -> RequestValidationService:
    return RequestValidationService(
        UploadLimits(
            max_body_bytes=settings.MAX_BODY_BYTES,
            max_file_bytes=settings.MAX_FILE_BYTES,
            max_total_bytes=settings.MAX_TOTAL_BYTES,
        )
    )


def get_ticket_service(
    storage: StorageAuthority = Depends(get_storage_authority),
) -> TicketService:
    return TicketService(storage, ttl_seconds=settings.PRESIGN_TTL_SECONDS)


def get_completion_service(
    storage: StorageAuthority = Depends(get_storage_authority),
    notifier: Notifier = Depends(get_notifier),
) -> CompletionService:
    return CompletionService(
        storage,
        notifier,
        read_ttl_seconds=settings.PRESIGN_TTL_SECONDS,
        concurrency=settings.EXISTENCE_CHECK_CONCURRENCY,
    )


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
) -> None:
    if not settings.AUTH_ENABLED:
        return
    if not api_key:
        logger.warning(
            "auth.missing method=%s path=%s", request.method, request.url.path
        )
        raise Unauthorized(ErrorMessage.MISSING_API_KEY.value)
    if not secrets.compare_digest(api_key.encode(), settings.API_KEY.encode()):
        logger.warning(
            "auth.invalid method=%s path=%s", request.method, request.url.path
        )
        raise Unauthorized(ErrorMessage.INVALID_API_KEY.value)
