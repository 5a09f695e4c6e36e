# controller/upload_controller.py
from fastapi import APIRouter, Depends, status
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from controller.controller_dependencies import (
    get_completion_service,
    get_ticket_service,
    get_validation_service,
    require_api_key,
)
from model.api import (
    ErrorResponse,
    UploadCompleteRequest,
    UploadCompleteResponse,
    UploadTicketRequest,
    UploadTicketResponse,
)
from service.completion_service import CompletionService
from service.request_validation_service import RequestValidationService
from service.ticket_service import TicketService
from util.constants import InternalURIs

_router_dependencies = [Depends(require_api_key)]
if settings.RATE_LIMIT_ENABLED:
    _router_dependencies.append(
        Depends(
            RateLimiter(
                times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
            )
        )
    )

upload_router = APIRouter(dependencies=_router_dependencies)


@upload_router.post(
    InternalURIs.UPLOAD_TICKET,
    response_model=UploadTicketResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Request failed validation"},
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        500: {"model": ErrorResponse, "description": "Upload URLs could not be issued"},
    },
)
async def upload_ticket(
    payload: UploadTicketRequest,
    validator: RequestValidationService = Depends(get_validation_service),
    service: TicketService = Depends(get_ticket_service),
) -> UploadTicketResponse:
    validator.validate_ticket(payload)
    ticket = await service.issue_ticket(payload)
    return UploadTicketResponse.from_ticket(ticket)


@upload_router.post(
    InternalURIs.UPLOAD_COMPLETE,
    response_model=UploadCompleteResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid claim or objects missing"},
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
        500: {"model": ErrorResponse, "description": "Storage could not be checked"},
    },
)
async def upload_complete(
    payload: UploadCompleteRequest,
    validator: RequestValidationService = Depends(get_validation_service),
    service: CompletionService = Depends(get_completion_service),
) -> UploadCompleteResponse:
    validator.validate_completion(payload)
    await service.complete_bundle(payload.to_claim())
    return UploadCompleteResponse()
