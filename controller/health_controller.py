# controller/health_controller.py
from datetime import datetime, timezone
from fastapi import APIRouter
from model.api import HealthResponse
from util.constants import InternalURIs

health_router = APIRouter()


@health_router.get(InternalURIs.HEALTH, response_model=HealthResponse)
async def health() -> HealthResponse:
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return HealthResponse(
        ok=True, status="healthy", time=now.isoformat().replace("+00:00", "Z")
    )
